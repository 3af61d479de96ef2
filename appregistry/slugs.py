"""Derivation of short, meaningful keys (slugs) from app names."""

import re
import unicodedata
from typing import Container, Iterator

SEPARATOR = '-'
MAX_LENGTH = 200
"""Leaves room for a disambiguating suffix in a 255-character column."""

DEFAULT = 'app'
"""Used when a name contains no usable characters at all."""


def slugify(name: str) -> str:
    """
    Derive a candidate slug from an app name.

    The name is lower-cased, accented characters are reduced to their ASCII
    base, and each run of non-alphanumeric characters is replaced with a
    single separator.

    Parameters
    ----------
    name : str

    Returns
    -------
    str

    """
    ascii_name = unicodedata.normalize('NFKD', name) \
        .encode('ascii', 'ignore') \
        .decode('ascii')
    slug = re.sub(r'[^a-z0-9]+', SEPARATOR, ascii_name.lower())
    slug = slug.strip(SEPARATOR)[:MAX_LENGTH].rstrip(SEPARATOR)
    return slug or DEFAULT


def candidates(base: str) -> Iterator[str]:
    """Generate ``base``, then ``base-2``, ``base-3``, etc."""
    yield base
    counter = 2
    while True:
        yield f'{base}{SEPARATOR}{counter}'
        counter += 1


def disambiguate(base: str, taken: Container[str]) -> str:
    """Get the first candidate derived from ``base`` that is not ``taken``."""
    return next(slug for slug in candidates(base) if slug not in taken)
