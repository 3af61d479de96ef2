"""
Generation of API keys, secrets, and access tokens.

Credentials are drawn from the operating system's secure random source, using
an alphanumeric alphabet (62 symbols, so roughly 5.95 bits per character).
Each new credential is checked against the datastore before it is handed out;
a collision is never expected, and repeated collisions indicate a broken
random source or datastore.
"""

import logging
from typing import Callable

from authlib.common.security import generate_token
from flask import current_app

from .exceptions import CredentialExhaustion
from .services import datastore

logger = logging.getLogger(__name__)

DEFAULT_API_KEY_LENGTH = 32
DEFAULT_SECRET_LENGTH = 48
DEFAULT_ACCESS_TOKEN_LENGTH = 48
DEFAULT_MAX_ATTEMPTS = 5


def new_api_key() -> str:
    """Generate an API key that has not been issued to any app."""
    length = current_app.config.get('API_KEY_LENGTH', DEFAULT_API_KEY_LENGTH)
    return _generate('API key', length, datastore.api_key_exists)


def new_secret() -> str:
    """Generate a secret that has not been issued to any app."""
    length = current_app.config.get('SECRET_LENGTH', DEFAULT_SECRET_LENGTH)
    return _generate('secret', length, datastore.secret_exists)


def new_access_token() -> str:
    """Generate an access token that is not held by any connection."""
    length = current_app.config.get('ACCESS_TOKEN_LENGTH',
                                    DEFAULT_ACCESS_TOKEN_LENGTH)
    return _generate('access token', length, datastore.access_token_exists)


def max_attempts() -> int:
    """Get the number of draws or inserts to attempt before giving up."""
    attempts: int = current_app.config.get('CREDENTIAL_MAX_ATTEMPTS',
                                           DEFAULT_MAX_ATTEMPTS)
    return attempts


def redact(credential: str) -> str:
    """Get a loggable fragment of a credential."""
    return f'{credential[:4]}...'


def _generate(kind: str, length: int, exists: Callable[[str], bool]) -> str:
    attempts = max_attempts()
    for attempt in range(1, attempts + 1):
        candidate = generate_token(length)
        if not exists(candidate):
            return candidate
        logger.warning('Generated %s %s already exists (attempt %i of %i)',
                       kind, redact(candidate), attempt, attempts)
    raise CredentialExhaustion(f'Could not generate a unique {kind} in'
                               f' {attempts} attempts')
