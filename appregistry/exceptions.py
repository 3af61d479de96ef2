"""Exceptions raised by the app registry and connection authorizer."""

from typing import Dict, List, Optional


class NoSuchApp(RuntimeError):
    """An app was requested that does not exist, or is not owned by caller."""


class InvalidApiKey(RuntimeError):
    """The API key (or key/secret pair) provided by a client is not valid."""


class NoSuchConnection(RuntimeError):
    """There is no active connection for the provided access token."""


class ValidationFailed(ValueError):
    """Submitted app form data is not valid."""

    def __init__(self, message: str,
                 errors: Optional[Dict[str, List[str]]] = None) -> None:
        """Attach field-level error messages."""
        super(ValidationFailed, self).__init__(message)
        self.errors = errors or {}


class DuplicateKey(RuntimeError):
    """An insert collided with an existing value on a unique key."""

    def __init__(self, key: str, message: Optional[str] = None) -> None:
        """Record the name of the unique key that was violated."""
        super(DuplicateKey, self).__init__(
            message or f'Duplicate value for unique key {key}'
        )
        self.key = key


class CredentialExhaustion(RuntimeError):
    """Could not generate a unique credential within the retry limit."""
