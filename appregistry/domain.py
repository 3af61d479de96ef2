"""Core domain classes for the app registry."""

from datetime import datetime
from typing import NamedTuple, Optional


class App(NamedTuple):
    """A client application registered by a developer."""

    slug: str
    """Short, meaningful key that identifies the app in user-facing URLs."""

    name: str
    """Display name of the app."""

    api_key: str
    """Public key that identifies the app to the platform."""

    secret: str
    """Secret key that the app uses to prove its identity."""

    owner_id: str
    """The account that registered the app; its first developer."""

    description: str = ''
    """Description of the app, provided by the developer."""

    website: str = ''
    """The app's homepage."""

    callback_url: str = ''
    """URL to which members are returned after authorizing the app."""

    app_id: Optional[str] = None
    """Internal identifier, assigned by the datastore."""

    created: Optional[datetime] = None
    """The date/time when the app was registered."""


class AppSummary(NamedTuple):
    """A short summary of an :class:`App`, used for listings."""

    app_id: str
    slug: str
    name: str


class AppConnection(NamedTuple):
    """An authorization granted by a member account to an :class:`App`."""

    app_id: str
    """The app that is granted access."""

    account_id: str
    """The member account that granted access."""

    access_token: str
    """Token that the app presents on requests for protected resources."""

    created: datetime
    """The date/time when the connection was established."""

    connection_id: Optional[str] = None
    """Internal identifier, assigned by the datastore."""


def summarize(app: App) -> AppSummary:
    """Generate an :class:`AppSummary` for an :class:`App`."""
    return AppSummary(app_id=app.app_id, slug=app.slug, name=app.name)
