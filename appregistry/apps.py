"""
Registration and management of apps by their developers.

Every operation that addresses an app by slug is scoped to the account that
owns it. A developer asking for a slug that belongs to someone else gets the
same :class:`.NoSuchApp` as for a slug that does not exist at all.

Slugs are derived from app names (see :mod:`.slugs`) and must be unique
across all apps. When a derived slug is already taken, a counter is appended
(``my-app``, ``my-app-2``, ...). Two concurrent registrations may still pick
the same candidate; the datastore rejects the second insert, and we move on
to the next candidate.
"""

import hmac
import logging
from typing import List

from . import credentials, domain, slugs
from .exceptions import DuplicateKey, InvalidApiKey, NoSuchApp, \
    ValidationFailed
from .forms import AppForm
from .services import datastore

logger = logging.getLogger(__name__)


def list_summaries(account_id: str) -> List[domain.AppSummary]:
    """
    Get a short summary of all the apps that the account has registered.

    Parameters
    ----------
    account_id : str

    Returns
    -------
    list
        Items are :class:`domain.AppSummary`, in order of registration.

    """
    return [domain.summarize(app) for app in datastore.list_apps(account_id)]


def get_by_slug(account_id: str, slug: str) -> domain.App:
    """
    Get a detailed view of a single app that the account has registered.

    Raises
    ------
    :class:`.NoSuchApp`
        If there is no such app, or it is owned by another account.

    """
    return datastore.load_app_by_slug(account_id, slug)


def get_new_form(account_id: str) -> AppForm:
    """Get a blank :class:`.AppForm` for registering a new app."""
    return AppForm.new()


def get_form(account_id: str, slug: str) -> AppForm:
    """Get an :class:`.AppForm` pre-filled with an existing app's details."""
    return AppForm.from_domain(get_by_slug(account_id, slug))


def create(account_id: str, form: AppForm) -> str:
    """
    Register a new app using a form submitted by a member.

    The API key and secret are generated here. The submitting member becomes
    the owner of the app.

    Parameters
    ----------
    account_id : str
    form : :class:`.AppForm`

    Returns
    -------
    str
        The slug of the new app.

    Raises
    ------
    :class:`.ValidationFailed`
        If the form is not valid.
    :class:`.CredentialExhaustion`
        If unique credentials could not be generated.
    :class:`.DuplicateKey`
        If a unique slug could not be claimed within the retry limit.

    """
    fields = _validate(form)
    base = slugs.slugify(fields['name'])
    api_key = credentials.new_api_key()
    secret = credentials.new_secret()
    attempts = credentials.max_attempts()
    for attempt in range(1, attempts + 1):
        slug = slugs.disambiguate(base, datastore.taken_slugs(base))
        try:
            app = datastore.insert_app(domain.App(
                slug=slug,
                api_key=api_key,
                secret=secret,
                owner_id=account_id,
                **fields
            ))
        except DuplicateKey as e:
            logger.debug('Could not register app as %s: duplicate %s',
                         slug, e.key)
            if attempt == attempts:
                raise
            if e.key == 'api_key':
                api_key = credentials.new_api_key()
            elif e.key == 'secret':
                secret = credentials.new_secret()
            continue
        logger.debug('Registered app %s for account %s',
                     app.app_id, account_id)
        break
    return app.slug


def update(account_id: str, slug: str, form: AppForm) -> str:
    """
    Update the details of an app using a form submitted by its developer.

    If the name of the app has changed, a new slug is derived from the new
    name. The app is only addressable by the returned slug thereafter. The API
    key and secret are never changed.

    Returns
    -------
    str
        The (possibly new) slug of the app.

    Raises
    ------
    :class:`.NoSuchApp`
    :class:`.ValidationFailed`

    """
    app = get_by_slug(account_id, slug)
    fields = _validate(form)
    attempts = credentials.max_attempts()
    for attempt in range(1, attempts + 1):
        new_slug = app.slug
        if fields['name'] != app.name:
            base = slugs.slugify(fields['name'])
            new_slug = slugs.disambiguate(
                base, datastore.taken_slugs(base, exclude_app_id=app.app_id)
            )
        try:
            updated = datastore.update_app(
                app._replace(slug=new_slug, **fields)
            )
        except DuplicateKey:
            logger.debug('Could not claim %s for app %s', new_slug, app.app_id)
            if attempt == attempts:
                raise
            continue
        break
    if updated.slug != slug:
        logger.debug('App %s renamed from %s to %s',
                     app.app_id, slug, updated.slug)
    return updated.slug


def delete(account_id: str, slug: str) -> None:
    """
    Delete an app that the account has registered.

    All connections to the app are deleted along with it, so that their
    access tokens can no longer be used.

    Raises
    ------
    :class:`.NoSuchApp`

    """
    app = get_by_slug(account_id, slug)
    datastore.delete_app(app.app_id)
    logger.debug('Deleted app %s owned by %s', app.app_id, account_id)


def find_by_api_key(api_key: str) -> domain.App:
    """
    Get the app that was issued an API key.

    This is used on behalf of a client presenting its own key, so there is no
    ownership check.

    Raises
    ------
    :class:`.InvalidApiKey`

    """
    try:
        return datastore.load_app_by_api_key(api_key)
    except NoSuchApp as e:
        logger.debug('No app for API key %s', credentials.redact(api_key))
        raise InvalidApiKey('Invalid API key') from e


def check_secret(api_key: str, secret: str) -> domain.App:
    """
    Authenticate an app by its API key and secret.

    Raises
    ------
    :class:`.InvalidApiKey`
        If the key is unknown, or the secret is wrong. The two cases are
        not distinguished.

    """
    app = find_by_api_key(api_key)
    if not hmac.compare_digest(app.secret.encode('utf-8'),
                               secret.encode('utf-8')):
        logger.debug('Wrong secret for API key %s',
                     credentials.redact(api_key))
        raise InvalidApiKey('Invalid API key')
    return app


def _validate(form: AppForm) -> dict:
    if not form.validate():
        logger.debug('App form not valid: %s', form.errors)
        raise ValidationFailed('Invalid app form', errors=form.errors)
    return form.to_dict()
