"""
Authorization, lookup, and revocation of connections between apps and members.

A connection is created only after a member approves an app. The app receives
an access token that it presents on every subsequent request for a protected
resource, so :func:`find_by_access_token` is a single keyed lookup.

An account has at most one active connection to any given app. If the member
approves the app again, the existing connection (and its access token) is
returned unchanged rather than issuing a second token. When two approvals
race, the datastore rejects the second insert on the (app, account) unique
key and the loser returns the winner's connection.
"""

import logging
from datetime import datetime
from typing import List

from pytz import UTC

from . import apps, credentials, domain
from .exceptions import CredentialExhaustion, DuplicateKey, NoSuchConnection
from .services import datastore

logger = logging.getLogger(__name__)


def connect(account_id: str, api_key: str) -> domain.AppConnection:
    """
    Connect a member account to the app that was issued an API key.

    Called only after the member has authorized the app.

    Parameters
    ----------
    account_id : str
        The member account granting access.
    api_key : str
        The key submitted by the app on behalf of the member.

    Returns
    -------
    :class:`domain.AppConnection`
        Includes the access token to be sent back to the app.

    Raises
    ------
    :class:`.InvalidApiKey`
        If no app has been issued ``api_key``.
    :class:`.CredentialExhaustion`
        If a unique access token could not be generated.

    """
    app = apps.find_by_api_key(api_key)
    try:
        existing = datastore.load_connection_for(app.app_id, account_id)
        logger.debug('Account %s already connected to app %s',
                     account_id, app.app_id)
        return existing
    except NoSuchConnection:
        pass

    attempts = credentials.max_attempts()
    for attempt in range(1, attempts + 1):
        connection = domain.AppConnection(
            app_id=app.app_id,
            account_id=account_id,
            access_token=credentials.new_access_token(),
            created=datetime.now(tz=UTC)
        )
        try:
            connection = datastore.insert_connection(connection)
        except DuplicateKey as e:
            if e.key == 'app_account':
                logger.debug('Concurrent connection of account %s to app %s',
                             account_id, app.app_id)
                return datastore.load_connection_for(app.app_id, account_id)
            logger.warning('Access token %s was issued concurrently'
                           ' (attempt %i of %i)',
                           credentials.redact(connection.access_token),
                           attempt, attempts)
            continue
        logger.debug('Connected account %s to app %s',
                     account_id, app.app_id)
        return connection
    raise CredentialExhaustion(f'Could not issue a unique access token in'
                               f' {attempts} attempts')


def find_by_access_token(access_token: str) -> domain.AppConnection:
    """
    Find the connection to which an access token was assigned.

    Called when an app makes a request for a protected resource.

    Raises
    ------
    :class:`.NoSuchConnection`
        If the token was never issued, or the connection was severed by
        disconnection or by deletion of the app.

    """
    return datastore.load_connection(access_token)


def disconnect(account_id: str, access_token: str) -> None:
    """
    Sever the connection that was assigned an access token.

    Called by the member (or an administrator acting for the member) to revoke
    access by the app. The token is retired and will never be reissued. If
    there is no such connection for the account, this does nothing.
    """
    if datastore.delete_connection(account_id, access_token):
        logger.debug('Disconnected account %s from token %s',
                     account_id, credentials.redact(access_token))
    else:
        logger.debug('Account %s has no connection with token %s',
                     account_id, credentials.redact(access_token))


def list_for_account(account_id: str) -> List[domain.AppConnection]:
    """Get the active connections of a member account."""
    return datastore.list_connections(account_id=account_id)


def list_for_app(account_id: str, slug: str) -> List[domain.AppConnection]:
    """
    Get the active connections to an app.

    Only the owner of the app may see its connections.

    Raises
    ------
    :class:`.NoSuchApp`

    """
    app = apps.get_by_slug(account_id, slug)
    return datastore.list_connections(app_id=app.app_id)
