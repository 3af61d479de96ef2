"""
Database integration for persisting apps and app connections.

Uniqueness of slugs, API keys, secrets, and access tokens is enforced by
unique indexes in the database rather than by checking before writing. A
write that violates one of those indexes is rolled back, and a
:class:`.DuplicateKey` exception is raised that names the violated key so that
the caller can decide how to recover.
"""

import hashlib
from typing import Any, List, Optional, Set

from sqlalchemy.exc import IntegrityError

from . import util, models
from ... import domain
from ...exceptions import NoSuchApp, NoSuchConnection, DuplicateKey

init_app = util.init_app
create_all = util.create_all
drop_all = util.drop_all
transaction = util.transaction


def insert_app(app: domain.App) -> domain.App:
    """
    Persist a new :class:`domain.App`.

    Parameters
    ----------
    app : :class:`domain.App`
        Must not already have an ``app_id``.

    Returns
    -------
    :class:`domain.App`
        The persisted app, with ``app_id`` and ``created`` set.

    Raises
    ------
    :class:`.DuplicateKey`
        If the slug, API key, or secret is already in use.

    """
    db_app = models.DBApp(
        owner_id=app.owner_id,
        slug=app.slug,
        name=app.name,
        description=app.description,
        website=app.website,
        callback_url=app.callback_url,
        api_key=app.api_key,
        secret=app.secret
    )
    try:
        with util.transaction() as dbsession:
            dbsession.add(db_app)
    except IntegrityError as e:
        raise DuplicateKey(_conflicting_app_key(app)) from e
    return _to_domain_app(db_app)


def update_app(app: domain.App) -> domain.App:
    """
    Update the mutable fields of an existing :class:`domain.App`.

    The API key and secret are never changed here.

    Raises
    ------
    :class:`.NoSuchApp`
        If there is no app with ``app.app_id``.
    :class:`.DuplicateKey`
        If the new slug is in use by another app.

    """
    try:
        with util.transaction() as dbsession:
            db_app = _load_dbapp(app.app_id, dbsession)
            db_app.slug = app.slug
            db_app.name = app.name
            db_app.description = app.description
            db_app.website = app.website
            db_app.callback_url = app.callback_url
            dbsession.add(db_app)
    except IntegrityError as e:
        raise DuplicateKey('slug') from e
    return _to_domain_app(db_app)


def delete_app(app_id: str) -> None:
    """Delete an app, along with all of its connections."""
    with util.transaction() as dbsession:
        db_app = _load_dbapp(app_id, dbsession)
        _retire(list(db_app.connections), dbsession)
        dbsession.delete(db_app)


def load_app(app_id: str) -> domain.App:
    """Load an :class:`domain.App` by its internal identifier."""
    with util.transaction() as dbsession:
        return _to_domain_app(_load_dbapp(app_id, dbsession))


def load_app_by_slug(owner_id: str, slug: str) -> domain.App:
    """
    Load an :class:`domain.App` owned by a particular account.

    Raises
    ------
    :class:`.NoSuchApp`
        If no app with ``slug`` exists, or if it is owned by someone else.

    """
    with util.transaction() as dbsession:
        db_app = dbsession.query(models.DBApp) \
            .filter(models.DBApp.slug == slug) \
            .filter(models.DBApp.owner_id == owner_id) \
            .first()
        if db_app is not None:
            return _to_domain_app(db_app)
    raise NoSuchApp(f'App {slug} does not exist for owner {owner_id}')


def load_app_by_api_key(api_key: str) -> domain.App:
    """Load the :class:`domain.App` that was issued ``api_key``."""
    with util.transaction() as dbsession:
        db_app = dbsession.query(models.DBApp) \
            .filter(models.DBApp.api_key == api_key) \
            .first()
        if db_app is not None:
            return _to_domain_app(db_app)
    raise NoSuchApp('No app with that API key')


def list_apps(owner_id: str) -> List[domain.App]:
    """Load all of the apps owned by an account, in order of registration."""
    with util.transaction() as dbsession:
        return [_to_domain_app(db_app) for db_app
                in dbsession.query(models.DBApp)
                .filter(models.DBApp.owner_id == owner_id)
                .order_by(models.DBApp.app_id)]


def taken_slugs(base: str, exclude_app_id: Optional[str] = None) -> Set[str]:
    """
    Get the slugs that might collide with candidates derived from ``base``.

    This includes ``base`` itself and any slug of the form ``{base}-{suffix}``.
    The slug of the app identified by ``exclude_app_id`` is not included.
    """
    with util.transaction() as dbsession:
        query = dbsession.query(models.DBApp.slug) \
            .filter((models.DBApp.slug == base)
                    | models.DBApp.slug.like(f'{base}-%'))
        if exclude_app_id is not None:
            query = query.filter(models.DBApp.app_id != int(exclude_app_id))
        return {slug for slug, in query}


def api_key_exists(api_key: str) -> bool:
    """Determine whether an API key has already been issued."""
    return _exists(models.DBApp, models.DBApp.api_key == api_key)


def secret_exists(secret: str) -> bool:
    """Determine whether a secret has already been issued."""
    return _exists(models.DBApp, models.DBApp.secret == secret)


def insert_connection(connection: domain.AppConnection) \
        -> domain.AppConnection:
    """
    Persist a new :class:`domain.AppConnection`.

    Raises
    ------
    :class:`.DuplicateKey`
        ``key`` is ``app_account`` if the account is already connected to the
        app, or ``access_token`` if the token is already in use.

    """
    db_connection = models.DBAppConnection(
        app_id=int(connection.app_id),
        account_id=connection.account_id,
        access_token=connection.access_token,
        created=connection.created
    )
    try:
        with util.transaction() as dbsession:
            dbsession.add(db_connection)
    except IntegrityError as e:
        if _exists(models.DBAppConnection,
                   models.DBAppConnection.app_id == int(connection.app_id),
                   models.DBAppConnection.account_id == connection.account_id):
            raise DuplicateKey('app_account') from e
        raise DuplicateKey('access_token') from e
    return _to_domain_connection(db_connection)


def load_connection(access_token: str) -> domain.AppConnection:
    """
    Load the active :class:`domain.AppConnection` for an access token.

    Raises
    ------
    :class:`.NoSuchConnection`
        The message does not reveal whether the token was ever issued.

    """
    with util.transaction() as dbsession:
        db_connection = dbsession.query(models.DBAppConnection) \
            .filter(models.DBAppConnection.access_token == access_token) \
            .first()
        if db_connection is not None:
            return _to_domain_connection(db_connection)
    raise NoSuchConnection('No such connection')


def load_connection_for(app_id: str, account_id: str) -> domain.AppConnection:
    """Load the active connection between an app and an account."""
    with util.transaction() as dbsession:
        db_connection = dbsession.query(models.DBAppConnection) \
            .filter(models.DBAppConnection.app_id == int(app_id)) \
            .filter(models.DBAppConnection.account_id == account_id) \
            .first()
        if db_connection is not None:
            return _to_domain_connection(db_connection)
    raise NoSuchConnection(f'Account {account_id} is not connected'
                           f' to app {app_id}')


def list_connections(account_id: Optional[str] = None,
                     app_id: Optional[str] = None) \
        -> List[domain.AppConnection]:
    """List active connections for an account and/or an app."""
    with util.transaction() as dbsession:
        query = dbsession.query(models.DBAppConnection)
        if account_id is not None:
            query = query.filter(
                models.DBAppConnection.account_id == account_id
            )
        if app_id is not None:
            query = query.filter(models.DBAppConnection.app_id == int(app_id))
        query = query.order_by(models.DBAppConnection.connection_id)
        return [_to_domain_connection(db_connection)
                for db_connection in query]


def delete_connection(account_id: str, access_token: str) -> bool:
    """
    Delete the connection for an access token, if held by ``account_id``.

    The access token is retired, so that it will never be issued again.

    Returns
    -------
    bool
        ``True`` if a connection was deleted.

    """
    with util.transaction() as dbsession:
        db_connection = dbsession.query(models.DBAppConnection) \
            .filter(models.DBAppConnection.access_token == access_token) \
            .filter(models.DBAppConnection.account_id == account_id) \
            .first()
        if db_connection is None:
            return False
        _retire([db_connection], dbsession)
    return True


def delete_connections_for_app(app_id: str) -> int:
    """Delete all connections to an app. Returns the number deleted."""
    with util.transaction() as dbsession:
        db_connections = dbsession.query(models.DBAppConnection) \
            .filter(models.DBAppConnection.app_id == int(app_id)) \
            .all()
        _retire(db_connections, dbsession)
    return len(db_connections)


def access_token_exists(access_token: str) -> bool:
    """Determine whether an access token is in use, or has been retired."""
    return _exists(models.DBAppConnection,
                   models.DBAppConnection.access_token == access_token) \
        or _exists(models.DBRetiredToken,
                   models.DBRetiredToken.token_hash == _hash(access_token))


def _retire(db_connections: List[models.DBAppConnection],
            dbsession: util.Session) -> None:
    for db_connection in db_connections:
        dbsession.add(models.DBRetiredToken(
            token_hash=_hash(db_connection.access_token)
        ))
        dbsession.delete(db_connection)


def _hash(access_token: str) -> str:
    return hashlib.sha256(access_token.encode('utf-8')).hexdigest()


def _exists(model: type, *criteria: Any) -> bool:
    with util.transaction() as dbsession:
        return dbsession.query(model).filter(*criteria).first() is not None


def _conflicting_app_key(app: domain.App) -> str:
    if _exists(models.DBApp, models.DBApp.slug == app.slug):
        return 'slug'
    if api_key_exists(app.api_key):
        return 'api_key'
    if secret_exists(app.secret):
        return 'secret'
    return 'app'


def _load_dbapp(app_id: Optional[str], dbsession: util.Session) \
        -> models.DBApp:
    db_app: Optional[models.DBApp] = None
    if app_id is not None:
        db_app = dbsession.query(models.DBApp) \
            .filter(models.DBApp.app_id == int(app_id)) \
            .first()
    if db_app is None:
        raise NoSuchApp(f'App {app_id} does not exist')
    return db_app


def _to_domain_app(db_app: models.DBApp) -> domain.App:
    return domain.App(
        app_id=str(db_app.app_id),
        owner_id=str(db_app.owner_id),
        slug=db_app.slug,
        name=db_app.name,
        description=db_app.description or '',
        website=db_app.website or '',
        callback_url=db_app.callback_url or '',
        api_key=db_app.api_key,
        secret=db_app.secret,
        created=db_app.created
    )


def _to_domain_connection(db_connection: models.DBAppConnection) \
        -> domain.AppConnection:
    return domain.AppConnection(
        connection_id=str(db_connection.connection_id),
        app_id=str(db_connection.app_id),
        account_id=str(db_connection.account_id),
        access_token=db_connection.access_token,
        created=db_connection.created
    )
