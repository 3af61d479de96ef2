"""
Developer app registry and connection service.

Members of the platform may register client applications ("apps") that act
on behalf of other members. Each registered app is issued an API key and a
secret that identify it to the platform. When a member approves an app, a
connection is established and the app receives an access token that it
presents on subsequent requests for protected resources.

The :mod:`appregistry.apps` module supports developers in managing their
registered apps, and :mod:`appregistry.connections` supports the
authorization, lookup, and revocation of app connections. Both rely on
:mod:`appregistry.services.datastore` for persistence and on
:mod:`appregistry.credentials` to issue unguessable keys and tokens.

Request handling (forms, OAuth framing, etc) is the responsibility of the
surrounding application; see :func:`appregistry.factory.create_web_app`.
"""
