"""Tests for :mod:`appregistry.connections`."""

from unittest import TestCase, mock

from .. import apps, connections, credentials
from ..exceptions import CredentialExhaustion, InvalidApiKey, NoSuchApp, \
    NoSuchConnection
from ..services import datastore
from .util import temporary_db, app_form


class TestConnectionScenario(TestCase):
    """Two developers register apps with the same name; a member connects."""

    def test_scenario(self):
        """Connect, reconnect, look up, disconnect, look up again."""
        with temporary_db():
            first_slug = apps.create('1', app_form())
            second_slug = apps.create('2', app_form())
            first = apps.get_by_slug('1', first_slug)
            second = apps.get_by_slug('2', second_slug)
            self.assertEqual(first_slug, 'my-app')
            self.assertEqual(second_slug, 'my-app-2')
            self.assertNotEqual(first.api_key, second.api_key)

            connection = connections.connect('1', first.api_key)
            again = connections.connect('1', first.api_key)
            self.assertEqual(connection.access_token, again.access_token)

            found = connections.find_by_access_token(connection.access_token)
            self.assertEqual(found.app_id, first.app_id)
            self.assertEqual(found.account_id, '1')

            connections.disconnect('1', connection.access_token)
            with self.assertRaises(NoSuchConnection):
                connections.find_by_access_token(connection.access_token)


class TestConnect(TestCase):
    """Tests for :func:`.connections.connect`."""

    def test_connect(self):
        """A new connection is established, with a fresh access token."""
        with temporary_db():
            app = apps.get_by_slug('1', apps.create('1', app_form()))
            connection = connections.connect('5', app.api_key)

        self.assertEqual(connection.app_id, app.app_id)
        self.assertEqual(connection.account_id, '5')
        self.assertTrue(connection.access_token)
        self.assertNotIn(connection.access_token, (app.api_key, app.secret))
        self.assertIsNotNone(connection.created)
        self.assertIsNotNone(connection.connection_id)

    def test_invalid_api_key(self):
        """No app has the API key."""
        with temporary_db():
            with self.assertRaises(InvalidApiKey):
                connections.connect('5', 'notakey')
            self.assertEqual(connections.list_for_account('5'), [])

    def test_connect_is_idempotent(self):
        """Reconnecting returns the existing connection unchanged."""
        with temporary_db():
            app = apps.get_by_slug('1', apps.create('1', app_form()))
            first = connections.connect('5', app.api_key)
            second = connections.connect('5', app.api_key)
            self.assertEqual(len(connections.list_for_account('5')), 1)
        self.assertEqual(first, second)

    def test_different_accounts(self):
        """Each account gets its own connection and token."""
        with temporary_db():
            app = apps.get_by_slug('1', apps.create('1', app_form()))
            first = connections.connect('5', app.api_key)
            second = connections.connect('6', app.api_key)
        self.assertNotEqual(first.access_token, second.access_token)

    def test_reconnect_after_disconnect(self):
        """A new token is issued after the member disconnects."""
        with temporary_db():
            app = apps.get_by_slug('1', apps.create('1', app_form()))
            first = connections.connect('5', app.api_key)
            connections.disconnect('5', first.access_token)
            second = connections.connect('5', app.api_key)
            self.assertEqual(
                connections.find_by_access_token(second.access_token),
                second
            )
        self.assertNotEqual(first.access_token, second.access_token)

    def test_concurrent_approval(self):
        """Another request connects the same pair first."""
        load_connection_for = datastore.load_connection_for
        calls = []

        def racing_load_connection_for(app_id, account_id):
            calls.append((app_id, account_id))
            if len(calls) == 1:     # Before the other request commits.
                raise NoSuchConnection('No connection yet')
            return load_connection_for(app_id, account_id)

        with temporary_db():
            app = apps.get_by_slug('1', apps.create('1', app_form()))
            winner = connections.connect('5', app.api_key)
            with mock.patch.object(datastore, 'load_connection_for',
                                   racing_load_connection_for):
                loser = connections.connect('5', app.api_key)
            self.assertEqual(len(connections.list_for_account('5')), 1)

        self.assertEqual(len(calls), 2)
        self.assertEqual(winner.access_token, loser.access_token)

    def test_retired_token_not_reissued(self):
        """A token from a severed connection is never issued again."""
        with temporary_db():
            app = apps.get_by_slug('1', apps.create('1', app_form()))
            first = connections.connect('5', app.api_key)
            connections.disconnect('5', first.access_token)
            with mock.patch(f'{credentials.__name__}.generate_token') \
                    as mock_generate:
                mock_generate.side_effect = [first.access_token, 'fresh']
                second = connections.connect('5', app.api_key)
        self.assertEqual(second.access_token, 'fresh')

    def test_token_exhaustion(self):
        """A unique access token cannot be generated."""
        with temporary_db(CREDENTIAL_MAX_ATTEMPTS=2):
            app = apps.get_by_slug('1', apps.create('1', app_form()))
            taken = connections.connect('5', app.api_key)
            with mock.patch(f'{credentials.__name__}.generate_token') \
                    as mock_generate:
                mock_generate.return_value = taken.access_token
                with self.assertRaises(CredentialExhaustion):
                    connections.connect('6', app.api_key)
            self.assertEqual(connections.list_for_account('6'), [])


class TestFindByAccessToken(TestCase):
    """Tests for :func:`.connections.find_by_access_token`."""

    def test_never_issued(self):
        """The token was never issued."""
        with temporary_db():
            with self.assertRaises(NoSuchConnection):
                connections.find_by_access_token('notatoken')

    def test_revoked_and_unknown_look_the_same(self):
        """Probing clients cannot tell revoked tokens from unknown ones."""
        with temporary_db():
            app = apps.get_by_slug('1', apps.create('1', app_form()))
            connection = connections.connect('5', app.api_key)
            connections.disconnect('5', connection.access_token)
            with self.assertRaises(NoSuchConnection) as revoked:
                connections.find_by_access_token(connection.access_token)
            with self.assertRaises(NoSuchConnection) as unknown:
                connections.find_by_access_token('notatoken')
        self.assertEqual(str(revoked.exception), str(unknown.exception))


class TestDisconnect(TestCase):
    """Tests for :func:`.connections.disconnect`."""

    def test_disconnect_twice(self):
        """Disconnecting again is not an error."""
        with temporary_db():
            app = apps.get_by_slug('1', apps.create('1', app_form()))
            connection = connections.connect('5', app.api_key)
            connections.disconnect('5', connection.access_token)
            connections.disconnect('5', connection.access_token)
            self.assertEqual(connections.list_for_account('5'), [])

    def test_disconnect_unknown_token(self):
        """Disconnecting a token that was never issued does nothing."""
        with temporary_db():
            connections.disconnect('5', 'notatoken')

    def test_disconnect_other_account(self):
        """An account cannot sever another account's connection."""
        with temporary_db():
            app = apps.get_by_slug('1', apps.create('1', app_form()))
            connection = connections.connect('5', app.api_key)
            connections.disconnect('6', connection.access_token)
            self.assertEqual(
                connections.find_by_access_token(connection.access_token),
                connection
            )


class TestDeleteAppCascade(TestCase):
    """Deleting an app severs all of its connections."""

    def test_delete_app(self):
        """Tokens for the deleted app no longer work."""
        with temporary_db():
            slug = apps.create('1', app_form())
            other_slug = apps.create('1', app_form(name='Other'))
            app = apps.get_by_slug('1', slug)
            other = apps.get_by_slug('1', other_slug)
            first = connections.connect('5', app.api_key)
            second = connections.connect('6', app.api_key)
            unrelated = connections.connect('5', other.api_key)

            apps.delete('1', slug)

            for connection in (first, second):
                with self.assertRaises(NoSuchConnection):
                    connections.find_by_access_token(connection.access_token)
            self.assertEqual(
                connections.find_by_access_token(unrelated.access_token),
                unrelated
            )
            self.assertEqual(connections.list_for_account('5'), [unrelated])
            with self.assertRaises(InvalidApiKey):
                connections.connect('5', app.api_key)


class TestListConnections(TestCase):
    """Tests for listing connections."""

    def test_list_for_account(self):
        """A member sees their own connections, oldest first."""
        with temporary_db():
            first = apps.get_by_slug('1', apps.create('1', app_form()))
            second = apps.get_by_slug('2', apps.create('2', app_form()))
            a = connections.connect('5', first.api_key)
            connections.connect('6', first.api_key)
            b = connections.connect('5', second.api_key)
            self.assertEqual(connections.list_for_account('5'), [a, b])
            self.assertEqual(connections.list_for_account('7'), [])

    def test_list_for_app(self):
        """A developer sees the connections to their own app."""
        with temporary_db():
            slug = apps.create('1', app_form())
            app = apps.get_by_slug('1', slug)
            a = connections.connect('5', app.api_key)
            b = connections.connect('6', app.api_key)
            self.assertEqual(connections.list_for_app('1', slug), [a, b])
            with self.assertRaises(NoSuchApp):
                connections.list_for_app('2', slug)
