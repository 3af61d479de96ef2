import pytest

from appregistry import factory
from appregistry.services import datastore


@pytest.fixture()
def app():
    app = factory.create_web_app()
    app.config['TESTING'] = True
    with app.app_context():
        datastore.create_all()
        yield app
        datastore.util.current_session().remove()
        datastore.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()
