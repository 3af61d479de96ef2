"""Testing helpers."""

from contextlib import contextmanager
from typing import Any, Generator

from flask import Flask
from werkzeug.datastructures import MultiDict

from ..forms import AppForm
from ..services import datastore


@contextmanager
def temporary_db(database_url: str = 'sqlite:///:memory:',
                 create: bool = True, drop: bool = True,
                 **config: Any) -> Generator[Flask, None, None]:
    """Provide an in-memory sqlite database for testing purposes."""
    app = Flask('test')
    app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config.update(config)
    with app.app_context():
        datastore.init_app(app)
        if create:
            datastore.create_all()
        try:
            yield app
        finally:
            datastore.util.current_session().remove()
            if drop:
                datastore.drop_all()


def app_form(name: str = 'My App', description: str = 'An app',
             website: str = 'https://myapp.example.com',
             callback_url: str = 'https://myapp.example.com/callback') \
        -> AppForm:
    """Generate a submitted :class:`.AppForm`."""
    return AppForm(MultiDict({
        'name': name,
        'description': description,
        'website': website,
        'callback_url': callback_url
    }))
