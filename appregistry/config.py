"""Flask configuration."""

import os

SECRET_KEY = os.environ.get('SECRET_KEY', 'asdf1234')
SERVER_NAME = os.environ.get('APPREGISTRY_SERVER_NAME')

LOGLEVEL = int(os.environ.get('LOGLEVEL', 20))

SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite://')
SQLALCHEMY_TRACK_MODIFICATIONS = False
CREATE_DB = bool(int(os.environ.get('CREATE_DB', 0)))

API_KEY_LENGTH = int(os.environ.get('API_KEY_LENGTH', 32))
"""Length (in characters) of generated app API keys."""

SECRET_LENGTH = int(os.environ.get('SECRET_LENGTH', 48))
"""Length (in characters) of generated app secrets."""

ACCESS_TOKEN_LENGTH = int(os.environ.get('ACCESS_TOKEN_LENGTH', 48))
"""Length (in characters) of generated connection access tokens."""

CREDENTIAL_MAX_ATTEMPTS = int(os.environ.get('CREDENTIAL_MAX_ATTEMPTS', 5))
"""
Maximum number of draws (or insert attempts) before giving up.

Each token character is drawn from a 62-symbol alphabet, so a collision
within this limit indicates a broken random source or a broken datastore.
"""
