"""Application factory for the app registry."""

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException, Forbidden, Unauthorized, \
    BadRequest, MethodNotAllowed, InternalServerError, NotFound

from . import app_logging
from .exceptions import NoSuchApp, InvalidApiKey, NoSuchConnection, \
    ValidationFailed, DuplicateKey, CredentialExhaustion
from .services import datastore


def create_web_app() -> Flask:
    """
    Initialize and configure the app registry application.

    The request-handling layer registers its own blueprints on the returned
    application; exceptions raised by :mod:`appregistry.apps` and
    :mod:`appregistry.connections` are rendered as JSON responses.
    """
    app = Flask('appregistry')
    app.config.from_pyfile('config.py')

    app_logging.setup_logger(app.config['LOGLEVEL'])
    datastore.init_app(app)

    if app.config['CREATE_DB']:
        with app.app_context():
            datastore.create_all()

    register_error_handlers(app)
    return app


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""
    app.errorhandler(Forbidden)(jsonify_exception)
    app.errorhandler(Unauthorized)(jsonify_exception)
    app.errorhandler(BadRequest)(jsonify_exception)
    app.errorhandler(InternalServerError)(jsonify_exception)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)

    app.errorhandler(NoSuchApp)(handle_no_such_app)
    app.errorhandler(InvalidApiKey)(handle_unauthorized)
    app.errorhandler(NoSuchConnection)(handle_unauthorized)
    app.errorhandler(ValidationFailed)(handle_validation_failed)
    app.errorhandler(DuplicateKey)(handle_internal_error)
    app.errorhandler(CredentialExhaustion)(handle_internal_error)


def jsonify_exception(error: HTTPException) -> Response:
    """Render exceptions as JSON."""
    exc_resp = error.get_response()
    response: Response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response


def handle_no_such_app(error: NoSuchApp) -> Response:
    """The app does not exist, or belongs to someone else."""
    return jsonify_exception(NotFound('No such app'))


def handle_unauthorized(error: Exception) -> Response:
    """Invalid API keys and access tokens are authorization failures."""
    return jsonify_exception(Unauthorized('Invalid credentials'))


def handle_validation_failed(error: ValidationFailed) -> Response:
    """Render field-level validation errors."""
    response: Response = jsonify(reason=str(error), errors=error.errors)
    response.status_code = BadRequest.code
    return response


def handle_internal_error(error: Exception) -> Response:
    """Credential and key exhaustion are not actionable by the user."""
    return jsonify_exception(InternalServerError('Could not complete request'))
