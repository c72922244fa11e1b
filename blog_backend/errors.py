"""
Error taxonomy for the blog API and the single error-to-response policy.

Route code raises these; ``register_error_handlers`` turns them into JSON
responses using ``ERROR_STATUS``. Internal details stay in the log.
"""

from flask import jsonify, current_app
from pymongo.errors import DuplicateKeyError, PyMongoError
from werkzeug.exceptions import HTTPException


class BlogError(Exception):
    """Base class for errors that map to an HTTP response."""

    default_message = 'Request failed'

    def __init__(self, message=None, details=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    def to_dict(self):
        return {'message': self.message}


class ValidationError(BlogError):
    default_message = 'Validation failed'

    def __init__(self, errors, message=None):
        super().__init__(message, details=errors)
        self.errors = errors

    def to_dict(self):
        return {'message': self.message, 'errors': self.errors}


class DuplicateEntity(BlogError):
    default_message = 'Username or email is already registered'


class Unauthenticated(BlogError):
    default_message = 'You are not authenticated!'


class TokenInvalid(Unauthenticated):
    default_message = 'Token is not valid!'


class TokenExpired(Unauthenticated):
    default_message = 'Token has expired!'


class InvalidCredentials(BlogError):
    default_message = 'Wrong credentials!'


class Forbidden(BlogError):
    default_message = 'You are not allowed to modify this resource'


class NotFound(BlogError):
    default_message = 'Not found'


class OperationFailed(BlogError):
    default_message = 'Operation failed'


# Checked in order; subclasses must precede their bases.
ERROR_STATUS = (
    (ValidationError, 400),
    (DuplicateEntity, 400),
    (Unauthenticated, 401),
    (InvalidCredentials, 401),
    (Forbidden, 403),
    (NotFound, 404),
    (OperationFailed, 500),
    (BlogError, 500),
)


def status_for(error):
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


def translate_store_error(exc, action):
    """Convert a driver exception into the matching BlogError."""
    if isinstance(exc, DuplicateKeyError):
        return DuplicateEntity()
    if isinstance(exc, PyMongoError):
        return OperationFailed(f'{action} failed')
    return OperationFailed()


def register_error_handlers(app):
    @app.errorhandler(BlogError)
    def handle_blog_error(e):
        status = status_for(e)
        if status >= 500:
            current_app.logger.error(f"{type(e).__name__}: {e.message}", exc_info=True)
        else:
            current_app.logger.warning(f"{type(e).__name__}: {e.message}")
        return jsonify(e.to_dict()), status

    @app.errorhandler(PyMongoError)
    def handle_store_error(e):
        current_app.logger.error(f"Unhandled database error: {e}", exc_info=True)
        return jsonify(OperationFailed().to_dict()), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'message': e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        current_app.logger.error(f"Unexpected error: {e}", exc_info=True)
        return jsonify({'message': 'Internal server error'}), 500
