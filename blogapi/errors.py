"""
Error taxonomy for the API and the handlers that render it as JSON.

Views raise these exceptions instead of building error responses inline;
``register_error_handlers`` turns them into ``{"error": ...}`` bodies.
"""
from flask import jsonify
from werkzeug.exceptions import HTTPException

from blogapi.extensions import db, jwt


class APIError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None, details=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        self.details = details

    def to_dict(self):
        payload = {'error': self.message}
        if self.details:
            payload['details'] = self.details
        return payload


class ValidationError(APIError):
    status_code = 400
    message = 'Validation failed'


class Unauthorized(APIError):
    status_code = 401
    message = 'Unauthorized'


class Forbidden(APIError):
    status_code = 403
    message = 'Forbidden'


class NotFound(APIError):
    status_code = 404
    message = 'Not found'


class Conflict(APIError):
    status_code = 400
    message = 'Conflict'


class InternalError(APIError):
    status_code = 500


def error_response(error):
    return jsonify(error.to_dict()), error.status_code


def register_error_handlers(app):
    """Render every failure as JSON; unexpected ones are logged and masked."""

    @app.errorhandler(APIError)
    def handle_api_error(error):
        if error.status_code >= 500:
            db.session.rollback()
        return error_response(error)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        db.session.rollback()
        app.logger.exception('Unhandled error: %s', error)
        return error_response(InternalError())


def register_jwt_callbacks():
    """Token failures share the Unauthorized response shape."""

    @jwt.unauthorized_loader
    def missing_token(reason):
        return error_response(Unauthorized('Access token required'))

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return error_response(Unauthorized('Invalid token'))

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return error_response(Unauthorized('Token expired'))
