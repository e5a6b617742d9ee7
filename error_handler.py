"""
Error taxonomy for service operations and the JSON error handlers.

Services raise a ServiceError subclass; the service_action decorator turns it
into a tagged result dict so page/API handlers never see a half-applied write.
"""

import logging
from functools import wraps

from flask import jsonify
from werkzeug.exceptions import HTTPException

from extensions import db

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for every expected, user-visible failure."""
    kind = 'error'
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    kind = 'validation'
    status_code = 400


class AuthorizationError(ServiceError):
    kind = 'authorization'
    status_code = 403


class NotFoundError(ServiceError):
    kind = 'not_found'
    status_code = 404


class InvariantViolation(ServiceError):
    kind = 'invariant'
    status_code = 422


class TransitionError(ServiceError):
    kind = 'transition'
    status_code = 409


STATUS_BY_KIND = {
    cls.kind: cls.status_code
    for cls in (ValidationError, AuthorizationError, NotFoundError, InvariantViolation, TransitionError)
}


def error_result(error):
    return {'success': False, 'error': error.message, 'kind': error.kind}


def service_action(func):
    """
    Run a service operation and report expected failures as a tagged result.

    ServiceError -> rollback, warning log, {'success': False, 'error', 'kind'}.
    Anything else -> rollback, error log, re-raised.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ServiceError as e:
            db.session.rollback()
            logger.warning(f"{func.__name__} rejected ({e.kind}): {e.message}")
            return error_result(e)
        except Exception as e:
            db.session.rollback()
            logger.error(f"{func.__name__} failed: {e}")
            raise
    return wrapper


def status_code_for(result):
    """HTTP status for a service result dict."""
    if result.get('success'):
        return 200
    return STATUS_BY_KIND.get(result.get('kind'), 400)


def register_error_handlers(app):
    """Answer HTTP errors with JSON instead of HTML pages."""

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'error': error.description, 'kind': error.name}), error.code

    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        db.session.rollback()
        return jsonify(error_result(error)), error.status_code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        app.logger.error(f"Unexpected error: {error}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'An unexpected error occurred. Please try again later.',
            'kind': 'server_error',
        }), 500
