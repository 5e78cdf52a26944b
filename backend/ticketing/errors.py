# Overview: Error taxonomy shared by services and the HTTP boundary.

"""
API error types.

Services raise these; the handlers registered by register_error_handlers()
turn each into a JSON body {"error": message} with its status code.
Anything else that escapes a route is logged and reported as a 500.
"""

from flask import jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import db


class ApiError(Exception):
    """Base error carrying a user-safe message and an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(ApiError):
    """Malformed input or a business rule violation (overselling, double check-in)."""
    status_code = 400


class Unauthorized(ApiError):
    """Missing, malformed, invalid or expired credential."""
    status_code = 401


class Forbidden(ApiError):
    """Authenticated but the role is not allowed."""
    status_code = 403


class NotFound(ApiError):
    status_code = 404


class Conflict(ApiError):
    """Duplicate unique key (e.g. email)."""
    status_code = 409


class InternalError(ApiError):
    """Store, hashing or signing failure."""
    status_code = 500


def register_error_handlers(app) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError):
        db.session.rollback()
        if exc.status_code >= 500:
            current_app.logger.error("Request failed: %s", exc.message)
        return jsonify({"error": exc.message}), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        return jsonify({"error": exc.description or exc.name}), exc.code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(exc: SQLAlchemyError):
        db.session.rollback()
        current_app.logger.exception("Database operation failed")
        return jsonify({"error": "Internal server error"}), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        db.session.rollback()
        current_app.logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500
