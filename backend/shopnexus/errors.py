# Overview: Maps domain exceptions to HTTP status codes and JSON error bodies.

"""
Error handling

Every error response is {"message": ...}. Outside production the body also
carries "error" (exception type) and "stack" (traceback text) to help local
debugging.

Status mapping:
- ValidationError / ConflictError -> 400
- AuthError -> 401
- ForbiddenError -> 403
- NotFoundError -> 404
- HTTPException -> its own code
- anything else, including SQLAlchemyError -> 500 after a session rollback
"""

from __future__ import annotations

import traceback

from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import db
from .validation import ValidationError
from .services.auth_service import AuthError, ForbiddenError
from .services.tenant_service import NotFoundError


def _error_response(exc: Exception, status: int, message: str | None = None):
    body = {"message": message if message is not None else str(exc)}
    if current_app.config.get("APP_ENV") != "production":
        body["error"] = type(exc).__name__
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return jsonify(body), status


def register_error_handlers(app) -> None:

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc):
        db.session.rollback()
        return _error_response(exc, 400)

    @app.errorhandler(AuthError)
    def handle_auth_error(exc):
        db.session.rollback()
        return _error_response(exc, 401)

    @app.errorhandler(ForbiddenError)
    def handle_forbidden(exc):
        db.session.rollback()
        return _error_response(exc, 403)

    @app.errorhandler(NotFoundError)
    def handle_not_found(exc):
        db.session.rollback()
        return _error_response(exc, 404)

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc):
        return _error_response(exc, exc.code or 500, exc.description)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(exc):
        db.session.rollback()
        current_app.logger.exception("Database error")
        return _error_response(exc, 500, "Internal server error")

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        db.session.rollback()
        current_app.logger.exception("Unhandled error")
        return _error_response(exc, 500, "Internal server error")
