# donor_app/utils/error_handler.py
"""
JSON error handlers for the API.

Every error leaves the app as ``{"success": false, "message", "error"}``.
Database errors roll the session back before responding.
"""

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from donor_app.models import db
from donor_app.utils.errors import APIError


def error_response(message, status_code, error=None, **extra):
    payload = {"success": False, "message": message, "error": error if error is not None else message}
    payload.update(extra)
    return jsonify(payload), status_code


def init_error_handlers(app):
    """Register JSON handlers for API errors, HTTP errors and database errors"""

    @app.errorhandler(APIError)
    def handle_api_error(error):
        if error.status_code >= 500:
            app.logger.error("API error: %s", error.message)
        response = jsonify(error.to_dict())
        return response, error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        message = error.description or error.name
        return error_response(message, error.code or 500, error=error.name)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        app.logger.error("Database error: %s", error, exc_info=True)
        return error_response("Database error", 500, error=str(error))

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        original = getattr(error, "original_exception", None) or error
        app.logger.error("Unhandled error: %s", original, exc_info=True)
        return error_response("Internal server error", 500, error=str(original))
