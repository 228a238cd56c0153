"""Error handlers for the application.

Opal expects every failure as JSON ``{"code": <status>, "message": <text>}``.
"""
from flask import jsonify
from werkzeug.exceptions import HTTPException

from connector.core.errors import ConnectorError


def error_response(status: int, message: str):
    """Build an Opal error response tuple."""
    return jsonify({"code": status, "message": message}), status


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(ConnectorError)
    def handle_connector_error(error: ConnectorError):
        """Signature, validation and Authentik errors carry their own status."""
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        """Routing errors (404, 405, 400 on malformed JSON, ...)."""
        return error_response(error.code or 500, error.description or error.name)

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # ALWAYS log the full error - the response never carries details
        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return error_response(500, "An unexpected error occurred")
