"""
Error taxonomy for Clockbook and its mapping onto HTTP responses.

Domain functions raise these; the API layer never builds error responses
by hand. Every error body is ``{"message": "..."}``.
"""

import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ClockbookError(Exception):
    """Base class for errors that are reported back to the caller."""

    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(ClockbookError, ValueError):
    """Missing/blank required field, bad enum value, bad number or bad reference."""

    status_code = 400


class NotFoundError(ClockbookError, LookupError):
    """The requested id does not resolve to a record."""

    status_code = 404


class ConflictError(ClockbookError):
    """Duplicate property address or a second in-progress inspection."""

    status_code = 409


def register_error_handlers(app):
    @app.errorhandler(ClockbookError)
    def domain_error(e):
        return jsonify(message=e.message), e.status_code

    @app.errorhandler(404)
    def not_found(e):
        return jsonify(message="Not found."), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify(message="Method not allowed."), 405

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify(message=e.description or e.name), e.code

    @app.errorhandler(Exception)
    def unexpected_error(e):
        logger.exception(f"Unhandled error: {e}")
        return jsonify(message="Unexpected server error."), 500
