"""
API error types.

Handlers and permission checks raise these; the gateway renders them as
{"error": message, ...payload} with the matching status code.
"""

import logging
from typing import Optional, Dict, Any, Tuple

from flask import Flask, jsonify, Response
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None,
                 payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.message}
        body.update(self.payload)
        return body


class ValidationError(ApiError):
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class AuthorizationError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    # Duplicates are reported as 400 by the public API.
    status_code = 400


class InternalError(ApiError):
    status_code = 500


def register_error_handlers(app: Flask) -> None:
    """
    Attach JSON error handlers to the app.

    Any ApiError becomes its own status and message. Anything else is logged
    and collapsed to a generic 500 so internals never reach the client.
    """

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError) -> Tuple[Response, int]:
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException) -> Tuple[Response, int]:
        return jsonify({"error": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception) -> Tuple[Response, int]:
        logger.exception("Unhandled error: %s", error)
        return jsonify({"error": "Internal server error"}), 500
