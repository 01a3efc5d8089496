"""Error taxonomy and the JSON envelope it is rendered into."""

from __future__ import annotations

from typing import Any

from flask import current_app, jsonify, render_template, request
from werkzeug.exceptions import HTTPException


class AppError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: list[dict[str, Any]] | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {'success': False, 'error': self.message}
        if self.details:
            payload['details'] = self.details
        return payload


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Access denied to workspace"


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        details = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get('loc', ()) if part != '__root__')
            details.append({'field': field or None, 'message': error.get('msg', 'Invalid value')})
        return cls("Validation failed", details=details)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, details=[{'field': field, 'message': message}])


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    # Reported as a client error alongside validation failures
    status_code = 400
    default_message = "A record with these values already exists"


class TransientStoreError(AppError):
    status_code = 500
    default_message = "Internal server error"


def _wants_json() -> bool:
    return request.path.startswith('/api/')


def register_error_handlers(app) -> None:
    """Render errors as the JSON envelope under /api and as HTML pages elsewhere."""

    @app.errorhandler(AppError)
    def handle_app_error(error: AppError):
        if isinstance(error, TransientStoreError):
            current_app.logger.error(f"Store failure on {request.method} {request.path}: {error}")
        if not _wants_json():
            return render_template(
                'error.html', status_code=error.status_code, message=error.message
            ), error.status_code
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        if not _wants_json():
            return error
        return jsonify({'success': False, 'error': error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        current_app.logger.exception(f"Unhandled error on {request.method} {request.path}")
        if _wants_json():
            return jsonify({'success': False, 'error': 'Internal server error'}), 500
        return render_template('500.html'), 500


__all__ = [
    "AppError",
    "AuthenticationError",
    "AuthorizationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "TransientStoreError",
    "register_error_handlers",
]
