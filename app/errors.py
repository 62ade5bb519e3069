"""Application error taxonomy translated to HTTP responses in ``app.main``."""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for errors that carry an HTTP status and a user-facing message."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, errors: list[dict[str, Any]] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation error"


class CompensationConfigError(ValidationError):
    """Raised when a user or creator compensation setup cannot be computed."""

    default_message = "Compensation configuration is incomplete"


class UnauthorizedError(AppError):
    status_code = 401
    default_message = "Not authenticated"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource conflict"
