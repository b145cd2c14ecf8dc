"""Application error taxonomy.

Every error carries the HTTP status it maps to and a message that is safe to
show to API callers. Handlers in :mod:`regdesk.interfaces.http.errors` turn
them into the standard response envelope.
"""

from __future__ import annotations

from typing import Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500
    kind: str = "internal_error"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400
    kind = "validation_error"
    default_message = "Invalid request"


class ConflictError(ValidationError):
    """A unique field already holds the submitted value."""

    kind = "conflict"
    default_message = "Resource already exists"


class AuthenticationError(AppError):
    status_code = 401
    kind = "unauthorized"
    default_message = "Could not validate credentials"


class ForbiddenError(AppError):
    status_code = 403
    kind = "forbidden"
    default_message = "Operation not permitted"


class NotFoundError(AppError):
    status_code = 404
    kind = "not_found"
    default_message = "Resource not found"


class StoreError(AppError):
    """The underlying persistence layer failed."""

    kind = "store_error"
    default_message = "Storage operation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        operation: Optional[str] = None,
        entity: Optional[str] = None,
        constraint_violation: bool = False,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.entity = entity
        # a unique or foreign key constraint rejected the write
        self.constraint_violation = constraint_violation


class InternalError(AppError):
    kind = "internal_error"


__all__ = [
    "AppError",
    "AuthenticationError",
    "ConflictError",
    "ForbiddenError",
    "InternalError",
    "NotFoundError",
    "StoreError",
    "ValidationError",
]
