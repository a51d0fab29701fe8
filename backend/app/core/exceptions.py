"""
Exception classes shared by the scheduling core and the HTTP layer.

The core raises these for permission, state and not-found problems. Data
integrity problems are never raised; they are returned as diagnostics.
"""

from __future__ import annotations

from fastapi import HTTPException, status


class AppError(Exception):
    """Base exception for all application errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, reason: str | None = None, detail: str | None = None):
        self.message = message
        self.reason = reason
        self.detail = detail
        super().__init__(message)


class NotFoundError(AppError):
    """Raised when a calendar, share, entry or schedule id does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} not found",
            reason="not-found",
            detail=f"{resource} {resource_id} does not exist or was deleted.",
        )
        self.resource = resource
        self.resource_id = resource_id


class PermissionDeniedError(AppError):
    """Raised when the acting user may not perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, reason: str, message: str = "Operation not permitted"):
        super().__init__(message=message, reason=reason)


class InvalidStateError(AppError):
    """Raised when a share or calendar is not in a state that allows the operation."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, reason: str, message: str = "Operation not allowed in current state"):
        super().__init__(message=message, reason=reason)


class InvalidViewError(AppError):
    """Raised for structurally invalid view input (bad cursor, unknown mode)."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str):
        super().__init__(message=message, reason="invalid-view")


def app_error_to_http(error: AppError) -> HTTPException:
    """Convert an AppError to an HTTPException with a consistent JSON body."""
    return HTTPException(
        status_code=error.status_code,
        detail={
            "error": error.message,
            "detail": error.detail,
            "reason": error.reason,
            "type": type(error).__name__,
        },
    )
