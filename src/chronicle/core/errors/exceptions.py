"""Exceptions that become Problem Details responses.

Messages and details are sent to the client and logged, so they must
never carry a password, raw token or API key.
"""

from typing import Any


class AppException(Exception):
    """An error with an HTTP status and a machine-readable code.

    ``error_code`` ends the Problem Details ``type`` URI; ``details`` are
    merged into the body as extra members.
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Missing resource, including one that belongs to another tenant."""

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """State conflict, such as registering an email that is already taken."""

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class UnauthorizedError(AppException):
    """Missing, invalid or wrong-scheme credentials."""

    message = "Authentication required"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(AppException):
    """Authenticated, but not allowed: role, membership or tenant state."""

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


class BadRequestError(AppException):
    """Well-formed request with values that make no sense together."""

    message = "Bad request"
    error_code = "bad_request"
    status_code = 400
