"""Device Hub exception hierarchy.

Every error carries a machine-readable ``code``, the HTTP status it maps to
and an optional ``context`` dict that is logged but never sent to clients.
"""

from typing import Any


class DeviceHubError(Exception):
    """Base exception for all Device Hub errors."""

    status_code = 500

    def __init__(
        self,
        message: str = "",
        code: str = "DEVICE_HUB_ERROR",
        context: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.context = context or {}
        super().__init__(message)


class ValidationError(DeviceHubError):
    """Raised when input fails validation. Always raised before storage access."""

    status_code = 400

    def __init__(self, field: str, message: str = ""):
        self.field = field
        super().__init__(
            message or f"Invalid {field}",
            code="VALIDATION_ERROR",
            context={"field": field},
        )


class AuthError(DeviceHubError):
    """Base for authentication failures."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", code: str = "AUTH_ERROR"):
        super().__init__(message, code=code)


class MissingToken(AuthError):
    """Raised when the Authorization header is absent or not a bearer token."""

    def __init__(self, message: str = "No token provided"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidToken(AuthError):
    """Raised when a token signature or expiry check fails."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, code="INVALID_TOKEN")


class InvalidCredentials(AuthError):
    """Raised on login failure. Unknown email and wrong password look the same."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class Forbidden(DeviceHubError):
    """Raised when a valid principal lacks the required capability."""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, code="FORBIDDEN")


class Conflict(DeviceHubError):
    """Raised when a unique constraint is violated."""

    status_code = 409

    def __init__(self, message: str = "Resource already exists", context: dict[str, Any] | None = None):
        super().__init__(message, code="CONFLICT", context=context)


class NotFound(DeviceHubError):
    """Raised when a device or other resource does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not found", context: dict[str, Any] | None = None):
        super().__init__(message, code="NOT_FOUND", context=context)


class InternalError(DeviceHubError):
    """Opaque failure surfaced to clients for unexpected storage/runtime errors."""

    status_code = 500

    def __init__(self, message: str = "Internal server error", context: dict[str, Any] | None = None):
        super().__init__(message, code="INTERNAL_ERROR", context=context)
