"""
Application Exceptions.

Services raise these; exception_handlers.py turns them into the error
envelope. Each class carries its error code; the HTTP status is decided
by the handler (EXCEPTION_STATUS_MAP).
"""

from typing import Any


class ApplicationError(Exception):
    """Base for every error the API reports deliberately."""

    code = "SYS_INTERNAL_ERROR"
    default_message = "Internal error"

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    code = "RES_NOT_FOUND"
    default_message = "Resource not found"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message)


class ValidationError(ApplicationError):
    """Business-rule validation; `details` names the offending fields."""

    code = "VAL_VALIDATION_ERROR"
    default_message = "Validation failed"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(ApplicationError):
    code = "AUTH_UNAUTHORIZED"
    default_message = "Authentication required"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message)


class AuthorizationError(ApplicationError):
    code = "AUTHZ_FORBIDDEN"
    default_message = "Permission denied"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message)


class ConflictError(ApplicationError):
    code = "RES_CONFLICT"
    default_message = "Resource conflict"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message)


class ExternalServiceError(ApplicationError):
    """A vendor call failed: Microsoft Graph or Bunny storage."""

    code = "SYS_EXTERNAL_SERVICE_ERROR"
    default_message = "External service error"

    def __init__(
        self,
        message: str | None = None,
        service: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(ApplicationError):
    """`retry_after` (seconds) is sent back as the Retry-After header."""

    code = "RATE_LIMITED"
    default_message = "Rate limit exceeded"

    def __init__(self, message: str | None = None, retry_after: int | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message)


class DatabaseError(ApplicationError):
    code = "SYS_DATABASE_ERROR"
    default_message = "Database error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message)
