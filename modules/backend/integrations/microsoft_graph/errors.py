"""
Microsoft Graph Errors.

Normalizes every failure of a Graph call into MicrosoftGraphError and maps
it onto the application exception hierarchy at the service boundary.
"""

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from modules.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    ExternalServiceError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

SERVICE_NAME = "microsoft_graph"


class MicrosoftGraphError(Exception):
    """A failed Microsoft Graph call.

    `status_code` is 0 for failures that never produced an HTTP response
    (network errors, timeouts).
    """

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        status_code: int = 0,
        request_id: str | None = None,
        date: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.request_id = request_id
        self.date = date
        self.retry_after = retry_after
        super().__init__(message)

    def __repr__(self) -> str:
        return (
            f"MicrosoftGraphError(code={self.code!r}, status_code={self.status_code}, "
            f"message={self.message!r})"
        )


class _InnerError(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    request_id: str | None = Field(default=None, alias="request-id")
    date: str | None = None


class _ErrorBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str
    message: str
    inner_error: _InnerError | None = Field(default=None, alias="innerError")


class GraphErrorResponse(BaseModel):
    """Error body returned by Graph: {"error": {"code", "message", "innerError"}}."""

    error: _ErrorBody


def _parse_error_body(response: httpx.Response) -> GraphErrorResponse | None:
    try:
        return GraphErrorResponse.model_validate(response.json())
    except (ValueError, PydanticValidationError):
        return None


def handle_graph_error(exc: BaseException) -> MicrosoftGraphError:
    """
    Convert any exception raised during a Graph call into MicrosoftGraphError.

    Args:
        exc: The exception raised by httpx or by our own client code

    Returns:
        The normalized error (the same instance when already normalized)
    """
    if isinstance(exc, MicrosoftGraphError):
        return exc

    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        body = _parse_error_body(exc.response)
        if body is not None:
            inner = body.error.inner_error
            return MicrosoftGraphError(
                body.error.message,
                body.error.code,
                status_code,
                request_id=inner.request_id if inner else None,
                date=inner.date if inner else None,
            )
        return MicrosoftGraphError(f"HTTP {status_code}", "HTTP_ERROR", status_code)

    if isinstance(exc, httpx.TimeoutException):
        return MicrosoftGraphError(
            "Request timeout: Microsoft Graph API did not respond in time",
            "TIMEOUT_ERROR",
            0,
        )

    if isinstance(exc, httpx.TransportError):
        return MicrosoftGraphError(
            "Network error: Unable to connect to Microsoft Graph API",
            "NETWORK_ERROR",
            0,
        )

    return MicrosoftGraphError(
        str(exc) or "Unknown Microsoft Graph API error",
        "UNKNOWN_ERROR",
        0,
    )


def is_retryable(exc: BaseException) -> bool:
    """Client errors (4xx) are final; server errors and transport failures are retried."""
    error = handle_graph_error(exc)
    return not 400 <= error.status_code < 500


def to_application_error(error: MicrosoftGraphError) -> ApplicationError:
    """Map a Graph failure onto the application exception hierarchy."""
    if error.status_code == 404:
        return NotFoundError(error.message)
    if error.status_code == 429:
        retry_after = int(error.retry_after) + 1 if error.retry_after else None
        return RateLimitError(error.message, retry_after=retry_after)
    if error.code == "INVALID_INPUT":
        return ValidationError(error.message)
    if error.status_code == 401:
        return AuthenticationError("Microsoft Graph rejected the access token")
    return ExternalServiceError(
        error.message,
        service=SERVICE_NAME,
        status_code=error.status_code or None,
    )


def describe(error: MicrosoftGraphError) -> dict[str, Any]:
    """Structured log fields for a Graph failure."""
    return {
        "graph_code": error.code,
        "status_code": error.status_code,
        "graph_request_id": error.request_id,
    }
