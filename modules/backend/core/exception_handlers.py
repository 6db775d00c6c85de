"""
Exception Handlers.

Every error leaves the API in the ErrorResponse envelope:

    {"success": false, "data": null,
     "error": {"code": "RES_NOT_FOUND", "message": "Lead not found", "details": null},
     "metadata": {"timestamp": "...", "request_id": "..."}}

Application exceptions map to a status by type. Request validation
failures become 422 VAL_REQUEST_INVALID with one entry per invalid field.
Routing errors raised by Starlette (unknown path, wrong method) and
anything unexpected are wrapped the same way.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from modules.backend.core.config import get_app_config
from modules.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
    ExternalServiceError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from modules.backend.core.logging import get_logger
from modules.backend.schemas.base import ErrorDetail, ErrorResponse, ResponseMetadata

logger = get_logger(__name__)

EXCEPTION_STATUS_MAP: dict[type[ApplicationError], int] = {
    NotFoundError: 404,
    ValidationError: 400,
    AuthenticationError: 401,
    AuthorizationError: 403,
    ConflictError: 409,
    RateLimitError: 429,
    ExternalServiceError: 502,
    DatabaseError: 503,
}

HTTP_ERROR_CODES = {
    401: "AUTH_UNAUTHORIZED",
    403: "AUTHZ_FORBIDDEN",
    404: "RES_NOT_FOUND",
    405: "REQ_METHOD_NOT_ALLOWED",
}


def status_for(exc: ApplicationError) -> int:
    """HTTP status of an application error; subclasses inherit their parent's status."""
    for cls in type(exc).__mro__:
        if cls in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[cls]
    return 500


def _get_request_id(request: Request) -> str | None:
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return request.headers.get("x-request-id")


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details),
        metadata=ResponseMetadata(request_id=_get_request_id(request)),
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    status_code = status_for(exc)
    log_extra = {
        "code": exc.code,
        "message": exc.message,
        "status": status_code,
        "path": request.url.path,
        "method": request.method,
    }
    if status_code >= 500:
        logger.error("Server error", extra=log_extra)
    else:
        logger.warning("Client error", extra=log_extra)

    details = None
    if isinstance(exc, ValidationError) and exc.details:
        details = exc.details
    elif isinstance(exc, ExternalServiceError) and exc.service:
        details = {"service": exc.service, "upstream_status": exc.status_code}

    headers = None
    if isinstance(exc, RateLimitError) and exc.retry_after:
        headers = {"Retry-After": str(exc.retry_after)}

    return _error_response(request, status_code, exc.code, exc.message, details, headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.warning(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
        },
    )
    details = {
        "validation_errors": [
            {
                "field": ".".join(str(loc) for loc in err.get("loc", [])),
                "message": err.get("msg", "Validation error"),
                "type": err.get("type", "unknown"),
            }
            for err in errors
        ]
    }
    return _error_response(request, 422, "VAL_REQUEST_INVALID", "Request validation failed", details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_ERROR_CODES.get(exc.status_code, f"HTTP_{exc.status_code}")
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error_response(request, exc.status_code, code, message, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Log the full traceback; the client gets a generic 500. With
    api_detailed_errors on, the exception class name is added to details.
    """
    logger.exception(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
    )
    details = None
    if get_app_config().features.api_detailed_errors:
        details = {"exception_type": type(exc).__name__}
    return _error_response(request, 500, "SYS_INTERNAL_ERROR", "An unexpected error occurred", details)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    logger.debug("Exception handlers registered")
