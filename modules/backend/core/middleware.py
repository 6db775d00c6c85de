"""
HTTP Middleware.

RequestContextMiddleware tags every request with an id and the calling
frontend, binds both to the structlog context and reports the duration.
BodySizeLimitMiddleware turns oversized uploads away before they are read.

Headers:
    X-Request-ID    propagated from the caller or generated, echoed back
    X-Frontend-ID   web, mobile, api, cli or internal; anything else is "unknown"
    X-Response-Time duration in milliseconds, set on the response
"""

import time
import uuid
from datetime import datetime, timezone

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from modules.backend.core.logging import VALID_SOURCES, get_logger
from modules.backend.schemas.base import ErrorDetail, ErrorResponse, ResponseMetadata

logger = get_logger(__name__)

KNOWN_FRONTENDS = frozenset({"web", "mobile", "api", "cli", "internal"}) & VALID_SOURCES


def resolve_frontend(header: str | None) -> str:
    frontend = (header or "").strip().lower()
    return frontend if frontend in KNOWN_FRONTENDS else "unknown"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Request id, frontend and timing for every request.

    Handlers can read request.state.request_id, request.state.frontend and
    request.state.start_time (naive UTC). Log records written while the
    request is in flight carry request_id, frontend, method and path.
    With `log_requests` every completed request is logged at INFO.
    """

    def __init__(self, app, log_requests: bool = False) -> None:
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        frontend = resolve_frontend(request.headers.get("X-Frontend-ID"))

        request.state.request_id = request_id
        request.state.frontend = frontend
        request.state.start_time = datetime.now(timezone.utc).replace(tzinfo=None)
        started = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            frontend=frontend,
            method=request.method,
            path=request.url.path,
        )
        logger.debug(
            "Request started",
            extra={
                "client_host": request.client.host if request.client else None,
                "user_agent": request.headers.get("User-Agent"),
            },
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Request failed with exception",
                extra={"duration_ms": _elapsed_ms(started), "error_type": type(exc).__name__},
            )
            raise
        else:
            duration_ms = _elapsed_ms(started)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"
            log = logger.info if self.log_requests else logger.debug
            log(
                "Request completed",
                extra={"status_code": response.status_code, "duration_ms": duration_ms},
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject requests whose Content-Length exceeds `max_body_size` with a 413.

    The limit is security.yaml `request_limits.max_body_size_bytes`; it
    bounds the multipart upload endpoints (offers, cabling images).
    """

    def __init__(self, app, max_body_size: int) -> None:
        super().__init__(app)
        self.max_body_size = max_body_size

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        content_length = request.headers.get("content-length", "")
        if content_length.isdigit() and int(content_length) > self.max_body_size:
            logger.warning(
                "Request body too large",
                extra={"content_length": int(content_length), "limit": self.max_body_size},
            )
            body = ErrorResponse(
                error=ErrorDetail(
                    code="VAL_PAYLOAD_TOO_LARGE",
                    message=f"Request body exceeds {self.max_body_size} bytes",
                ),
                metadata=ResponseMetadata(request_id=getattr(request.state, "request_id", None)),
            )
            return JSONResponse(status_code=413, content=body.model_dump(mode="json"))

        return await call_next(request)
