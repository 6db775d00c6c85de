"""
Microsoft Graph HTTP Base.

Shared transport for the delegated and application Graph clients: lazy
httpx client, fixed-window rate limiting, tenacity retry with exponential
backoff, and error normalization.
"""

from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from modules.backend.core.concurrency import get_semaphore
from modules.backend.core.config import get_app_config
from modules.backend.core.logging import get_logger
from modules.backend.core.resilience import retry_logger
from modules.backend.integrations.microsoft_graph.errors import (
    MicrosoftGraphError,
    describe,
    handle_graph_error,
    is_retryable,
)
from modules.backend.integrations.microsoft_graph.rate_limiter import GraphRateLimiter

logger = get_logger(__name__)

_rate_limiter: GraphRateLimiter | None = None


def get_rate_limiter() -> GraphRateLimiter:
    """Get or create the process-wide Graph rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        limits = get_app_config().integrations.microsoft_graph.rate_limit
        _rate_limiter = GraphRateLimiter(
            max_requests=limits.max_requests,
            time_window_seconds=limits.time_window_seconds,
        )
    return _rate_limiter


class GraphHttpClient:
    """
    Base class for Microsoft Graph clients.

    Subclasses provide `_access_token()`. Requests go through `_request`,
    which enforces the rate limit before sending and retries server and
    transport failures (never 4xx responses).
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        rate_limiter: GraphRateLimiter | None = None,
        max_retries: int | None = None,
        base_delay: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        app_config = get_app_config()
        graph_config = app_config.integrations.microsoft_graph

        self.base_url = (base_url or graph_config.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else float(
            app_config.application.timeouts.external_api
        )
        self.max_retries = max_retries if max_retries is not None else graph_config.retry.max_retries
        self.base_delay = base_delay if base_delay is not None else graph_config.retry.base_delay_seconds
        self._rate_limiter = rate_limiter or get_rate_limiter()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _access_token(self) -> str:
        raise NotImplementedError

    def _check_rate_limit(self) -> None:
        if not self._rate_limiter.can_make_request():
            wait_time = self._rate_limiter.get_wait_time()
            raise MicrosoftGraphError(
                f"Rate limit exceeded. Wait {wait_time:.0f}s before retrying.",
                "RATE_LIMIT_EXCEEDED",
                429,
                retry_after=wait_time,
            )
        self._rate_limiter.record_request()

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None,
        json: Any,
        headers: dict[str, str] | None,
    ) -> httpx.Response:
        client = await self._get_client()
        request_headers = {"Authorization": f"Bearer {await self._access_token()}"}
        if headers:
            request_headers.update(headers)

        async with get_semaphore("external_api"):
            response = await client.request(
                method, path, params=params, json=json, headers=request_headers,
            )
        response.raise_for_status()
        return response

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Send one Graph request.

        Raises:
            MicrosoftGraphError: Rate limit reached, or the call failed after retries
        """
        self._check_rate_limit()

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.base_delay),
            retry=retry_if_exception(is_retryable),
            before_sleep=retry_logger("microsoft_graph"),
            reraise=True,
        )
        try:
            return await retrying(self._send, method, path, params, json, headers)
        except MicrosoftGraphError as error:
            self._log_failure(method, path, error)
            raise
        except httpx.HTTPError as exc:
            error = handle_graph_error(exc)
            self._log_failure(method, path, error)
            raise error from exc

    def _log_failure(self, method: str, path: str, error: MicrosoftGraphError) -> None:
        logger.warning(
            "Microsoft Graph request failed",
            extra={"method": method, "path": path, **describe(error)},
        )
