"""
Bunny Storage Client.

Uploads and deletes objects in a Bunny storage zone and returns their
public CDN URLs. Calls are wrapped in a circuit breaker (outside) and a
tenacity retry (inside) for transport and 5xx failures.

Usage:
    async with BunnyStorageClient() as bunny:
        url = await bunny.put("leads/LL001/bom.xlsx", data)
"""

from typing import Any

import aiobreaker
import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from modules.backend.core.concurrency import get_semaphore
from modules.backend.core.config import get_app_config, get_settings
from modules.backend.core.exceptions import ExternalServiceError
from modules.backend.core.logging import get_logger
from modules.backend.core.resilience import create_circuit_breaker, retry_logger

logger = get_logger(__name__)

SERVICE_NAME = "bunny_storage"
MAX_ATTEMPTS = 3

_breaker: aiobreaker.CircuitBreaker | None = None


def get_breaker() -> aiobreaker.CircuitBreaker:
    """Get or create the process-wide Bunny storage circuit breaker."""
    global _breaker
    if _breaker is None:
        breaker_config = get_app_config().integrations.bunny.circuit_breaker
        _breaker = create_circuit_breaker(
            SERVICE_NAME,
            fail_max=breaker_config.fail_max,
            timeout_duration=breaker_config.timeout_duration,
        )
    return _breaker


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return isinstance(exc, httpx.TransportError)


class BunnyStorageClient:
    """HTTP client for the Bunny storage API of one storage zone."""

    def __init__(
        self,
        storage_zone: str | None = None,
        api_key: str | None = None,
        region: str | None = None,
        cdn_host: str | None = None,
        *,
        breaker: aiobreaker.CircuitBreaker | None = None,
        retry_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        app_config = get_app_config()
        bunny_config = app_config.integrations.bunny

        self.storage_zone = storage_zone or bunny_config.storage_zone
        self.api_key = api_key or get_settings().bunny_storage_api_key
        self.region = bunny_config.region if region is None else region
        self.cdn_host = (cdn_host or bunny_config.cdn_host).rstrip("/")
        self.timeout = float(app_config.application.timeouts.external_api)
        self._breaker = breaker or get_breaker()
        self._retry_delay = retry_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def storage_host(self) -> str:
        prefix = f"{self.region}." if self.region else ""
        return f"https://{prefix}storage.bunnycdn.com"

    def storage_url(self, path: str) -> str:
        return f"{self.storage_host}/{self.storage_zone}/{path.lstrip('/')}"

    def cdn_url(self, path: str) -> str:
        return f"https://{self.cdn_host}/{path.lstrip('/')}"

    def path_from_url(self, url_or_path: str) -> str:
        """Storage path for a CDN URL; plain paths are returned unchanged."""
        prefix = f"https://{self.cdn_host}/"
        if url_or_path.startswith(prefix):
            return url_or_path[len(prefix):]
        return url_or_path.lstrip("/")

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"AccessKey": self.api_key},
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

    async def _send(
        self, method: str, url: str, *, missing_ok: bool = False, **kwargs: Any,
    ) -> httpx.Response:
        client = await self._get_client()
        async with get_semaphore("external_api"):
            response = await client.request(method, url, **kwargs)
        if missing_ok and response.status_code == 404:
            return response
        response.raise_for_status()
        return response

    async def _send_with_retry(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(MAX_ATTEMPTS),
            wait=wait_exponential(multiplier=self._retry_delay, max=10),
            retry=retry_if_exception(_is_retryable),
            before_sleep=retry_logger(SERVICE_NAME),
            reraise=True,
        )
        return await retrying(self._send, method, url, **kwargs)

    async def _call(self, operation: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._breaker.call_async(self._send_with_retry, method, url, **kwargs)
        except aiobreaker.CircuitBreakerError as exc:
            logger.error(
                "Bunny storage circuit open",
                extra={"operation": operation, "url": url},
            )
            raise ExternalServiceError(
                "File storage is temporarily unavailable", service=SERVICE_NAME,
            ) from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Bunny storage request failed",
                extra={
                    "operation": operation,
                    "url": url,
                    "status_code": exc.response.status_code,
                },
            )
            raise ExternalServiceError(
                f"File storage {operation} failed",
                service=SERVICE_NAME,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.TransportError as exc:
            logger.error(
                "Bunny storage unreachable",
                extra={"operation": operation, "url": url, "error": str(exc)},
            )
            raise ExternalServiceError(
                f"File storage {operation} failed", service=SERVICE_NAME,
            ) from exc

    async def put(
        self,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """
        Upload an object.

        Args:
            path: Storage path inside the zone (no leading slash)
            data: Object bytes
            content_type: MIME type sent with the upload

        Returns:
            Public CDN URL of the object

        Raises:
            ExternalServiceError: Upload failed or the circuit is open
        """
        await self._call(
            "upload",
            "PUT",
            self.storage_url(path),
            content=data,
            headers={"Content-Type": content_type},
        )
        url = self.cdn_url(path)
        logger.info("Uploaded file to CDN", extra={"path": path, "size": len(data)})
        return url

    async def delete(self, url_or_path: str) -> None:
        """Delete an object by CDN URL or storage path. Missing objects are ignored."""
        path = self.path_from_url(url_or_path)
        response = await self._call("delete", "DELETE", self.storage_url(path), missing_ok=True)
        if response.status_code == 404:
            logger.debug("CDN object already absent", extra={"path": path})
            return
        logger.info("Deleted file from CDN", extra={"path": path})
