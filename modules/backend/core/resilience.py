"""
Resilience Helpers.

Circuit breakers (aiobreaker) and retry logging (tenacity) for the vendor
integrations. A call to Bunny storage is wrapped outside-in as

    breaker.call_async -> AsyncRetrying -> get_semaphore("external_api") -> httpx

Microsoft Graph calls skip the breaker: the token belongs to the user, so
one user's failures say nothing about the service.

Every event is logged with a `resilience_event` field:

    jq 'select(.resilience_event != null)' logs/system.jsonl
"""

from collections.abc import Callable
from datetime import timedelta
from typing import Any

import aiobreaker
import httpx
from tenacity import RetryCallState

from modules.backend.core.logging import get_logger

logger = get_logger(__name__)

_STATE_EVENTS = {
    "open": "circuit_breaker_opened",
    "half-open": "circuit_breaker_half_open",
    "closed": "circuit_breaker_closed",
}


class ResilienceLogger(aiobreaker.CircuitBreakerListener):
    """Logs breaker transitions and recorded failures for one dependency."""

    def __init__(self, dependency: str) -> None:
        self.dependency = dependency

    def state_change(self, cb: aiobreaker.CircuitBreaker, old_state: Any, new_state: Any) -> None:
        state = str(new_state).lower()
        log = logger.error if state == "open" else logger.info
        log(
            f"Circuit breaker {self.dependency}: {old_state} -> {new_state}",
            extra={
                "resilience_event": _STATE_EVENTS.get(state, f"circuit_breaker_{state}"),
                "dependency": self.dependency,
                "failure_count": cb.fail_counter,
            },
        )

    def failure(self, cb: aiobreaker.CircuitBreaker, exception: Exception) -> None:
        logger.warning(
            f"Circuit breaker {self.dependency}: failure recorded",
            extra={
                "resilience_event": "circuit_breaker_failure",
                "dependency": self.dependency,
                "failure_count": cb.fail_counter,
                "error": str(exception),
            },
        )


def _describe_outcome(retry_state: RetryCallState) -> dict[str, Any]:
    if retry_state.outcome is None or not retry_state.outcome.failed:
        return {"error": None, "upstream_status": None}
    exc = retry_state.outcome.exception()
    status = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
    return {"error": str(exc) or type(exc).__name__, "upstream_status": status}


def retry_logger(dependency: str) -> Callable[[RetryCallState], None]:
    """
    Build a tenacity `before_sleep` callback for calls to `dependency`.

    Usage:
        AsyncRetrying(..., before_sleep=retry_logger("bunny_storage"))
    """

    def log_retry(retry_state: RetryCallState) -> None:
        sleep = retry_state.next_action.sleep if retry_state.next_action else None
        logger.warning(
            f"Retrying {dependency} call (attempt {retry_state.attempt_number})",
            extra={
                "resilience_event": "retry_attempt",
                "dependency": dependency,
                "attempt": retry_state.attempt_number,
                "operation": getattr(retry_state.fn, "__name__", None),
                "sleep_seconds": sleep,
                **_describe_outcome(retry_state),
            },
        )

    return log_retry


def create_circuit_breaker(
    dependency: str,
    fail_max: int = 5,
    timeout_duration: int = 30,
) -> aiobreaker.CircuitBreaker:
    """
    Breaker that opens after `fail_max` consecutive failures and allows a
    trial call after `timeout_duration` seconds.
    """
    return aiobreaker.CircuitBreaker(
        fail_max=fail_max,
        timeout_duration=timedelta(seconds=timeout_duration),
        listeners=[ResilienceLogger(dependency)],
        name=dependency,
    )
