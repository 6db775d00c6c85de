"""
Microsoft Graph Rate Limiter.

Fixed-window request counter kept per client instance. Limits come from
config/settings/integrations.yaml (microsoft_graph.rate_limit).
"""

import time


class GraphRateLimiter:
    """
    Request-timestamp window counter.

    Timestamps older than the window are pruned on every check. There is no
    queueing: callers ask `can_make_request()` and either proceed (and call
    `record_request()`) or back off for `get_wait_time()` seconds.
    """

    def __init__(self, max_requests: int = 100, time_window_seconds: float = 60) -> None:
        self.max_requests = max_requests
        self.time_window_seconds = time_window_seconds
        self._requests: list[float] = []

    def _prune(self, now: float) -> None:
        cutoff = now - self.time_window_seconds
        self._requests = [ts for ts in self._requests if ts > cutoff]

    def can_make_request(self) -> bool:
        self._prune(time.monotonic())
        return len(self._requests) < self.max_requests

    def record_request(self) -> None:
        self._requests.append(time.monotonic())

    def get_wait_time(self) -> float:
        """Seconds until the oldest request leaves the window; 0 when a request is allowed."""
        now = time.monotonic()
        self._prune(now)
        if len(self._requests) < self.max_requests:
            return 0.0
        oldest = min(self._requests)
        return max(0.0, self.time_window_seconds - (now - oldest))

    @property
    def request_count(self) -> int:
        return len(self._requests)
