"""Per-client sliding-window rate limiting."""

from collections import deque

from cachetools import TTLCache

from .time_provider import RealtimeTimeProvider, TimeProvider


class SlidingWindowRateLimiter:
    """
    Allows at most ``max_requests`` per client within ``window_seconds``.

    Buckets live in a TTLCache that expires a client one window after its
    last accepted request, so idle clients do not accumulate.

    Examples:
        >>> limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=60)
        >>> limiter.allow("1.2.3.4"), limiter.allow("1.2.3.4"), limiter.allow("1.2.3.4")
        (True, True, False)
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: TimeProvider | None = None,
        max_clients: int = 100_000,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock or RealtimeTimeProvider()
        self._buckets: TTLCache = TTLCache(
            maxsize=max_clients,
            ttl=window_seconds,
            timer=self.clock.now,
        )

    def allow(self, client_key: str) -> bool:
        """Record a request for client_key and report whether it is allowed."""
        now_ts = self.clock.now()
        bucket = self._buckets.get(client_key)
        if bucket is None:
            bucket = deque()

        cutoff = now_ts - self.window_seconds
        while bucket and bucket[0] <= cutoff:
            bucket.popleft()

        if len(bucket) >= self.max_requests:
            return False

        bucket.append(now_ts)
        # Re-insert so the bucket lives one window past its newest request.
        self._buckets[client_key] = bucket
        return True

    def retry_after(self, client_key: str) -> int:
        """Seconds until the oldest request in the window expires."""
        bucket = self._buckets.get(client_key)
        if not bucket:
            return 0
        remaining = bucket[0] + self.window_seconds - self.clock.now()
        return max(int(remaining) + 1, 1)

    def __len__(self) -> int:
        """Number of clients with a live window."""
        return len(self._buckets)


__all__ = ["SlidingWindowRateLimiter"]
