"""
Two-tier response cache.

One ``cachetools.TLRUCache`` backs two namespaces:

- raw upstream payloads, keyed by the exact outbound URL, shared by every
  inbound request that translates to that URL;
- rendered responses, keyed by the inbound path and query, replayed
  byte-for-byte on a hit.

Every entry expires its own TTL after insertion, reads never extend it, and
the least-recently-used entry is evicted at capacity. The store has no locks.
All access happens on one event loop and concurrent refreshes of a key write
interchangeable values, so last write wins.
"""

from dataclasses import dataclass
from typing import Any, NamedTuple

from cachetools import TLRUCache

from .time_provider import RealtimeTimeProvider, TimeProvider


@dataclass(frozen=True)
class RenderedResponse:
    """A fully serialized endpoint response."""

    status_code: int
    body: bytes
    media_type: str = "application/json"


class CacheEntry(NamedTuple):
    """A stored value with the lifetime it was inserted with."""

    ttl: float
    value: Any


def entry_expiry(key: str, entry: CacheEntry, now: float) -> float:
    """Time-to-use function for TLRUCache: insertion time plus entry TTL."""
    return now + entry.ttl


class ResponseCache:
    """
    Cache service with raw and rendered namespaces over one store.

    Constructed once at start-up and injected into the orchestrator and
    fetcher; tests substitute their own instance.

    Examples:
        >>> clock = SimulatedTimeProvider()
        >>> cache = ResponseCache.create(maxsize=2, ttl=10, clock=clock)
        >>> cache.set_raw("https://inv.test/api/v1/search?q=a", [1])
        >>> cache.get_raw("https://inv.test/api/v1/search?q=a")
        [1]
        >>> clock.advance(10)
        >>> cache.get_raw("https://inv.test/api/v1/search?q=a") is None
        True
    """

    RAW_PREFIX = "UPSTREAM:"
    RENDERED_PREFIX = "RENDERED:"

    def __init__(self, store: TLRUCache, ttl: float):
        """
        Args:
            store: TLRUCache whose time-to-use function is ``entry_expiry``
            ttl: Default lifetime of an entry, in seconds
        """
        self.store = store
        self.ttl = ttl

    @classmethod
    def create(
        cls,
        maxsize: int,
        ttl: float,
        clock: TimeProvider | None = None,
    ) -> "ResponseCache":
        """
        Build a cache over a TLRUCache driven by clock.

        Args:
            maxsize: Maximum number of live entries across both namespaces
            ttl: Default lifetime of an entry, in seconds
            clock: Time source (monotonic real time by default)

        Raises:
            ValueError: If maxsize or ttl is not positive
        """
        if maxsize <= 0:
            raise ValueError(f"maxsize must be positive, got {maxsize}")
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        clock = clock or RealtimeTimeProvider()
        store = TLRUCache(maxsize=maxsize, ttu=entry_expiry, timer=clock.now)
        return cls(store, ttl)

    def get(self, key: str) -> Any | None:
        """Return the live value for key, or None on miss or expiry."""
        entry = self.store.get(key)
        return None if entry is None else entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Insert or replace key; ttl defaults to the cache-wide TTL."""
        self.store[key] = CacheEntry(self.ttl if ttl is None else ttl, value)

    def get_raw(self, url: str) -> Any | None:
        return self.get(self.RAW_PREFIX + url)

    def set_raw(self, url: str, payload: Any, ttl: float | None = None) -> None:
        self.set(self.RAW_PREFIX + url, payload, ttl)

    def get_rendered(self, request_key: str) -> RenderedResponse | None:
        return self.get(self.RENDERED_PREFIX + request_key)

    def set_rendered(
        self,
        request_key: str,
        response: RenderedResponse,
        ttl: float | None = None,
    ) -> None:
        self.set(self.RENDERED_PREFIX + request_key, response, ttl)

    def clear(self) -> None:
        self.store.clear()

    def __len__(self) -> int:
        """Number of live entries."""
        self.store.expire()
        return len(self.store)


__all__ = ["RenderedResponse", "ResponseCache", "CacheEntry"]
