"""Unit tests for the two-tier response cache."""

import pytest
from cachetools import TLRUCache

from search_proxy.cache import RenderedResponse, ResponseCache
from search_proxy.time_provider import SimulatedTimeProvider


class TestExpiryAndEviction:
    """Test expiry and eviction of the backing store."""

    def test_get_returns_stored_value(self, response_cache):
        """Test a fresh entry is returned."""
        response_cache.set_raw("a", {"x": 1})

        assert response_cache.get_raw("a") == {"x": 1}
        assert len(response_cache) == 1

    def test_miss_returns_none(self, response_cache):
        """Test an unknown key is a miss."""
        assert response_cache.get_raw("missing") is None
        assert response_cache.get_rendered("missing") is None

    def test_entry_absent_after_ttl_elapses(self, clock):
        """Test an entry inserted with TTL t is gone once t has elapsed."""
        cache = ResponseCache.create(maxsize=4, ttl=600, clock=clock)
        cache.set_raw("a", 1)

        clock.advance(599)
        assert cache.get_raw("a") == 1

        clock.advance(1)
        assert cache.get_raw("a") is None
        assert len(cache) == 0

    def test_reads_do_not_extend_lifetime(self, clock):
        """Test TTL counts from insertion, not from last access."""
        cache = ResponseCache.create(maxsize=4, ttl=10, clock=clock)
        cache.set_raw("a", 1)

        for _ in range(3):
            clock.advance(3)
            assert cache.get_raw("a") == 1

        clock.advance(1)
        assert cache.get_raw("a") is None

    def test_per_entry_ttl_override(self, clock):
        """Test set() accepts a ttl for one entry."""
        cache = ResponseCache.create(maxsize=4, ttl=600, clock=clock)
        cache.set("short", 1, ttl=5)
        cache.set("long", 2)

        clock.advance(5)

        assert cache.get("short") is None
        assert cache.get("long") == 2
        assert len(cache) == 1

    def test_rendered_ttl_override(self, response_cache, clock):
        """Test a rendered entry can be stored with a shorter lifetime."""
        response_cache.set_rendered("/suggest?q=a", RenderedResponse(200, b"{}"), ttl=30)

        clock.advance(30)

        assert response_cache.get_rendered("/suggest?q=a") is None

    def test_overwrite_resets_lifetime(self, clock):
        """Test replacing a value starts a new TTL."""
        cache = ResponseCache.create(maxsize=4, ttl=10, clock=clock)
        cache.set_raw("a", 1)
        clock.advance(8)
        cache.set_raw("a", 2)
        clock.advance(8)

        assert cache.get_raw("a") == 2

    def test_lru_eviction_when_full(self, clock):
        """Test the least-recently-used entry is evicted at capacity."""
        cache = ResponseCache.create(maxsize=2, ttl=100, clock=clock)
        cache.set_raw("a", 1)
        cache.set_raw("b", 2)
        cache.get_raw("a")  # b is now least recently used
        cache.set_raw("c", 3)

        assert cache.get_raw("b") is None
        assert cache.get_raw("a") == 1
        assert cache.get_raw("c") == 3
        assert len(cache) == 2

    def test_overwrite_does_not_evict(self, clock):
        """Test replacing an existing key at capacity keeps the others."""
        cache = ResponseCache.create(maxsize=2, ttl=100, clock=clock)
        cache.set_raw("a", 1)
        cache.set_raw("b", 2)
        cache.set_raw("a", 10)

        assert cache.get_raw("a") == 10
        assert cache.get_raw("b") == 2

    @pytest.mark.parametrize("maxsize,ttl", [(0, 10), (-1, 10), (10, 0), (10, -5)])
    def test_rejects_non_positive_limits(self, maxsize, ttl):
        """Test invalid capacity or TTL is rejected."""
        with pytest.raises(ValueError):
            ResponseCache.create(maxsize=maxsize, ttl=ttl)


class TestResponseCache:
    """Test the raw and rendered namespaces."""

    def test_store_is_tlru_cache_on_given_clock(self, clock):
        """Test the factory builds a TLRUCache timed by the injected clock."""
        cache = ResponseCache.create(maxsize=8, ttl=30, clock=clock)

        assert isinstance(cache.store, TLRUCache)
        assert cache.store.maxsize == 8
        assert cache.store.timer() == clock.now()

    def test_namespaces_are_independent(self, response_cache):
        """Test raw and rendered entries with the same key do not collide."""
        key = "/search?q=lofi"
        rendered = RenderedResponse(status_code=200, body=b'{"items":[]}')

        response_cache.set_raw(key, [{"videoId": "a"}])
        response_cache.set_rendered(key, rendered)

        assert response_cache.get_raw(key) == [{"videoId": "a"}]
        assert response_cache.get_rendered(key) is rendered

    def test_rendered_entry_replayed_byte_for_byte(self, response_cache):
        """Test the stored body is returned unchanged."""
        body = b'{"items":[],"nextPage":2}'
        response_cache.set_rendered("/search?q=x", RenderedResponse(200, body))

        hit = response_cache.get_rendered("/search?q=x")

        assert hit.status_code == 200
        assert hit.body == body
        assert hit.media_type == "application/json"

    def test_both_namespaces_expire(self, response_cache, clock):
        """Test raw and rendered entries share the TTL."""
        response_cache.set_raw("https://inv1.test/api/v1/search?q=a", [1])
        response_cache.set_rendered("/search?q=a", RenderedResponse(200, b"{}"))

        clock.advance(response_cache.ttl)

        assert response_cache.get_raw("https://inv1.test/api/v1/search?q=a") is None
        assert response_cache.get_rendered("/search?q=a") is None

    def test_create_uses_given_limits(self):
        """Test the factory wires capacity, TTL and clock."""
        clock = SimulatedTimeProvider()
        cache = ResponseCache.create(maxsize=1, ttl=30, clock=clock)

        cache.set_raw("a", 1)
        cache.set_raw("b", 2)

        assert cache.ttl == 30
        assert cache.get_raw("a") is None
        assert cache.get_raw("b") == 2

    def test_clear(self, response_cache):
        """Test clear() drops both namespaces."""
        response_cache.set_raw("u", 1)
        response_cache.set_rendered("r", RenderedResponse(200, b"{}"))

        response_cache.clear()

        assert response_cache.get_raw("u") is None
        assert response_cache.get_rendered("r") is None
