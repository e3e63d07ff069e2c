"""Search proxy event type constants."""

from enum import Enum


class SearchEvents(str, Enum):
    """Event type constants for structured logging."""

    # Request events
    REQUEST_STARTED = "search.request.started"
    REQUEST_SUCCESS = "search.request.success"
    REQUEST_DEGRADED = "search.request.degraded"
    REQUEST_SHORT_CIRCUIT = "search.request.short_circuit"

    # Tier events
    TIER_STARTED = "search.tier.started"
    TIER_SUCCESS = "search.tier.success"
    TIER_FAILED = "search.tier.failed"
    TIER_SKIPPED = "search.tier.skipped"

    # Candidate events
    CANDIDATE_FAILED = "search.candidate.failed"
    CANDIDATE_CANCELLED = "search.candidate.cancelled"

    # Cache events
    RENDERED_CACHE_HIT = "search.cache.rendered_hit"
    RAW_CACHE_HIT = "search.cache.raw_hit"

    # Scrape events
    SCRAPE_PARSE_FAILED = "search.scrape.parse_failed"


__all__ = ["SearchEvents"]
