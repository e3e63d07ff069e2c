"""
Metric name constants for the search proxy.

Standardized names keep the orchestrator, fetcher and dashboards in sync.
"""


class SearchMetrics:
    """Metric name constants for search proxy operations."""

    # Inbound requests
    REQUESTS_TOTAL = "search_proxy.requests.total"
    REQUESTS_DEGRADED = "search_proxy.requests.degraded"
    REQUEST_LATENCY_MS = "search_proxy.request.latency.milliseconds"

    # Cache
    RENDERED_CACHE_HITS = "search_proxy.cache.rendered.hits"
    RAW_CACHE_HITS = "search_proxy.cache.raw.hits"

    # Tiers
    TIER_ATTEMPTED = "search_proxy.tier.attempted"
    TIER_SUCCESS = "search_proxy.tier.success"
    TIER_FAILURE = "search_proxy.tier.failure"

    # Candidates
    CANDIDATE_FAILURE = "search_proxy.candidate.failure"
    CANDIDATE_DURATION_MS = "search_proxy.candidate.duration.milliseconds"


class MetricLabels:
    """Standard label names for metrics."""

    OPERATION = "operation"  # search, channels, suggest
    TIER = "tier"  # invidious, piped, youtube_html, google_suggest
    ERROR_TYPE = "error_type"  # timeout, http_status, malformed, empty, ...


__all__ = ["SearchMetrics", "MetricLabels"]
