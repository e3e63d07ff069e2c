"""
Metrics collection for the search proxy.

Provides a pluggable metrics interface with a zero-overhead default and a
Prometheus backend.

Example:
    >>> from search_proxy.metrics import NoOpMetrics, PrometheusMetrics
    >>>
    >>> metrics = NoOpMetrics()
    >>> metrics.increment(SearchMetrics.REQUESTS_TOTAL)  # No-op
    >>>
    >>> metrics = PrometheusMetrics()
    >>> metrics.increment(SearchMetrics.TIER_SUCCESS, labels={'tier': 'invidious'})
"""

from .base import MetricsCollector, NoOpMetrics
from .constants import MetricLabels, SearchMetrics
from .prometheus import PrometheusMetrics

__all__ = [
    "MetricsCollector",
    "NoOpMetrics",
    "PrometheusMetrics",
    "SearchMetrics",
    "MetricLabels",
]
