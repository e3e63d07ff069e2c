"""
Prometheus metrics collector.

Backs the ``/metrics`` endpoint when ``METRICS_ENABLED`` is set.
"""

from typing import Any

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from .base import MetricsCollector


class PrometheusMetrics(MetricsCollector):
    """
    Prometheus metrics collector.

    Counters and histograms are created lazily on first use, with label names
    taken from the first call for that metric.

    Example:
        >>> metrics = PrometheusMetrics()
        >>> metrics.increment('search_proxy.requests.total', labels={'operation': 'search'})
        >>> body = metrics.render()
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """
        Initialize Prometheus metrics collector.

        Args:
            registry: Registry to register metrics in. A private registry is
                created when omitted so app instances do not collide.
        """
        self._registry = registry or CollectorRegistry()
        self._counters: dict[str, Any] = {}
        self._histograms: dict[str, Any] = {}

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def _sanitize_metric_name(self, metric: str) -> str:
        """Convert dotted names to Prometheus-safe identifiers."""
        return metric.replace(".", "_").replace("-", "_")

    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        metric_name = self._sanitize_metric_name(metric)
        labels = labels or {}

        if metric_name not in self._counters:
            self._counters[metric_name] = Counter(
                metric_name,
                f"Counter for {metric}",
                list(labels.keys()),
                registry=self._registry,
            )

        if labels:
            self._counters[metric_name].labels(**labels).inc(value)
        else:
            self._counters[metric_name].inc(value)

    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        metric_name = self._sanitize_metric_name(metric)
        labels = labels or {}

        if metric_name not in self._histograms:
            self._histograms[metric_name] = Histogram(
                metric_name,
                f"Histogram for {metric}",
                list(labels.keys()),
                registry=self._registry,
            )

        if labels:
            self._histograms[metric_name].labels(**labels).observe(value)
        else:
            self._histograms[metric_name].observe(value)

    def render(self) -> bytes:
        """Return the registry in Prometheus text exposition format."""
        return generate_latest(self._registry)


__all__ = ["PrometheusMetrics"]
