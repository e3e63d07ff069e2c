"""
Abstract base class for metrics collection.

The orchestrator and fetcher record through this interface; the backend is
chosen once at start-up.
"""

from abc import ABC, abstractmethod


class MetricsCollector(ABC):
    """
    Abstract base class for metrics collection.

    Implementations must be safe to call from concurrently running tasks.
    """

    @abstractmethod
    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        """
        Increment a counter metric.

        Args:
            metric: Metric name (e.g., 'search_proxy.tier.success')
            value: Amount to increment (default: 1)
            labels: Optional labels (e.g., {'tier': 'piped'})
        """

    @abstractmethod
    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        """
        Record a histogram/timing metric.

        Args:
            metric: Metric name
            value: Value to record (e.g., latency in milliseconds)
            labels: Optional labels
        """

    def timing(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        """Record a duration in milliseconds (alias for histogram)."""
        self.histogram(metric, value, labels)


class NoOpMetrics(MetricsCollector):
    """Default collector; every call is a no-op."""

    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        pass

    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        pass


__all__ = ["MetricsCollector", "NoOpMetrics"]
