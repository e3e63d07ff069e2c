"""
Time Provider Abstraction

Pluggable clock for cache expiry. Production uses a monotonic clock; tests
use a simulated clock they can advance explicitly.
"""

import time
from abc import ABC, abstractmethod


class TimeProvider(ABC):
    """Abstract clock returning seconds as a float."""

    @abstractmethod
    def now(self) -> float:
        """Get current time in seconds."""


class RealtimeTimeProvider(TimeProvider):
    """
    Real-time provider backed by ``time.monotonic()``.

    Monotonic time is immune to wall-clock adjustments, which matters for
    TTL arithmetic.
    """

    def now(self) -> float:
        return time.monotonic()


class SimulatedTimeProvider(TimeProvider):
    """
    Simulated clock for deterministic tests.

    Examples:
        >>> clock = SimulatedTimeProvider()
        >>> start = clock.now()
        >>> clock.advance(600)
        >>> clock.now() - start
        600.0
    """

    def __init__(self, initial_time: float = 0.0):
        self.virtual_time = float(initial_time)

    def now(self) -> float:
        return self.virtual_time

    def advance(self, seconds: float) -> None:
        """Move virtual time forward.

        Raises:
            ValueError: If seconds is negative
        """
        if seconds < 0:
            raise ValueError(f"Cannot move time backwards, got {seconds}")
        self.virtual_time += seconds


__all__ = [
    "TimeProvider",
    "RealtimeTimeProvider",
    "SimulatedTimeProvider",
]
