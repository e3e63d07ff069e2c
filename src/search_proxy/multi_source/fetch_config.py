"""
Multi-Source Fetch Configuration

Tier definitions, fetch strategies and result structures for the fallback
engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..models import SchemaFamily


class FetchMode(str, Enum):
    """How the candidates of one tier are executed."""

    RACE = "race"  # Start all, first success wins, cancel the rest
    SEQUENTIAL = "sequential"  # Try candidates one by one in pool order
    PARALLEL = "parallel"  # Start all, wait for all, first success in pool order


class ResponseType(str, Enum):
    """How a candidate's body is decoded before normalization."""

    JSON = "json"
    HTML = "html"


@dataclass
class FetchStrategy:
    """
    Strategy configuration for a tier's candidates.

    Attributes:
        mode: Candidate execution mode
        per_source_timeout: Timeout per individual candidate (seconds)
        max_retries: Extra attempts per candidate after the first
        retry_delay: Delay between retries (seconds)

    Examples:
        Race with a 3.5s budget per mirror:
        >>> strategy = FetchStrategy(mode=FetchMode.RACE, per_source_timeout=3.5)

        Sequential with one retry:
        >>> strategy = FetchStrategy(
        ...     mode=FetchMode.SEQUENTIAL,
        ...     max_retries=1,
        ...     retry_delay=0.2
        ... )
    """

    mode: FetchMode = FetchMode.RACE
    per_source_timeout: float = 3.5
    max_retries: int = 0
    retry_delay: float = 0.0


@dataclass
class Tier:
    """
    One upstream family with its fully-formed candidate URLs.

    Attributes:
        name: Tier identifier used in logs and metrics
        schema: Schema family the normalizer applies to payloads
        urls: Candidate URLs in preference order
        response_type: JSON payload or HTML page
        timeout: Per-candidate timeout override (seconds)
        cache_raw: Whether decoded payloads go into the raw cache
    """

    name: str
    schema: SchemaFamily
    urls: list[str] = field(default_factory=list)
    response_type: ResponseType = ResponseType.JSON
    timeout: float | None = None
    cache_raw: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.urls


@dataclass
class FetchResult:
    """
    Result of running one tier.

    Attributes:
        success: Whether a candidate produced a non-empty normalized result
        tier: Name of the tier that ran
        source_url: URL of the winning candidate (if any)
        data: Normalized result of the winning candidate
        errors: Structured records of failed candidates
        metadata: Timing and strategy details

    Examples:
        Failed tier:
        >>> result = FetchResult(
        ...     success=False,
        ...     tier="invidious",
        ...     errors=[
        ...         {"source": "https://inv1.example/api/v1/search?q=a", "error": "timeout"},
        ...         {"source": "https://inv2.example/api/v1/search?q=a", "error": "http_status"},
        ...     ]
        ... )
    """

    success: bool = False
    tier: str | None = None
    source_url: str | None = None
    data: Any = None
    errors: list[dict[str, Any]] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def error_kinds(self) -> set[str]:
        return {error.get("error") for error in self.errors if error.get("error")}


__all__ = [
    "FetchMode",
    "ResponseType",
    "FetchStrategy",
    "Tier",
    "FetchResult",
]
