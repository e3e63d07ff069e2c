"""
Multi-Source Fallback Package

Tiered fetching across interchangeable upstream mirrors, with race,
sequential and parallel candidate strategies.

Main Components:
    - SearchOrchestrator: Main coordinator (RENDERED CACHE → TIERS → RENDER)
    - MultiSourceFetcher: Runs one tier's candidates with a strategy
    - CandidateBuilder: Builds ordered tiers of candidate URLs from pools
    - FetchStrategy / Tier / FetchResult: Configuration and results

Usage:
    >>> from search_proxy.multi_source import (
    ...     CandidateBuilder, MultiSourceFetcher, SearchOrchestrator, UpstreamPools
    ... )
    >>> builder = CandidateBuilder(UpstreamPools(invidious=["https://inv.example"]))
    >>> fetcher = MultiSourceFetcher(http_client, cache)
    >>> orchestrator = SearchOrchestrator(builder, fetcher, cache)
    >>> response = await orchestrator.search("lofi")
"""

from .fetch_config import (
    FetchMode,
    FetchResult,
    FetchStrategy,
    ResponseType,
    Tier,
)
from .fetcher import MultiSourceFetcher
from .orchestrator import SearchOrchestrator, TierOutcome
from .upstream import CandidateBuilder, UpstreamPools

__all__ = [
    # Main orchestrator
    "SearchOrchestrator",
    "TierOutcome",
    # Fetcher
    "MultiSourceFetcher",
    # Candidate URLs
    "CandidateBuilder",
    "UpstreamPools",
    # Configuration
    "FetchMode",
    "FetchStrategy",
    "FetchResult",
    "ResponseType",
    "Tier",
]
