"""
Search Proxy

Resilient search aggregation over interchangeable Invidious and Piped mirror
pools, with an HTML-scrape last resort, a two-tier TTL cache and one
canonical item model.

Usage:
    >>> from search_proxy import create_app
    >>> app = create_app()

    Or embedded:
    >>> from search_proxy import ResponseCache, SearchOrchestrator
"""

__version__ = "1.0.0"

from .cache import RenderedResponse, ResponseCache
from .exceptions import (
    CandidateError,
    ConfigError,
    EmptyResultError,
    MalformedPayloadError,
    ScrapeParseError,
    SearchProxyError,
    UpstreamNetworkError,
    UpstreamStatusError,
    UpstreamTimeoutError,
)
from .models import (
    ChannelItem,
    ItemKind,
    Operation,
    PlaylistItem,
    SchemaFamily,
    SearchResponse,
    SoftFailure,
    SuggestResponse,
    VideoItem,
)
from .multi_source import (
    CandidateBuilder,
    FetchMode,
    FetchStrategy,
    MultiSourceFetcher,
    SearchOrchestrator,
    UpstreamPools,
)
from .normalizer import ResponseNormalizer
from .settings import Settings, get_settings
from .app import create_app

__all__ = [
    # App
    "create_app",
    "Settings",
    "get_settings",
    # Engine
    "SearchOrchestrator",
    "MultiSourceFetcher",
    "CandidateBuilder",
    "UpstreamPools",
    "FetchMode",
    "FetchStrategy",
    "ResponseNormalizer",
    # Cache
    "ResponseCache",
    "RenderedResponse",
    # Models
    "ItemKind",
    "Operation",
    "SchemaFamily",
    "SoftFailure",
    "VideoItem",
    "ChannelItem",
    "PlaylistItem",
    "SearchResponse",
    "SuggestResponse",
    # Exceptions
    "SearchProxyError",
    "CandidateError",
    "UpstreamTimeoutError",
    "UpstreamStatusError",
    "UpstreamNetworkError",
    "MalformedPayloadError",
    "ScrapeParseError",
    "EmptyResultError",
    "ConfigError",
    # Metadata
    "__version__",
]
