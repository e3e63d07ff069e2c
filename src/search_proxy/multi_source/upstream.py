"""
Upstream Pools and Candidate-URL Builder

Turns a logical operation plus query into the ordered tiers the orchestrator
walks. Each tier carries one fully-formed URL per pool member, translated with
that upstream's own query rules.
"""

from dataclasses import dataclass, field

from ..helpers import build_url
from ..models import Operation, SchemaFamily
from ..settings import Settings
from .fetch_config import ResponseType, Tier

INVIDIOUS_TIER = "invidious"
PIPED_TIER = "piped"
YOUTUBE_HTML_TIER = "youtube_html"
GOOGLE_SUGGEST_TIER = "google_suggest"

# Piped instances expose both path styles; which one works varies per mirror.
PIPED_SEARCH_PATHS = (("/search", "query"), ("/api/v1/search", "q"))
PIPED_SUGGEST_PATHS = (("/suggestions", "query"), ("/api/v1/suggestions", "q"))


@dataclass
class UpstreamPools:
    """
    Configured mirror pools and fallback endpoints.

    Attributes:
        invidious: Invidious base URLs in preference order
        piped: Piped API base URLs in preference order
        youtube_base: Base URL of the HTML results page
        google_suggest_base: Base URL of the Google suggest service
        hl: Interface language hint
        gl: Region hint
        scrape_timeout: Timeout for the HTML tier (seconds)
        suggest_fallback_timeout: Timeout for the Google suggest tier (seconds)
    """

    invidious: list[str] = field(default_factory=list)
    piped: list[str] = field(default_factory=list)
    youtube_base: str = "https://www.youtube.com"
    google_suggest_base: str = "https://suggestqueries.google.com"
    hl: str = "en"
    gl: str = "US"
    scrape_timeout: float | None = 4.5
    suggest_fallback_timeout: float | None = 2.5

    @classmethod
    def from_settings(cls, settings: Settings) -> "UpstreamPools":
        return cls(
            invidious=settings.invidious_pool_urls,
            piped=settings.piped_pool_urls,
            youtube_base=settings.youtube_base,
            google_suggest_base=settings.google_suggest_base,
            hl=settings.suggest_hl,
            gl=settings.suggest_gl,
            scrape_timeout=settings.scrape_timeout,
            suggest_fallback_timeout=settings.suggest_fallback_timeout,
        )


class CandidateBuilder:
    """
    Builds the ordered tier list for an operation.

    Examples:
        >>> builder = CandidateBuilder(UpstreamPools(invidious=["https://inv.example"]))
        >>> tiers = builder.build(Operation.CHANNELS, "lofi", page=1)
        >>> tiers[0].urls
        ['https://inv.example/api/v1/search?q=type%3Achannel%20lofi&page=1']
    """

    def __init__(self, pools: UpstreamPools):
        self.pools = pools

    def build(self, operation: Operation, query: str, page: int = 1) -> list[Tier]:
        """
        Args:
            operation: Logical operation
            query: Non-empty, stripped query
            page: 1-based results page (ignored for suggest)

        Returns:
            Tiers in fixed priority order; a tier may have zero candidates
        """
        if operation is Operation.SUGGEST:
            return [
                self._invidious_suggest(query),
                self._piped_suggest(query),
                self._google_suggest(query),
            ]
        return [
            self._invidious_search(operation, query, page),
            self._piped_search(operation, query, page),
            self._youtube_html(query, page),
        ]

    def _invidious_search(self, operation: Operation, query: str, page: int) -> Tier:
        # Invidious takes its type filter inside the query string.
        if operation is Operation.CHANNELS:
            query = f"type:channel {query}"
        return Tier(
            name=INVIDIOUS_TIER,
            schema=SchemaFamily.INVIDIOUS,
            urls=[
                build_url(base, "/api/v1/search", {"q": query, "page": page})
                for base in self.pools.invidious
            ],
        )

    def _piped_search(self, operation: Operation, query: str, page: int) -> Tier:
        urls = []
        for path, query_param in PIPED_SEARCH_PATHS:
            for base in self.pools.piped:
                params: dict[str, object] = {query_param: query}
                if operation is Operation.CHANNELS:
                    params["filter"] = "channels"
                params["page"] = page
                urls.append(build_url(base, path, params))
        return Tier(name=PIPED_TIER, schema=SchemaFamily.PIPED, urls=urls)

    def _youtube_html(self, query: str, page: int) -> Tier:
        # The results page only ever yields page 1.
        urls = []
        if page <= 1:
            urls.append(
                build_url(
                    self.pools.youtube_base,
                    "/results",
                    {"search_query": query, "hl": self.pools.hl, "gl": self.pools.gl},
                )
            )
        return Tier(
            name=YOUTUBE_HTML_TIER,
            schema=SchemaFamily.YOUTUBE_HTML,
            urls=urls,
            response_type=ResponseType.HTML,
            timeout=self.pools.scrape_timeout,
            cache_raw=False,
        )

    def _invidious_suggest(self, query: str) -> Tier:
        return Tier(
            name=INVIDIOUS_TIER,
            schema=SchemaFamily.INVIDIOUS,
            urls=[
                build_url(base, "/api/v1/search/suggestions", {"q": query})
                for base in self.pools.invidious
            ],
        )

    def _piped_suggest(self, query: str) -> Tier:
        urls = [
            build_url(base, path, {query_param: query})
            for path, query_param in PIPED_SUGGEST_PATHS
            for base in self.pools.piped
        ]
        return Tier(name=PIPED_TIER, schema=SchemaFamily.PIPED, urls=urls)

    def _google_suggest(self, query: str) -> Tier:
        url = build_url(
            self.pools.google_suggest_base,
            "/complete/search",
            {
                "client": "firefox",
                "ds": "yt",
                "hl": self.pools.hl,
                "gl": self.pools.gl,
                "q": query,
            },
        )
        return Tier(
            name=GOOGLE_SUGGEST_TIER,
            schema=SchemaFamily.GOOGLE_SUGGEST,
            urls=[url],
            timeout=self.pools.suggest_fallback_timeout,
        )


__all__ = [
    "INVIDIOUS_TIER",
    "PIPED_TIER",
    "YOUTUBE_HTML_TIER",
    "GOOGLE_SUGGEST_TIER",
    "UpstreamPools",
    "CandidateBuilder",
]
