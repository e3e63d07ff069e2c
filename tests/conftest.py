"""Pytest configuration and shared fixtures for search proxy tests."""

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from search_proxy.cache import ResponseCache
from search_proxy.multi_source import (
    CandidateBuilder,
    FetchMode,
    FetchStrategy,
    MultiSourceFetcher,
    SearchOrchestrator,
    UpstreamPools,
)
from search_proxy.time_provider import SimulatedTimeProvider


INVIDIOUS_MIRRORS = ["https://inv1.test", "https://inv2.test"]
PIPED_MIRRORS = ["https://piped1.test"]
YOUTUBE_BASE = "https://yt.test"
GOOGLE_SUGGEST_BASE = "https://suggest.test"


# ==================== Mock Upstreams ====================


def make_response(
    url: str,
    status_code: int = 200,
    json_body: Any = None,
    text: str | None = None,
) -> httpx.Response:
    """Build a real httpx.Response bound to a GET request for url."""
    request = httpx.Request("GET", url)
    if json_body is not None:
        return httpx.Response(status_code, json=json_body, request=request)
    return httpx.Response(status_code, text=text or "", request=request)


class UpstreamRouter:
    """
    Answers mocked GETs by URL prefix and records every requested URL.

    The first route whose prefix matches wins; unmatched URLs fail with a
    connection error, like an unreachable mirror.
    """

    def __init__(self):
        self.routes: list[tuple[str, dict[str, Any]]] = []
        self.calls: list[str] = []
        self.cancelled: list[str] = []

    def add(
        self,
        prefix: str,
        status_code: int = 200,
        json_body: Any = None,
        text: str | None = None,
        delay: float = 0.0,
        exc: Exception | None = None,
    ) -> "UpstreamRouter":
        self.routes.append((prefix, {
            "status_code": status_code,
            "json_body": json_body,
            "text": text,
            "delay": delay,
            "exc": exc,
        }))
        return self

    def calls_to(self, prefix: str) -> list[str]:
        return [url for url in self.calls if url.startswith(prefix)]

    async def __call__(self, url: str, headers=None, timeout=None) -> httpx.Response:
        self.calls.append(url)
        for prefix, route in self.routes:
            if not url.startswith(prefix):
                continue
            if route["delay"]:
                try:
                    await asyncio.sleep(route["delay"])
                except asyncio.CancelledError:
                    self.cancelled.append(url)
                    raise
            if route["exc"] is not None:
                raise route["exc"]
            return make_response(
                url,
                status_code=route["status_code"],
                json_body=route["json_body"],
                text=route["text"],
            )
        raise httpx.ConnectError("connection refused", request=httpx.Request("GET", url))


@pytest.fixture
def upstream_router() -> UpstreamRouter:
    """Create an empty upstream router."""
    return UpstreamRouter()


@pytest.fixture
def mock_http_client(upstream_router) -> AsyncMock:
    """Create a mock AsyncClient whose GETs go through the upstream router."""
    client = AsyncMock(spec=httpx.AsyncClient)
    # Bound coroutine method so AsyncMock awaits the side effect.
    client.get.side_effect = upstream_router.__call__
    return client


# ==================== Cache Fixtures ====================


@pytest.fixture
def clock() -> SimulatedTimeProvider:
    """Create a simulated clock."""
    return SimulatedTimeProvider(initial_time=1000.0)


@pytest.fixture
def response_cache(clock) -> ResponseCache:
    """Create a response cache on the simulated clock."""
    return ResponseCache.create(maxsize=100, ttl=600, clock=clock)


# ==================== Engine Fixtures ====================


@pytest.fixture
def upstream_pools() -> UpstreamPools:
    """Create pools pointing at the mocked mirrors."""
    return UpstreamPools(
        invidious=list(INVIDIOUS_MIRRORS),
        piped=list(PIPED_MIRRORS),
        youtube_base=YOUTUBE_BASE,
        google_suggest_base=GOOGLE_SUGGEST_BASE,
        hl="en",
        gl="US",
        scrape_timeout=1.0,
        suggest_fallback_timeout=1.0,
    )


@pytest.fixture
def candidate_builder(upstream_pools) -> CandidateBuilder:
    return CandidateBuilder(upstream_pools)


@pytest.fixture
def fetcher(mock_http_client, response_cache) -> MultiSourceFetcher:
    return MultiSourceFetcher(mock_http_client, response_cache)


@pytest.fixture
def sequential_strategy() -> FetchStrategy:
    """Sequential strategy: deterministic pool order."""
    return FetchStrategy(mode=FetchMode.SEQUENTIAL, per_source_timeout=1.0)


@pytest.fixture
def race_strategy() -> FetchStrategy:
    return FetchStrategy(mode=FetchMode.RACE, per_source_timeout=1.0)


@pytest.fixture
def orchestrator(candidate_builder, fetcher, response_cache, sequential_strategy) -> SearchOrchestrator:
    """Create an orchestrator over the mocked mirrors."""
    return SearchOrchestrator(
        builder=candidate_builder,
        fetcher=fetcher,
        cache=response_cache,
        strategy=sequential_strategy,
    )


# ==================== Payload Fixtures ====================


@pytest.fixture
def invidious_search_payload() -> list[dict[str, Any]]:
    """Invidious /api/v1/search answer with one entry of each kind."""
    return [
        {
            "type": "video",
            "videoId": "vid1",
            "title": "Lofi beats",
            "author": "Lofi Girl",
            "authorId": "UCSJ4",
            "lengthSeconds": 3600,
            "viewCount": 12345,
            "publishedText": "1 day ago",
            "videoThumbnails": [
                {"quality": "maxres", "url": "https://img.test/1.jpg"},
                {"quality": "high", "url": "https://img.test/2.jpg"},
                {"quality": "medium", "url": "https://img.test/3.jpg"},
                {"quality": "default", "url": "https://img.test/4.jpg"},
            ],
        },
        {
            "type": "channel",
            "author": "Lofi Girl",
            "authorId": "UCSJ4",
            "authorThumbnails": [{"url": "https://img.test/avatar.jpg", "width": 32}],
        },
        {"type": "playlist", "playlistId": "PL1", "title": "Study mix", "authorId": "UCSJ4"},
        {"type": "category", "title": "Shelf"},
    ]


@pytest.fixture
def piped_search_payload() -> dict[str, Any]:
    """Piped /search answer wrapping its entries in ``items``."""
    return {
        "items": [
            {
                "type": "stream",
                "url": "/watch?v=pv1",
                "title": "Piped video",
                "uploaderName": "Uploader",
                "uploaderUrl": "/channel/UCp1",
                "duration": 215,
                "views": "1234",
                "uploadedDate": "2 days ago",
                "thumbnail": "https://pimg.test/1.jpg",
            },
            {
                "type": "channel",
                "url": "/channel/UCp2",
                "name": "Piped channel",
                "thumbnail": "https://pimg.test/c.jpg",
            },
        ],
        "nextpage": "opaque-token",
    }


@pytest.fixture
def initial_data() -> dict[str, Any]:
    """Minimal ytInitialData with one channel and one video renderer."""
    return {
        "contents": {
            "twoColumnSearchResultsRenderer": {
                "primaryContents": {
                    "sectionListRenderer": {
                        "contents": [
                            {
                                "itemSectionRenderer": {
                                    "contents": [
                                        {
                                            "channelRenderer": {
                                                "channelId": "UCh1",
                                                "title": {"simpleText": "HTML Channel"},
                                                "thumbnail": {
                                                    "thumbnails": [{"url": "https://yt3.test/avatar"}]
                                                },
                                            }
                                        },
                                        {
                                            "videoRenderer": {
                                                "videoId": "hv1",
                                                "title": {"runs": [{"text": "HTML "}, {"text": "video"}]},
                                                "ownerText": {
                                                    "runs": [{
                                                        "text": "Owner",
                                                        "navigationEndpoint": {
                                                            "browseEndpoint": {"browseId": "UCo1"}
                                                        },
                                                    }]
                                                },
                                                "lengthText": {"simpleText": "1:02:03"},
                                                "viewCountText": {"simpleText": "1,234,567 views"},
                                                "publishedTimeText": {"simpleText": "3 years ago"},
                                                "thumbnail": {
                                                    "thumbnails": [
                                                        {"url": "https://i.ytimg.test/1.jpg"},
                                                        {"url": "https://i.ytimg.test/2.jpg"},
                                                    ]
                                                },
                                            }
                                        },
                                    ]
                                }
                            }
                        ]
                    }
                }
            }
        }
    }


@pytest.fixture
def youtube_results_html(initial_data) -> str:
    """Rendered results page embedding ytInitialData."""
    return (
        "<!DOCTYPE html><html><head><title>results</title></head><body>"
        f"<script nonce=\"x\">var ytInitialData = {json.dumps(initial_data)};</script>"
        "</body></html>"
    )
