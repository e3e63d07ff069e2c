"""
HTML-scrape fallback parser.

Last-resort tier: pulls the ``ytInitialData`` JSON blob out of a rendered
results page and maps its ``videoRenderer`` / ``channelRenderer`` nodes to
canonical items.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from .aliases import (
    as_text,
    clock_text_to_seconds,
    dig,
    digits_to_int,
    first_thumbnail,
    resolve,
    thumbnail_urls,
)
from .log_config import get_context_logger
from .events import SearchEvents
from .models import (
    ChannelData,
    ChannelItem,
    SoftFailure,
    VideoData,
    VideoItem,
)

logger = get_context_logger("search_proxy.scrape")

# Page layouts differ across versions; tried in order.
INITIAL_DATA_PATTERNS = (
    re.compile(r"var ytInitialData = (.*?);</script>", re.DOTALL),
    re.compile(r'"ytInitialData":(\{.*?\})\s*,\s*"ytcfg"', re.DOTALL),
    re.compile(r'window\["ytInitialData"\]\s*=\s*(.*?);</script>', re.DOTALL),
)

VIDEO_RENDERER = "videoRenderer"
CHANNEL_RENDERER = "channelRenderer"


def _run_text(*path: str):
    """Candidate joining every ``runs[*].text`` under path, or its ``simpleText``."""
    node_at = dig(*path)

    def _lookup(raw: dict[str, Any]) -> Any:
        node = node_at(raw)
        if not isinstance(node, dict):
            return None
        simple = node.get("simpleText")
        if isinstance(simple, str) and simple.strip():
            return simple.strip()
        runs = node.get("runs")
        if isinstance(runs, list):
            joined = "".join(
                run["text"] for run in runs
                if isinstance(run, dict) and isinstance(run.get("text"), str)
            ).strip()
            return joined or None
        return None

    return _lookup


VIDEO_FIELDS = {
    "id": ("videoId",),
    "title": (_run_text("title"), dig("title", "accessibility", "accessibilityData", "label")),
    "channel_name": (_run_text("ownerText"), _run_text("longBylineText"), _run_text("shortBylineText")),
    "channel_id": (
        dig("ownerText", "runs", 0, "navigationEndpoint", "browseEndpoint", "browseId"),
        dig("longBylineText", "runs", 0, "navigationEndpoint", "browseEndpoint", "browseId"),
        dig("channelThumbnailSupportedRenderers", "channelThumbnailWithLinkRenderer",
            "navigationEndpoint", "browseEndpoint", "browseId"),
    ),
    "duration": (_run_text("lengthText"),),
    "views": (_run_text("viewCountText"), _run_text("shortViewCountText")),
    "published": (_run_text("publishedTimeText"),),
    "thumbnails": (dig("thumbnail", "thumbnails"),),
}

CHANNEL_FIELDS = {
    "id": ("channelId", dig("navigationEndpoint", "browseEndpoint", "browseId")),
    "title": (_run_text("title"),),
    "avatar": (dig("thumbnail", "thumbnails"),),
}


@dataclass
class ScrapeResult:
    """Outcome of parsing one results page.

    ``error`` is set when the embedded blob could not be located or parsed;
    ``items`` is then empty.
    """

    items: list = field(default_factory=list)
    error: SoftFailure | None = None

    @property
    def parsed(self) -> bool:
        return self.error is None


def extract_initial_data(html: str) -> dict[str, Any] | None:
    """Return the first pattern match that decodes to a JSON object."""
    for pattern in INITIAL_DATA_PATTERNS:
        match = pattern.search(html or "")
        if not match:
            continue
        try:
            data = json.loads(match.group(1))
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def collect_renderers(root: Any, keys: Iterable[str]) -> dict[str, list[dict[str, Any]]]:
    """Collect every node stored under one of ``keys``, at any depth.

    Uses an explicit stack instead of recursion; objects and arrays may nest
    arbitrarily. Nodes are returned in document order, and renderers nested
    inside other renderers are collected too.
    """
    wanted = tuple(keys)
    found: dict[str, list[dict[str, Any]]] = {key: [] for key in wanted}
    stack: list[Any] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            for key in wanted:
                renderer = node.get(key)
                if isinstance(renderer, dict):
                    found[key].append(renderer)
            children = list(node.values())
        elif isinstance(node, list):
            children = node
        else:
            continue
        stack.extend(reversed(children))
    return found


def video_from_renderer(renderer: dict[str, Any]) -> VideoItem | None:
    video_id = resolve(renderer, VIDEO_FIELDS["id"])
    if not video_id:
        return None
    return VideoItem(
        data=VideoData(
            id=str(video_id),
            title=as_text(resolve(renderer, VIDEO_FIELDS["title"])) or "",
            channel_name=as_text(resolve(renderer, VIDEO_FIELDS["channel_name"])),
            channel_id=as_text(resolve(renderer, VIDEO_FIELDS["channel_id"])),
            duration_seconds=clock_text_to_seconds(resolve(renderer, VIDEO_FIELDS["duration"])),
            view_count=digits_to_int(resolve(renderer, VIDEO_FIELDS["views"])),
            published_text=as_text(resolve(renderer, VIDEO_FIELDS["published"])),
            thumbnails=thumbnail_urls(resolve(renderer, VIDEO_FIELDS["thumbnails"])),
        )
    )


def channel_from_renderer(renderer: dict[str, Any]) -> ChannelItem | None:
    channel_id = resolve(renderer, CHANNEL_FIELDS["id"])
    if not channel_id:
        return None
    return ChannelItem(
        data=ChannelData(
            id=str(channel_id),
            title=as_text(resolve(renderer, CHANNEL_FIELDS["title"])) or "",
            avatar=first_thumbnail(resolve(renderer, CHANNEL_FIELDS["avatar"])),
        )
    )


def scrape_search_page(html: str) -> ScrapeResult:
    """Parse a results page into canonical items (videos first, then channels)."""
    data = extract_initial_data(html)
    if data is None:
        logger.warning(SearchEvents.SCRAPE_PARSE_FAILED, html_length=len(html or ""))
        return ScrapeResult(error=SoftFailure.HTML_PARSE_FAILED)

    renderers = collect_renderers(data, (VIDEO_RENDERER, CHANNEL_RENDERER))
    items: list = []
    for renderer in renderers[VIDEO_RENDERER]:
        item = video_from_renderer(renderer)
        if item is not None:
            items.append(item)
    for renderer in renderers[CHANNEL_RENDERER]:
        item = channel_from_renderer(renderer)
        if item is not None:
            items.append(item)
    return ScrapeResult(items=items)


__all__ = [
    "INITIAL_DATA_PATTERNS",
    "ScrapeResult",
    "extract_initial_data",
    "collect_renderers",
    "video_from_renderer",
    "channel_from_renderer",
    "scrape_search_page",
]
