"""
Response Normalizer

Converts one tier's raw payload into canonical items (search, channels) or
suggestion strings. Untyped upstream data never leaves this module.

Each schema family has its own classification rule and its own ordered alias
lists per canonical attribute; see ``FIELD_ALIASES``.
"""

from typing import Any, Callable

from .aliases import (
    Candidate,
    as_text,
    coerce_view_count,
    first_thumbnail,
    iter_dicts,
    resolve,
    thumbnail_urls,
    url_path_tail,
    url_query_param,
)
from .exceptions import EmptyResultError, MalformedPayloadError, ScrapeParseError
from .models import (
    MAX_SUGGESTIONS,
    ChannelData,
    ChannelItem,
    ItemKind,
    Operation,
    PlaylistData,
    PlaylistItem,
    SchemaFamily,
    VideoData,
    VideoItem,
)
from .scrape import scrape_search_page

AliasTable = dict[str, tuple[Candidate, ...]]

FIELD_ALIASES: dict[SchemaFamily, dict[ItemKind, AliasTable]] = {
    SchemaFamily.INVIDIOUS: {
        ItemKind.VIDEO: {
            "id": ("videoId", "id"),
            "title": ("title",),
            "channel_name": ("author", "uploader", "channelName"),
            "channel_id": ("authorId", "uploaderId", "channelId"),
            "duration_seconds": ("lengthSeconds", "duration"),
            "view_count": ("viewCount", "views"),
            "published_text": ("publishedText", "uploadedDate"),
            "thumbnails": ("videoThumbnails", "thumbnails"),
        },
        ItemKind.CHANNEL: {
            "id": ("authorId", "id", "ucid", "channelId"),
            "title": ("author", "name", "title"),
            "avatar": ("authorThumbnails", "thumbnails"),
        },
        ItemKind.PLAYLIST: {
            "id": ("playlistId", "id"),
            "title": ("title",),
        },
    },
    SchemaFamily.PIPED: {
        ItemKind.VIDEO: {
            "id": (url_query_param("url", "v"), "videoId", "id"),
            "title": ("title",),
            "channel_name": ("uploaderName", "uploader", "author", "channelName"),
            "channel_id": (
                url_path_tail("uploaderUrl", "/channel/"),
                "uploaderId",
                "authorId",
                "channelId",
            ),
            "duration_seconds": ("duration", "lengthSeconds"),
            "view_count": ("views", "viewCount"),
            "published_text": ("uploadedDate", "publishedText"),
            "thumbnails": ("thumbnail", "thumbnails", "videoThumbnails"),
        },
        ItemKind.CHANNEL: {
            "id": (url_path_tail("url", "/channel/"), "id", "channelId", "authorId"),
            "title": ("name", "title", "author"),
            "avatar": ("thumbnail", "thumbnails", "authorThumbnails"),
        },
        ItemKind.PLAYLIST: {
            "id": (url_query_param("url", "list"), "playlistId", "id"),
            "title": ("name", "title"),
        },
    },
}

TYPE_DISCRIMINATORS: dict[SchemaFamily, dict[str, ItemKind]] = {
    SchemaFamily.INVIDIOUS: {
        "video": ItemKind.VIDEO,
        "channel": ItemKind.CHANNEL,
        "playlist": ItemKind.PLAYLIST,
    },
    SchemaFamily.PIPED: {
        "stream": ItemKind.VIDEO,
        "video": ItemKind.VIDEO,
        "channel": ItemKind.CHANNEL,
        "playlist": ItemKind.PLAYLIST,
    },
}


def classify(family: SchemaFamily, raw: dict[str, Any]) -> ItemKind | None:
    """Determine an entry's kind, or None when it cannot be classified.

    Invidious entries without a ``type`` fall back to their defining id
    field; Piped entries must carry a ``type``.
    """
    item_type = raw.get("type")
    if item_type:
        return TYPE_DISCRIMINATORS[family].get(str(item_type))
    if family is not SchemaFamily.INVIDIOUS:
        return None
    if raw.get("videoId"):
        return ItemKind.VIDEO
    if raw.get("playlistId"):
        return ItemKind.PLAYLIST
    if raw.get("authorId") or raw.get("channelId"):
        return ItemKind.CHANNEL
    return None


def _passthrough_duration(value: Any) -> int | float | str | None:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    return value


def build_item(family: SchemaFamily, kind: ItemKind, raw: dict[str, Any]):
    """Map one classified entry to a canonical item; None when it has no id."""
    aliases = FIELD_ALIASES[family][kind]
    item_id = resolve(raw, aliases["id"])
    if item_id is None or item_id == "":
        return None
    title = as_text(resolve(raw, aliases["title"])) or ""

    if kind is ItemKind.VIDEO:
        return VideoItem(
            data=VideoData(
                id=str(item_id),
                title=title,
                channel_name=as_text(resolve(raw, aliases["channel_name"])),
                channel_id=as_text(resolve(raw, aliases["channel_id"])),
                duration_seconds=_passthrough_duration(
                    resolve(raw, aliases["duration_seconds"])
                ),
                view_count=coerce_view_count(resolve(raw, aliases["view_count"])),
                published_text=as_text(resolve(raw, aliases["published_text"])),
                thumbnails=thumbnail_urls(resolve(raw, aliases["thumbnails"])),
            )
        )
    if kind is ItemKind.CHANNEL:
        return ChannelItem(
            data=ChannelData(
                id=str(item_id),
                title=title,
                avatar=first_thumbnail(resolve(raw, aliases["avatar"])),
            )
        )
    return PlaylistItem(data=PlaylistData(id=str(item_id), title=title))


def _unwrap_list(payload: Any, key: str) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get(key), list):
        return payload[key]
    raise MalformedPayloadError(
        f"Expected a list or an object with '{key}'",
        context={"payload_type": type(payload).__name__},
    )


class ResponseNormalizer:
    """
    Turns raw tier payloads into canonical results.

    Examples:
        >>> normalizer = ResponseNormalizer()
        >>> items = normalizer.normalize_items(
        ...     SchemaFamily.INVIDIOUS,
        ...     [{"type": "video", "videoId": "abc", "uploader": "Alice"}],
        ... )
        >>> items[0].data.channel_name
        'Alice'
    """

    def normalize_items(
        self,
        family: SchemaFamily,
        payload: Any,
        operation: Operation = Operation.SEARCH,
    ) -> list:
        """
        Normalize a search payload.

        Args:
            family: Schema family of the tier that produced the payload
            payload: Parsed JSON (Invidious, Piped) or HTML text (YouTube)
            operation: CHANNELS keeps only channel items

        Returns:
            Canonical items in source order

        Raises:
            MalformedPayloadError: If the payload does not have the family's shape
            ScrapeParseError: If the HTML page has no parseable initial data
        """
        if family is SchemaFamily.YOUTUBE_HTML:
            if not isinstance(payload, str):
                raise MalformedPayloadError("Expected HTML text")
            result = scrape_search_page(payload)
            if not result.parsed:
                raise ScrapeParseError("No parseable ytInitialData in page")
            items = result.items
        elif family in FIELD_ALIASES:
            items = []
            for raw in iter_dicts(_unwrap_list(payload, "items")):
                kind = classify(family, raw)
                if kind is None:
                    continue
                item = build_item(family, kind, raw)
                if item is not None:
                    items.append(item)
        else:
            raise MalformedPayloadError(f"No item schema for {family.value}")

        if operation is Operation.CHANNELS:
            items = [item for item in items if item.kind is ItemKind.CHANNEL]
        return items

    def normalize_suggestions(self, family: SchemaFamily, payload: Any) -> list[str]:
        """
        Normalize a suggestion payload to at most ten strings.

        Invidious answers ``{"query": ..., "suggestions": [...]}``, Piped a
        bare list, Google ``[query, [suggestions], ...]``.

        Raises:
            MalformedPayloadError: If the payload does not have the family's shape
        """
        if family is SchemaFamily.GOOGLE_SUGGEST:
            if not (
                isinstance(payload, list)
                and len(payload) > 1
                and isinstance(payload[1], list)
            ):
                raise MalformedPayloadError("Expected [query, [suggestions]]")
            entries = payload[1]
        else:
            entries = _unwrap_list(payload, "suggestions")
        return [str(entry) for entry in entries if entry is not None][:MAX_SUGGESTIONS]

    def for_tier(
        self, family: SchemaFamily, operation: Operation
    ) -> Callable[[Any], list]:
        """
        Build the candidate transform for a tier.

        The transform normalizes a payload and rejects empty results, so a
        candidate only wins when it yields at least one entry.
        """

        def _transform(payload: Any) -> list:
            if operation is Operation.SUGGEST:
                result = self.normalize_suggestions(family, payload)
            else:
                result = self.normalize_items(family, payload, operation)
            if not result:
                raise EmptyResultError(
                    "Payload normalized to an empty result",
                    context={"schema": family.value, "operation": operation.value},
                )
            return result

        return _transform


__all__ = [
    "FIELD_ALIASES",
    "TYPE_DISCRIMINATORS",
    "classify",
    "build_item",
    "ResponseNormalizer",
]
