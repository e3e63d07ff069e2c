"""Canonical item and endpoint response models."""

import json
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_THUMBNAILS = 3
MAX_SUGGESTIONS = 10


class ItemKind(str, Enum):
    VIDEO = "video"
    CHANNEL = "channel"
    PLAYLIST = "playlist"


class Operation(str, Enum):
    """Logical operations served by the proxy."""

    SEARCH = "search"
    CHANNELS = "channels"
    SUGGEST = "suggest"


class SchemaFamily(str, Enum):
    """Upstream payload schemas, one per tier."""

    INVIDIOUS = "invidious"
    PIPED = "piped"
    YOUTUBE_HTML = "youtube_html"
    GOOGLE_SUGGEST = "google_suggest"


class SoftFailure(str, Enum):
    """Markers attached to degraded responses."""

    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    HTML_PARSE_FAILED = "yt_html_parse_failed"


class CanonicalModel(BaseModel):
    """Base for wire models: camelCase on the wire, immutable in memory."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class VideoData(CanonicalModel):
    id: str
    title: str = ""
    channel_name: str | None = None
    channel_id: str | None = None
    # Passed through as the upstream reported it.
    duration_seconds: int | float | str | None = None
    view_count: int = Field(default=0, ge=0)
    published_text: str | None = None
    thumbnails: list[str] = Field(default_factory=list)

    @field_validator("thumbnails")
    @classmethod
    def _cap_thumbnails(cls, value: list[str]) -> list[str]:
        return value[:MAX_THUMBNAILS]


class ChannelData(CanonicalModel):
    id: str
    title: str = ""
    avatar: str | None = None


class PlaylistData(CanonicalModel):
    id: str
    title: str = ""


class VideoItem(CanonicalModel):
    kind: Literal[ItemKind.VIDEO] = ItemKind.VIDEO
    data: VideoData


class ChannelItem(CanonicalModel):
    kind: Literal[ItemKind.CHANNEL] = ItemKind.CHANNEL
    data: ChannelData


class PlaylistItem(CanonicalModel):
    kind: Literal[ItemKind.PLAYLIST] = ItemKind.PLAYLIST
    data: PlaylistData


CanonicalItem = Annotated[
    Union[VideoItem, ChannelItem, PlaylistItem],
    Field(discriminator="kind"),
]


class SearchResponse(CanonicalModel):
    """Body of ``/search`` and ``/channels``."""

    items: list[CanonicalItem] = Field(default_factory=list)
    next_page: int | None = None
    error: SoftFailure | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json", by_alias=True)
        if self.error is None:
            payload.pop("error")
        return payload


class SuggestResponse(CanonicalModel):
    """Body of ``/suggest``."""

    suggestions: list[str] = Field(default_factory=list)
    error: SoftFailure | None = None

    @field_validator("suggestions")
    @classmethod
    def _cap_suggestions(cls, value: list[str]) -> list[str]:
        return value[:MAX_SUGGESTIONS]

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json", by_alias=True)
        if self.error is None:
            payload.pop("error")
        return payload


def serialize(payload: dict[str, Any]) -> bytes:
    """Compact JSON encoding used for every rendered body."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


__all__ = [
    "ItemKind",
    "Operation",
    "SchemaFamily",
    "SoftFailure",
    "VideoData",
    "ChannelData",
    "PlaylistData",
    "VideoItem",
    "ChannelItem",
    "PlaylistItem",
    "CanonicalItem",
    "SearchResponse",
    "SuggestResponse",
    "serialize",
    "MAX_THUMBNAILS",
    "MAX_SUGGESTIONS",
]
