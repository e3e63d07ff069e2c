"""
Alias resolution primitives shared by the JSON normalizer and the HTML scraper.

Every canonical attribute is resolved from an ordered tuple of candidates. A
candidate is either a plain key or a callable that derives the value from the
whole raw object. The first candidate that yields a non-None value wins.
"""

import re
from typing import Any, Callable, Iterable, Sequence, Union
from urllib.parse import parse_qs, urlparse

Candidate = Union[str, Callable[[dict[str, Any]], Any]]

_DIGITS_RE = re.compile(r"\d+")


def resolve(raw: dict[str, Any], candidates: Sequence[Candidate]) -> Any:
    """Return the first present, non-None value among candidates.

    Examples:
        >>> resolve({"uploader": "Alice"}, ("author", "uploader"))
        'Alice'
        >>> resolve({}, ("author", "uploader")) is None
        True
    """
    for candidate in candidates:
        if callable(candidate):
            value = candidate(raw)
        else:
            value = raw.get(candidate)
        if value is not None:
            return value
    return None


def dig(*path: Union[str, int]) -> Callable[[dict[str, Any]], Any]:
    """Build a candidate following a nested key/index path.

    Examples:
        >>> dig("title", "runs", 0, "text")({"title": {"runs": [{"text": "Hi"}]}})
        'Hi'
    """

    def _lookup(raw: dict[str, Any]) -> Any:
        node: Any = raw
        for step in path:
            if isinstance(step, int):
                if not isinstance(node, list) or not -len(node) <= step < len(node):
                    return None
                node = node[step]
            else:
                if not isinstance(node, dict):
                    return None
                node = node.get(step)
            if node is None:
                return None
        return node

    return _lookup


def url_query_param(key: str, param: str) -> Callable[[dict[str, Any]], Any]:
    """Candidate reading one query parameter out of a relative URL field.

    ``url_query_param("url", "v")`` turns ``{"url": "/watch?v=abc"}`` into ``"abc"``.
    """

    def _lookup(raw: dict[str, Any]) -> Any:
        value = raw.get(key)
        if not isinstance(value, str) or not value:
            return None
        values = parse_qs(urlparse(value).query).get(param)
        return values[0] if values else None

    return _lookup


def url_path_tail(key: str, prefix: str) -> Callable[[dict[str, Any]], Any]:
    """Candidate reading the segment after ``prefix`` in a relative URL field.

    ``url_path_tail("url", "/channel/")`` turns ``{"url": "/channel/UC1"}`` into ``"UC1"``.
    """

    def _lookup(raw: dict[str, Any]) -> Any:
        value = raw.get(key)
        if not isinstance(value, str) or prefix not in value:
            return None
        tail = urlparse(value).path.split(prefix, 1)[-1].strip("/")
        return tail.split("/", 1)[0] or None

    return _lookup


def coerce_view_count(value: Any) -> int:
    """Coerce an upstream view count to a non-negative int, defaulting to 0.

    Examples:
        >>> coerce_view_count("1234")
        1234
        >>> coerce_view_count(None)
        0
        >>> coerce_view_count("lots")
        0
    """
    if value is None or isinstance(value, bool):
        return 0
    try:
        # Exact for ints and digit strings beyond float precision.
        count = int(value)
    except (TypeError, ValueError, OverflowError):
        try:
            count = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0
    return max(count, 0)


def digits_to_int(text: Any) -> int:
    """Parse display counts such as ``"1,234,567 views"``; 0 when none."""
    if not isinstance(text, str):
        return 0
    digits = "".join(_DIGITS_RE.findall(text))
    return int(digits) if digits else 0


def clock_text_to_seconds(text: Any) -> int | None:
    """Parse ``"4:13"`` or ``"1:02:03"`` into seconds."""
    if not isinstance(text, str):
        return None
    parts = text.strip().split(":")
    if not parts or not all(p.isdigit() for p in parts) or len(parts) > 3:
        return None
    seconds = 0
    for part in parts:
        seconds = seconds * 60 + int(part)
    return seconds


def thumbnail_urls(value: Any, limit: int = 3) -> list[str]:
    """Normalize a thumbnail field to at most ``limit`` URLs in source order.

    Accepts a single URL string, a list of URL strings, or a list of objects
    carrying a ``url`` key.
    """
    if isinstance(value, str):
        return [value] if value else []
    if not isinstance(value, list):
        return []
    urls: list[str] = []
    for entry in value:
        if isinstance(entry, dict):
            url = entry.get("url")
        else:
            url = entry
        if isinstance(url, str) and url:
            urls.append(url)
        if len(urls) >= limit:
            break
    return urls


def first_thumbnail(value: Any) -> str | None:
    urls = thumbnail_urls(value, limit=1)
    return urls[0] if urls else None


def as_text(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def iter_dicts(entries: Iterable[Any]) -> Iterable[dict[str, Any]]:
    return (entry for entry in entries if isinstance(entry, dict))


__all__ = [
    "Candidate",
    "resolve",
    "dig",
    "url_query_param",
    "url_path_tail",
    "coerce_view_count",
    "digits_to_int",
    "clock_text_to_seconds",
    "thumbnail_urls",
    "first_thumbnail",
    "as_text",
    "iter_dicts",
]
