"""URL helper utilities."""

from urllib.parse import quote, urlencode

# Characters encodeURIComponent leaves alone beyond quote()'s defaults.
COMPONENT_SAFE = "!*'()"


def build_url(base_url: str, path: str = "", params: dict[str, object] | None = None) -> str:
    """Join a base URL, a path and percent-encoded query parameters.

    Values are encoded like a browser's ``encodeURIComponent`` (space becomes
    ``%20``), so the same logical request always yields the same URL and
    therefore the same raw-cache key.

    Examples:
        >>> build_url("https://inv.example/", "/api/v1/search", {"q": "lo fi", "page": 1})
        'https://inv.example/api/v1/search?q=lo%20fi&page=1'
    """
    url = base_url.rstrip("/") + path
    if not params:
        return url
    query = urlencode(params, quote_via=quote, safe=COMPONENT_SAFE)
    return f"{url}?{query}"


__all__ = ["build_url"]
