"""HTTP client manager for connection pooling and lifecycle management."""

from typing import Optional

import httpx

from .settings import Settings

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124 Safari/537.36"
)


class HttpClientManager:
    """Owns the shared upstream HTTP client for the lifetime of the app."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: Optional[httpx.AsyncClient] = None

    def get_client(self) -> httpx.AsyncClient:
        """Get or create the upstream HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"user-agent": BROWSER_USER_AGENT},
                follow_redirects=True,
                timeout=self.settings.upstream_timeout,
                limits=httpx.Limits(
                    max_keepalive_connections=self.settings.max_keepalive_connections,
                    max_connections=self.settings.max_connections,
                ),
            )
        return self._client

    async def close(self) -> None:
        """Close the client if it was created."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = ["HttpClientManager", "BROWSER_USER_AGENT"]
