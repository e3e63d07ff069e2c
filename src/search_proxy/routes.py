"""HTTP routes.

Thin wrappers: each endpoint hands the raw query parameters and the inbound
request signature to the orchestrator and replays the rendered bytes.
"""

from fastapi import APIRouter, Request, Response

from .models import Operation
from .multi_source import SearchOrchestrator

router = APIRouter()


def request_key(request: Request) -> str:
    """Inbound path plus query string, exactly as received."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def parse_page(raw: str | None) -> int:
    """Parse the ``page`` parameter; missing, invalid or < 1 becomes 1."""
    try:
        page = int(raw) if raw is not None else 1
    except ValueError:
        return 1
    return page if page >= 1 else 1


def get_orchestrator(request: Request) -> SearchOrchestrator:
    return request.app.state.orchestrator


async def _serve(request: Request, operation: Operation, q: str | None, page: int) -> Response:
    rendered = await get_orchestrator(request).respond(request_key(request), operation, q, page)
    return Response(
        content=rendered.body,
        status_code=rendered.status_code,
        media_type=rendered.media_type,
    )


@router.get("/healthz")
async def healthz():
    return {"ok": True}


@router.get("/suggest")
async def suggest(request: Request, q: str | None = None):
    """Suggestions: Invidious, then Piped, then Google suggest; never 5xx."""
    return await _serve(request, Operation.SUGGEST, q, 1)


@router.get("/channels")
async def channels(request: Request, q: str | None = None, page: str | None = None):
    """Channel search: Invidious, then Piped, then the HTML results page."""
    return await _serve(request, Operation.CHANNELS, q, parse_page(page))


@router.get("/search")
async def search(request: Request, q: str | None = None, page: str | None = None):
    """Videos, channels and playlists: Invidious, then Piped, then the HTML results page."""
    return await _serve(request, Operation.SEARCH, q, parse_page(page))


@router.get("/debug/upstreams")
async def debug_upstreams(request: Request):
    """Effective pools and limits, to see which mirrors are in use."""
    return request.app.state.settings.describe_upstreams()


__all__ = ["router", "request_key", "parse_page"]
