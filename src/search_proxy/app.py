"""FastAPI application factory and entry point."""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .cache import ResponseCache
from .http_client_manager import HttpClientManager
from .log_config import RequestContext, configure_logging, get_context_logger
from .metrics import MetricsCollector, NoOpMetrics, PrometheusMetrics
from .multi_source import (
    CandidateBuilder,
    FetchMode,
    FetchStrategy,
    MultiSourceFetcher,
    SearchOrchestrator,
    UpstreamPools,
)
from .ratelimit import SlidingWindowRateLimiter
from .routes import router
from .settings import Settings, get_settings

logger = get_context_logger("search_proxy.app")


def get_client_ip(request: Request) -> str:
    forwarded = (request.headers.get("x-forwarded-for") or "").strip()
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def build_orchestrator(
    settings: Settings,
    http_manager: HttpClientManager,
    cache: ResponseCache,
    metrics: MetricsCollector,
) -> SearchOrchestrator:
    """Wire pools, fetcher and cache into an orchestrator."""
    fetcher = MultiSourceFetcher(http_manager.get_client, cache, metrics)
    strategy = FetchStrategy(
        mode=FetchMode(settings.fetch_mode),
        per_source_timeout=settings.upstream_timeout,
    )
    return SearchOrchestrator(
        builder=CandidateBuilder(UpstreamPools.from_settings(settings)),
        fetcher=fetcher,
        cache=cache,
        strategy=strategy,
        metrics=metrics,
    )


def create_app(
    settings: Settings | None = None,
    orchestrator: SearchOrchestrator | None = None,
    rate_limiter: SlidingWindowRateLimiter | None = None,
) -> FastAPI:
    """
    Create the application.

    Args:
        settings: Settings (loaded from environment if None)
        orchestrator: Pre-built orchestrator; built from settings if None
        rate_limiter: Rate limiter; built from settings if None

    Returns:
        FastAPI application
    """
    settings = settings or get_settings()
    http_manager = HttpClientManager(settings)

    metrics: MetricsCollector
    if settings.metrics_enabled:
        metrics = PrometheusMetrics()
    else:
        metrics = NoOpMetrics()

    if orchestrator is None:
        cache = ResponseCache.create(maxsize=settings.cache_max, ttl=settings.cache_ttl_s)
        orchestrator = build_orchestrator(settings, http_manager, cache, metrics)

    if rate_limiter is None:
        rate_limiter = SlidingWindowRateLimiter(
            max_requests=settings.rate_limit_max,
            window_seconds=settings.rate_limit_window_s,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "search proxy starting",
            port=settings.port,
            fetch_mode=settings.fetch_mode,
            invidious_pool=len(settings.invidious_pool_urls),
            piped_pool=len(settings.piped_pool_urls),
        )
        yield
        await http_manager.close()

    app = FastAPI(title="search-proxy", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.orchestrator = orchestrator
    app.state.metrics = metrics

    @app.middleware("http")
    async def limit_and_bind_context(request: Request, call_next):
        client_ip = get_client_ip(request)
        if not rate_limiter.allow(client_ip):
            return JSONResponse(
                status_code=429,
                content={"error": "rate_limited"},
                headers={"Retry-After": str(rate_limiter.retry_after(client_ip))},
            )
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        with RequestContext(request_id=request_id, endpoint=request.url.path):
            response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response

    # Added last so it wraps the limiter and 429s carry CORS headers too.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(router)

    if isinstance(metrics, PrometheusMetrics):
        @app.get("/metrics")
        async def prometheus_metrics():
            return Response(content=metrics.render(), media_type=metrics.content_type)

    return app


def main() -> None:
    """Run the proxy with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


__all__ = ["create_app", "build_orchestrator", "main"]
