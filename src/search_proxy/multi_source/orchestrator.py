"""
Fallback Orchestrator

Main coordinator for search requests. Implements the pipeline:
RENDERED CACHE → TIERS (FETCH → NORMALIZE) → RENDER → STORE

Every path ends in a successful response: exhaustion of all tiers degrades to
an empty result carrying a soft-failure marker.
"""

import time
from dataclasses import dataclass, field
from typing import Any

from ..cache import RenderedResponse, ResponseCache
from ..events import SearchEvents
from ..log_config import get_context_logger
from ..metrics import MetricLabels, MetricsCollector, NoOpMetrics, SearchMetrics
from ..models import (
    Operation,
    SearchResponse,
    SoftFailure,
    SuggestResponse,
    serialize,
)
from ..normalizer import ResponseNormalizer
from .fetch_config import FetchResult, FetchStrategy, Tier
from .fetcher import MultiSourceFetcher
from .upstream import CandidateBuilder


@dataclass
class TierOutcome:
    """
    Result of walking a tier chain.

    Attributes:
        data: Normalized result of the first successful tier (None on exhaustion)
        tier: Name of the successful tier
        attempts: Tier results in the order they ran
    """

    data: Any = None
    tier: str | None = None
    attempts: list[FetchResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.data is not None

    @property
    def soft_failure(self) -> SoftFailure | None:
        """Marker for a degraded response, None on success.

        A page-parse failure is reported only when the last tier that ran
        failed for that reason.
        """
        if self.success:
            return None
        ran = [attempt for attempt in self.attempts if attempt.metadata.get("ran")]
        if ran and ran[-1].error_kinds == {"parse_failed"}:
            return SoftFailure.HTML_PARSE_FAILED
        return SoftFailure.UPSTREAM_UNAVAILABLE


class SearchOrchestrator:
    """
    Fallback engine for search, channel search and suggestions.

    Examples:
        >>> orchestrator = SearchOrchestrator(builder, fetcher, cache)
        >>> response = await orchestrator.search("lofi", page=1)
        >>> response.next_page
        2

        Through the rendered cache, keyed by the inbound request:
        >>> rendered = await orchestrator.respond(
        ...     "/search?q=lofi", Operation.SEARCH, "lofi", page=1
        ... )
        >>> rendered.status_code
        200
    """

    def __init__(
        self,
        builder: CandidateBuilder,
        fetcher: MultiSourceFetcher,
        cache: ResponseCache,
        normalizer: ResponseNormalizer | None = None,
        strategy: FetchStrategy | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Args:
            builder: Candidate-URL builder over the configured pools
            fetcher: Tier fetcher
            cache: Cache service (rendered namespace is used here)
            normalizer: Response normalizer (creates default if None)
            strategy: Fetch strategy applied to every tier
            metrics: Metrics collector (no-op by default)
        """
        self.logger = get_context_logger("search_proxy.orchestrator")
        self.builder = builder
        self.fetcher = fetcher
        self.cache = cache
        self.normalizer = normalizer or ResponseNormalizer()
        self.strategy = strategy or FetchStrategy()
        self.metrics = metrics or NoOpMetrics()

    async def respond(
        self,
        request_key: str,
        operation: Operation,
        query: str | None,
        page: int = 1,
    ) -> RenderedResponse:
        """
        Serve a request through the rendered cache.

        A hit is returned as stored without touching any upstream. Every
        rendered response is stored, degraded ones included, so an outage
        is not re-probed on each request until the entry expires.

        Args:
            request_key: Inbound path and query string, exactly as received
            operation: Logical operation
            query: Raw ``q`` parameter
            page: Results page (ignored for suggest)

        Returns:
            RenderedResponse: Status code and serialized body
        """
        labels = {MetricLabels.OPERATION: operation.value}
        self.metrics.increment(SearchMetrics.REQUESTS_TOTAL, labels=labels)

        hit = self.cache.get_rendered(request_key)
        if hit is not None:
            self.metrics.increment(SearchMetrics.RENDERED_CACHE_HITS, labels=labels)
            self.logger.debug(SearchEvents.RENDERED_CACHE_HIT, request_key=request_key)
            return hit

        start_time = time.perf_counter()
        if operation is Operation.SUGGEST:
            response = await self.suggest(query)
        elif operation is Operation.CHANNELS:
            response = await self.channels(query, page)
        else:
            response = await self.search(query, page)

        rendered = RenderedResponse(status_code=200, body=serialize(response.to_payload()))
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self.cache.set_rendered(request_key, rendered)
        if response.error is None:
            self.logger.info(
                SearchEvents.REQUEST_SUCCESS,
                operation=operation.value,
                elapsed_ms=round(elapsed_ms, 1),
            )
        else:
            self.metrics.increment(SearchMetrics.REQUESTS_DEGRADED, labels=labels)

        self.metrics.timing(SearchMetrics.REQUEST_LATENCY_MS, elapsed_ms, labels=labels)
        return rendered

    async def search(self, query: str | None, page: int = 1) -> SearchResponse:
        """Video, channel and playlist search."""
        return await self._search(Operation.SEARCH, query, page)

    async def channels(self, query: str | None, page: int = 1) -> SearchResponse:
        """Channel-only search."""
        return await self._search(Operation.CHANNELS, query, page)

    async def suggest(self, query: str | None) -> SuggestResponse:
        """Query suggestions; never fails, degrades to an empty list."""
        q = (query or "").strip()
        if not q:
            self.logger.debug(SearchEvents.REQUEST_SHORT_CIRCUIT, operation="suggest")
            return SuggestResponse()

        outcome = await self.run_tiers(Operation.SUGGEST, self.builder.build(Operation.SUGGEST, q))
        if outcome.success:
            return SuggestResponse(suggestions=outcome.data)
        return SuggestResponse(error=outcome.soft_failure)

    async def _search(self, operation: Operation, query: str | None, page: int) -> SearchResponse:
        q = (query or "").strip()
        if not q:
            self.logger.debug(SearchEvents.REQUEST_SHORT_CIRCUIT, operation=operation.value)
            return SearchResponse(items=[], next_page=None)

        page = max(page, 1)
        outcome = await self.run_tiers(operation, self.builder.build(operation, q, page))
        if outcome.success:
            return SearchResponse(items=outcome.data, next_page=page + 1)
        return SearchResponse(items=[], next_page=page + 1, error=outcome.soft_failure)

    async def run_tiers(self, operation: Operation, tiers: list[Tier]) -> TierOutcome:
        """
        Walk tiers in priority order until one yields a non-empty result.

        Args:
            operation: Logical operation (selects the normalization rule)
            tiers: Tiers in priority order

        Returns:
            TierOutcome: Normalized data of the first successful tier, or the
            attempts that failed
        """
        outcome = TierOutcome()
        self.logger.info(
            SearchEvents.REQUEST_STARTED,
            operation=operation.value,
            tier_count=len(tiers),
            mode=self.strategy.mode.value,
        )

        for tier in tiers:
            labels = {MetricLabels.TIER: tier.name, MetricLabels.OPERATION: operation.value}
            if tier.is_empty:
                self.logger.debug(SearchEvents.TIER_SKIPPED, tier=tier.name)
                outcome.attempts.append(
                    FetchResult(success=False, tier=tier.name, metadata={"ran": False})
                )
                continue

            self.metrics.increment(SearchMetrics.TIER_ATTEMPTED, labels=labels)
            self.logger.debug(
                SearchEvents.TIER_STARTED, tier=tier.name, candidate_count=len(tier.urls)
            )
            transform = self.normalizer.for_tier(tier.schema, operation)
            result = await self.fetcher.fetch_tier(tier, transform, self.strategy)
            result.metadata["ran"] = True
            outcome.attempts.append(result)

            if result.success:
                self.metrics.increment(SearchMetrics.TIER_SUCCESS, labels=labels)
                self.logger.info(
                    SearchEvents.TIER_SUCCESS,
                    tier=tier.name,
                    source_url=result.source_url,
                    result_count=len(result.data),
                    elapsed_time=result.metadata.get("elapsed_time"),
                )
                outcome.data = result.data
                outcome.tier = tier.name
                return outcome

            self.metrics.increment(SearchMetrics.TIER_FAILURE, labels=labels)
            self.logger.info(
                SearchEvents.TIER_FAILED,
                tier=tier.name,
                error_count=len(result.errors),
                error_kinds=sorted(result.error_kinds),
            )

        self.logger.warning(
            SearchEvents.REQUEST_DEGRADED,
            operation=operation.value,
            marker=outcome.soft_failure.value,
        )
        return outcome


__all__ = ["SearchOrchestrator", "TierOutcome"]
