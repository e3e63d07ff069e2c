"""
Multi-Source Fetcher

Runs the candidates of one tier in race, sequential or parallel mode. Every
candidate goes through the raw-response cache, is decoded, and is handed to
the tier's transform; a candidate only succeeds when the transform returns a
non-empty result.
"""

import asyncio
import json
import time
from typing import Any, Callable

import httpx

from ..cache import ResponseCache
from ..events import SearchEvents
from ..exceptions import (
    CandidateError,
    MalformedPayloadError,
    UpstreamNetworkError,
    UpstreamStatusError,
    UpstreamTimeoutError,
)
from ..log_config import get_context_logger
from ..metrics import MetricLabels, MetricsCollector, NoOpMetrics, SearchMetrics
from .fetch_config import FetchMode, FetchResult, FetchStrategy, ResponseType, Tier

Transform = Callable[[Any], Any]

JSON_HEADERS = {"accept": "application/json"}
HTML_HEADERS = {"accept": "text/html"}


def decode_json(text: str) -> Any:
    """Decode a JSON body, tolerating a leading byte-order mark.

    Raises:
        MalformedPayloadError: If the body is not JSON
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    try:
        return json.loads(text.lstrip("\ufeff"))
    except json.JSONDecodeError as e:
        raise MalformedPayloadError("Body is not valid JSON", context={"error": str(e)}) from e


class MultiSourceFetcher:
    """
    Fetches one tier's candidates according to a strategy.

    Examples:
        Race across a pool:
        >>> fetcher = MultiSourceFetcher(http_client, cache)
        >>> result = await fetcher.fetch_tier(tier, transform, FetchStrategy())
        >>> result.success, result.source_url
        (True, 'https://inv.example/api/v1/search?q=lofi&page=1')
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | Callable[[], httpx.AsyncClient],
        cache: ResponseCache,
        metrics: MetricsCollector | None = None,
    ):
        """
        Args:
            http_client: Shared async HTTP client, or a callable returning
                it, resolved on every download so a closed client can be
                replaced by its owner
            cache: Cache service; its raw namespace stores decoded payloads
            metrics: Metrics collector (no-op by default)
        """
        self.http_client = http_client
        self.cache = cache
        self.metrics = metrics or NoOpMetrics()
        self.logger = get_context_logger("search_proxy.fetcher")

    @property
    def client(self) -> httpx.AsyncClient:
        if isinstance(self.http_client, httpx.AsyncClient):
            return self.http_client
        return self.http_client()

    async def fetch_tier(
        self,
        tier: Tier,
        transform: Transform,
        strategy: FetchStrategy,
    ) -> FetchResult:
        """
        Run every candidate of a tier according to the strategy.

        Args:
            tier: Tier with its candidate URLs
            transform: Normalizes a decoded payload; raises CandidateError on
                malformed or empty results
            strategy: Fetch strategy

        Returns:
            FetchResult: The winning candidate's result, or the collected errors
        """
        if tier.is_empty:
            return FetchResult(
                success=False,
                tier=tier.name,
                errors=[{"tier": tier.name, "error": "no_candidates"}],
            )

        start_time = time.perf_counter()

        if strategy.mode == FetchMode.RACE:
            result = await self._fetch_race(tier, transform, strategy)
        elif strategy.mode == FetchMode.SEQUENTIAL:
            result = await self._fetch_sequential(tier, transform, strategy)
        elif strategy.mode == FetchMode.PARALLEL:
            result = await self._fetch_parallel(tier, transform, strategy)
        else:
            result = FetchResult(
                success=False,
                errors=[{"error": f"Unknown fetch mode: {strategy.mode}"}],
            )

        result.tier = tier.name
        result.metadata["elapsed_time"] = time.perf_counter() - start_time
        result.metadata["candidate_count"] = len(tier.urls)
        result.metadata["mode"] = strategy.mode.value
        return result

    async def _fetch_race(
        self, tier: Tier, transform: Transform, strategy: FetchStrategy
    ) -> FetchResult:
        """Race mode - first successful candidate wins, the rest are cancelled."""
        tasks = [
            asyncio.create_task(self._fetch_candidate(url, tier, transform, strategy))
            for url in tier.urls
        ]
        order = {task: index for index, task in enumerate(tasks)}
        pending = set(tasks)
        errors: list[dict[str, Any]] = []

        try:
            while pending:
                done, pending = await asyncio.wait(
                    pending, return_when=asyncio.FIRST_COMPLETED
                )
                for task in sorted(done, key=order.__getitem__):
                    result = task.result()
                    if result.success:
                        return result
                    errors.extend(result.errors)
        finally:
            for task in pending:
                task.cancel()
            if pending:
                self.logger.debug(
                    SearchEvents.CANDIDATE_CANCELLED,
                    tier=tier.name,
                    cancelled=len(pending),
                )

        return FetchResult(success=False, errors=errors)

    async def _fetch_sequential(
        self, tier: Tier, transform: Transform, strategy: FetchStrategy
    ) -> FetchResult:
        """Try candidates in pool order until one succeeds."""
        errors: list[dict[str, Any]] = []
        for url in tier.urls:
            result = await self._fetch_candidate(url, tier, transform, strategy)
            if result.success:
                return result
            errors.extend(result.errors)
        return FetchResult(success=False, errors=errors)

    async def _fetch_parallel(
        self, tier: Tier, transform: Transform, strategy: FetchStrategy
    ) -> FetchResult:
        """Run all candidates, then take the first success in pool order."""
        results = await asyncio.gather(
            *(self._fetch_candidate(url, tier, transform, strategy) for url in tier.urls)
        )
        errors: list[dict[str, Any]] = []
        for result in results:
            if result.success:
                return result
            errors.extend(result.errors)
        return FetchResult(success=False, errors=errors)

    async def _fetch_candidate(
        self,
        url: str,
        tier: Tier,
        transform: Transform,
        strategy: FetchStrategy,
    ) -> FetchResult:
        """
        Fetch, decode and transform a single candidate, with retry logic.

        Never raises except on cancellation; failures become error records.
        """
        timeout = tier.timeout or strategy.per_source_timeout
        last_error: CandidateError | None = None

        for attempt in range(strategy.max_retries + 1):
            start_time = time.perf_counter()
            try:
                payload = self.cache.get_raw(url) if tier.cache_raw else None
                if payload is not None:
                    self.metrics.increment(
                        SearchMetrics.RAW_CACHE_HITS, labels={MetricLabels.TIER: tier.name}
                    )
                    self.logger.debug(SearchEvents.RAW_CACHE_HIT, tier=tier.name, url=url)
                else:
                    payload = await self._download(url, tier.response_type, timeout)
                    if tier.cache_raw:
                        self.cache.set_raw(url, payload)

                data = transform(payload)
                self.metrics.timing(
                    SearchMetrics.CANDIDATE_DURATION_MS,
                    (time.perf_counter() - start_time) * 1000,
                    labels={MetricLabels.TIER: tier.name},
                )
                return FetchResult(
                    success=True,
                    source_url=url,
                    data=data,
                    metadata={"attempt": attempt + 1},
                )

            except CandidateError as e:
                last_error = e

            except Exception as e:
                # Transforms run on arbitrary upstream data.
                last_error = MalformedPayloadError(
                    str(e), url=url, context={"error_type": type(e).__name__}
                )

            self.logger.warning(
                SearchEvents.CANDIDATE_FAILED,
                tier=tier.name,
                url=url,
                error=last_error.kind,
                detail=last_error.message,
                attempt=attempt + 1,
            )
            self.metrics.increment(
                SearchMetrics.CANDIDATE_FAILURE,
                labels={MetricLabels.TIER: tier.name, MetricLabels.ERROR_TYPE: last_error.kind},
            )

            # Wait before retry (except on last attempt)
            if attempt < strategy.max_retries:
                await asyncio.sleep(strategy.retry_delay)

        return FetchResult(
            success=False,
            source_url=url,
            errors=[{
                "tier": tier.name,
                "source": url,
                "error": last_error.kind if last_error else "unknown",
                "detail": last_error.message if last_error else None,
            }],
        )

    async def _download(self, url: str, response_type: ResponseType, timeout: float) -> Any:
        """
        GET one URL and decode it.

        Returns:
            Decoded JSON for JSON tiers, text for HTML tiers

        Raises:
            UpstreamTimeoutError: If the request exceeds timeout
            UpstreamStatusError: On a non-2xx status
            UpstreamNetworkError: On connection-level failures
            MalformedPayloadError: If a JSON body does not decode
        """
        headers = HTML_HEADERS if response_type is ResponseType.HTML else JSON_HEADERS
        try:
            response = await asyncio.wait_for(
                self.client.get(url, headers=headers, timeout=timeout),
                timeout=timeout,
            )
            response.raise_for_status()
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise UpstreamTimeoutError(
                f"Timeout after {timeout}s", url=url, timeout=timeout
            ) from e
        except httpx.HTTPStatusError as e:
            raise UpstreamStatusError(
                f"HTTP {e.response.status_code}",
                url=url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamNetworkError(str(e) or type(e).__name__, url=url) from e

        if response_type is ResponseType.HTML:
            return response.text
        return decode_json(response.text)


__all__ = ["MultiSourceFetcher", "decode_json"]
