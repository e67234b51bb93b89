"""Upstream draw feed client.

Fetches the WinGo history page with a hard timeout and keeps the parsed
draws in a short-lived in-process cache so bursts of polling clients
share one upstream request. There is no retry: a failed or timed-out fetch
fails the prediction cycle.

Usage:
    from drawcast.feed.client import DrawFeedClient

    client = DrawFeedClient.from_settings(get_settings())
    draws = await client.fetch_draws()
"""

from __future__ import annotations

import time
from collections.abc import Callable

import httpx

from drawcast.common.config import Settings
from drawcast.common.logging import get_logger
from drawcast.common.metrics import FEED_FETCH_DURATION_SECONDS, FEED_FETCH_TOTAL
from drawcast.common.schemas import DrawResult
from drawcast.feed.exceptions import FetchError, ParseError
from drawcast.feed.parser import parse_draws

logger = get_logger("FEED")


class DrawFeedClient:
    """Async client for the upstream draw history endpoint.

    Args:
        url: Full URL of the history JSON endpoint.
        timeout: Request timeout in seconds.
        cache_ttl: Seconds a fetched payload may be served from cache.
        user_agent: User-Agent header sent upstream.
        monotonic: Clock used for cache expiry (injectable for tests).
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        cache_ttl: float = 5.0,
        user_agent: str = "drawcast",
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.user_agent = user_agent
        self._monotonic = monotonic
        self._cached: list[DrawResult] | None = None
        self._cached_at = 0.0

    @classmethod
    def from_settings(cls, settings: Settings) -> DrawFeedClient:
        return cls(
            url=settings.feed_url,
            timeout=settings.feed_timeout_seconds,
            cache_ttl=settings.feed_cache_ttl_seconds,
            user_agent=settings.feed_user_agent,
        )

    def clear_cache(self) -> None:
        self._cached = None
        self._cached_at = 0.0

    async def fetch_raw(self) -> dict:
        """Fetch and decode the history payload from upstream (never cached).

        Creates a NEW httpx.AsyncClient per call so no connection state
        outlives the request that needed it.

        Raises:
            FetchError: On timeout, network failure, or a non-2xx status.
            ParseError: If the body is not valid JSON.
        """
        headers = {
            "Accept": "application/json",
            "User-Agent": self.user_agent,
            "Cache-Control": "no-cache",
        }
        start = time.perf_counter()

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.url, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            FEED_FETCH_TOTAL.labels(source="error").inc()
            status_code = exc.response.status_code
            logger.error(
                "Draw feed HTTP error",
                extra={"data": {"status_code": status_code, "url": self.url}},
            )
            raise FetchError(f"HTTP {status_code}", context={"url": self.url}) from exc
        except httpx.TimeoutException as exc:
            FEED_FETCH_TOTAL.labels(source="error").inc()
            logger.error(
                "Draw feed timed out",
                extra={"data": {"timeout_s": self.timeout, "url": self.url}},
            )
            raise FetchError(
                f"Draw feed timed out after {self.timeout}s", context={"url": self.url}
            ) from exc
        except httpx.RequestError as exc:
            FEED_FETCH_TOTAL.labels(source="error").inc()
            logger.error(
                "Draw feed network error",
                extra={"data": {"error": str(exc), "url": self.url}},
            )
            raise FetchError(f"Network error: {exc}", context={"url": self.url}) from exc
        finally:
            FEED_FETCH_DURATION_SECONDS.observe(time.perf_counter() - start)

        try:
            payload = response.json()
        except ValueError as exc:
            FEED_FETCH_TOTAL.labels(source="error").inc()
            raise ParseError("Draw feed returned a non-JSON body") from exc

        FEED_FETCH_TOTAL.labels(source="network").inc()
        return payload

    async def fetch_draws(self) -> list[DrawResult]:
        """Latest draws, newest first, from cache when still fresh.

        Only a payload that parsed cleanly is cached, so a malformed body
        is refetched on the next call.

        Raises:
            FetchError: On timeout, network failure, or a non-2xx status.
            ParseError: If the body is not JSON or not a valid draw list.
        """
        now = self._monotonic()
        if self._cached is not None and (now - self._cached_at) < self.cache_ttl:
            FEED_FETCH_TOTAL.labels(source="cache").inc()
            return list(self._cached)

        draws = parse_draws(await self.fetch_raw())
        self._cached = draws
        self._cached_at = now
        return draws
