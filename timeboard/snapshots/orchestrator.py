"""Upstream fetch orchestration with cache-backed degradation.

Once any snapshot exists for a view, however old, the upstream is optional:
rate limits, quota exhaustion and hard failures all fall back to it with
``stale=True`` and a warning. Only when nothing was ever cached does an
upstream failure reach the caller, as an UpstreamError.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from timeboard.cache.models import Snapshot
from timeboard.cache.snapshot_cache import SnapshotCache
from timeboard.observability.logging import get_logger
from timeboard.observability.metrics import DEGRADED_RESPONSES
from timeboard.snapshots.coalescing import SingleFlight
from timeboard.upstream.errors import UpstreamError, UpstreamErrorKind
from timeboard.upstream.outcome import (
    HardFailure,
    QuotaExhausted,
    RateLimited,
    Success,
    UpstreamOutcome,
    outcome_from_error,
)
from timeboard.utils.clock import Clock, utc_now

logger = get_logger(__name__)

RATE_LIMITED_ERROR = "Rate limited by Toggl. Please retry shortly."
QUOTA_EXHAUSTED_ERROR = "Toggl API quota reached. Please wait for reset before retrying."
DEFAULT_HARD_FAILURE_STATUS = 502


@dataclass(frozen=True)
class DegradationMessages:
    """Warnings attached to responses that are not backed by fresh data."""

    stale: str = "Showing last cached snapshot. Click Refresh view to fetch newer data."
    empty: str = "No cached snapshot yet. Click Refresh view to load data."
    rate_limited: str = "Rate limited. Showing last cached snapshot."
    quota: str = "Quota reached. Showing last cached snapshot. Try Refresh view after reset."
    unavailable: str = "Toggl is unavailable. Showing last cached snapshot."


DEFAULT_MESSAGES = DegradationMessages()

WEEK_MESSAGES = DegradationMessages(
    stale="Showing last cached 7-day snapshot. Click Refresh view to fetch newer data.",
    empty="No cached 7-day snapshot yet. Click Refresh view to load data.",
    rate_limited="Quota/rate limit reached. Showing last cached 7-day snapshot.",
    quota="Quota/rate limit reached. Showing last cached 7-day snapshot.",
    unavailable="Toggl unavailable. Showing last cached 7-day snapshot.",
)


@dataclass(frozen=True)
class ServedSnapshot:
    """A view payload plus the envelope describing how current it is."""

    payload: Any
    stale: bool
    cached_at: datetime
    warning: str | None = None
    retry_after: str | None = None
    quota_remaining: str | None = None
    quota_resets_in: str | None = None

    @classmethod
    def from_snapshot(
        cls, snapshot: Snapshot, *, stale: bool, warning: str | None = None, **hints: str | None
    ) -> "ServedSnapshot":
        return cls(
            payload=snapshot.payload,
            stale=stale,
            cached_at=snapshot.created_at,
            warning=warning,
            **hints,
        )


class FetchOrchestrator:
    """Decides between the snapshot cache and the upstream for each read.

    Without a refresh request the upstream is never contacted: the caller
    gets the fresh snapshot, else the stale one, else an empty payload.
    With a refresh request the upstream is called and the outcome decides
    the response path.
    """

    def __init__(
        self,
        cache: SnapshotCache,
        *,
        timeout_seconds: float | None = None,
        coalescer: SingleFlight | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            cache: Snapshot cache shared by the process
            timeout_seconds: Upper bound on one upstream fetch; None waits forever
            coalescer: Share in-flight refreshes per key when set
            clock: Source of the current time
        """
        self._cache = cache
        self._timeout_seconds = timeout_seconds
        self._coalescer = coalescer
        self._clock = clock

    async def serve(
        self,
        key: str,
        *,
        refresh: bool,
        ttl_seconds: int,
        fetch: Callable[[], Awaitable[Any]],
        empty_payload: Callable[[], Any],
        messages: DegradationMessages = DEFAULT_MESSAGES,
    ) -> ServedSnapshot:
        """Serve a view.

        Args:
            key: Cache key of the view
            refresh: Spend upstream quota to recompute the view
            ttl_seconds: Freshness window for a newly fetched payload
            fetch: Computes the payload from the upstream; raises UpstreamError
            empty_payload: Zeroed payload for a view that was never cached
            messages: Warning texts for this view

        Returns:
            The payload and its freshness envelope

        Raises:
            UpstreamError: The refresh failed and nothing is cached for the key
        """
        if not refresh:
            return await self._serve_cached(key, empty_payload, messages)

        outcome = await self._refresh(key, fetch, ttl_seconds)
        if isinstance(outcome, Success):
            return ServedSnapshot.from_snapshot(outcome.data, stale=False)

        fallback = await self._cache.get(key, fresh_only=False)
        return self._degrade(key, outcome, fallback, messages)

    async def _serve_cached(
        self,
        key: str,
        empty_payload: Callable[[], Any],
        messages: DegradationMessages,
    ) -> ServedSnapshot:
        fresh = await self._cache.get(key, fresh_only=True)
        if fresh is not None:
            return ServedSnapshot.from_snapshot(fresh, stale=False)

        stale = await self._cache.get(key, fresh_only=False)
        if stale is not None:
            DEGRADED_RESPONSES.labels(reason="stale_cache").inc()
            return ServedSnapshot.from_snapshot(stale, stale=True, warning=messages.stale)

        DEGRADED_RESPONSES.labels(reason="no_snapshot").inc()
        return ServedSnapshot(
            payload=empty_payload(),
            stale=True,
            cached_at=self._clock(),
            warning=messages.empty,
        )

    async def _refresh(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        ttl_seconds: int,
    ) -> UpstreamOutcome:
        """Call the upstream once and cache a successful result.

        On success the outcome carries the written Snapshot.
        """

        async def call() -> UpstreamOutcome:
            try:
                if self._timeout_seconds is None:
                    payload = await fetch()
                else:
                    payload = await asyncio.wait_for(fetch(), self._timeout_seconds)
            except UpstreamError as e:
                logger.warning(
                    "upstream_refresh_failed",
                    key=key,
                    kind=e.kind.value,
                    status_code=e.status_code,
                    error=e.message,
                )
                return outcome_from_error(e)
            except TimeoutError:
                logger.warning("upstream_refresh_timed_out", key=key, timeout=self._timeout_seconds)
                return HardFailure(status_code=None, message="Toggl request timed out")

            snapshot = await self._cache.set(key, payload, ttl_seconds)
            logger.info("snapshot_refreshed", key=key, ttl_seconds=ttl_seconds)
            return Success(snapshot)

        if self._coalescer is not None:
            return await self._coalescer.run(key, call)
        return await call()

    def _degrade(
        self,
        key: str,
        outcome: UpstreamOutcome,
        fallback: Snapshot | None,
        messages: DegradationMessages,
    ) -> ServedSnapshot:
        if isinstance(outcome, RateLimited):
            if fallback is not None:
                DEGRADED_RESPONSES.labels(reason="rate_limited").inc()
                return ServedSnapshot.from_snapshot(
                    fallback,
                    stale=True,
                    warning=messages.rate_limited,
                    retry_after=outcome.retry_after,
                    quota_remaining=outcome.quota_remaining,
                    quota_resets_in=outcome.quota_resets_in,
                )
            raise UpstreamError(
                UpstreamErrorKind.RATE_LIMITED,
                RATE_LIMITED_ERROR,
                status_code=429,
                retry_after=outcome.retry_after,
                quota_remaining=outcome.quota_remaining,
                quota_resets_in=outcome.quota_resets_in,
            )

        if isinstance(outcome, QuotaExhausted):
            if fallback is not None:
                DEGRADED_RESPONSES.labels(reason="quota").inc()
                return ServedSnapshot.from_snapshot(
                    fallback,
                    stale=True,
                    warning=messages.quota,
                    quota_remaining=outcome.quota_remaining,
                    quota_resets_in=outcome.quota_resets_in,
                )
            raise UpstreamError(
                UpstreamErrorKind.QUOTA_EXHAUSTED,
                QUOTA_EXHAUSTED_ERROR,
                status_code=402,
                quota_remaining=outcome.quota_remaining,
                quota_resets_in=outcome.quota_resets_in,
            )

        if not isinstance(outcome, HardFailure):
            raise TypeError(f"Unhandled upstream outcome: {type(outcome).__name__}")

        if fallback is not None:
            DEGRADED_RESPONSES.labels(reason="unavailable").inc()
            return ServedSnapshot.from_snapshot(fallback, stale=True, warning=messages.unavailable)

        status = outcome.status_code
        logger.error("upstream_unavailable_without_snapshot", key=key, status_code=status)
        raise UpstreamError.hard(
            outcome.message,
            status if status is not None and status >= 400 else DEFAULT_HARD_FAILURE_STATUS,
        )
