"""
Identity correlation between the agents directory and Cal.com.

Directory records and Cal.com accounts are only linked by email. The mapping
changes rarely (an agent accepts a team invite), so it is cached in-process
and rebuilt after a TTL.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Generic, NamedTuple, Optional, TypeVar

from meeting_router.config import config
from meeting_router.errors import ConfigurationError, IdentityFetchError, MeetingRouterError
from meeting_router.logging_config import get_logger
from meeting_router.metrics import identity_cache_refresh_total
from meeting_router.scheduling_client import CalcomClient

logger = get_logger(__name__)

T = TypeVar("T")


class _Entry(NamedTuple):
    value: Any
    fetched_at: float


class _Failure(NamedTuple):
    error: MeetingRouterError
    failed_at: float


# An upstream that just failed is not asked again before this many seconds
RETRY_AFTER_FAILURE_SECONDS = 30.0


class TimedCache(Generic[T]):
    """Single-value cache with a TTL and stale-on-error reads.

    Refreshes run under a lock and publish a new entry by replacing one
    attribute, so readers never see a half-built value. While a refresh is in
    flight, callers holding an older value get it back at once instead of
    queueing. When a refresh fails the previous value is served, however old;
    the loader's error propagates only if no value was ever loaded. A failed
    refresh is not retried for ``retry_after_seconds``.
    """

    def __init__(
        self,
        loader: Callable[[], Awaitable[T]],
        ttl_seconds: float,
        clock: Callable[[], float] = time.time,
        name: str = "cache",
        retry_after_seconds: float = RETRY_AFTER_FAILURE_SECONDS,
    ):
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self._name = name
        self._retry_after = retry_after_seconds
        self._entry: Optional[_Entry] = None
        self._failure: Optional[_Failure] = None
        self._lock = asyncio.Lock()

    def _is_fresh(self, entry: Optional[_Entry]) -> bool:
        return entry is not None and self._clock() - entry.fetched_at <= self._ttl

    def _recent_failure(self) -> Optional[_Failure]:
        failure = self._failure
        if failure is not None and self._clock() - failure.failed_at < self._retry_after:
            return failure
        return None

    def _without_reload(self, entry: Optional[_Entry]) -> Optional[_Entry]:
        """Entry to serve as-is, or None when the caller must load."""
        if self._is_fresh(entry):
            return entry
        failure = self._recent_failure()
        if failure is not None:
            if entry is None:
                raise failure.error
            return entry
        return None

    @property
    def has_value(self) -> bool:
        return self._entry is not None

    async def get(self) -> T:
        """Return the cached value, refreshing it first if the TTL has passed."""
        entry = self._entry
        served = self._without_reload(entry)
        if served is not None:
            return served.value
        if entry is not None and self._lock.locked():
            # A refresh is already running; the old value is good enough meanwhile
            return entry.value

        async with self._lock:
            # Another request may have refreshed (or failed to) while we waited
            entry = self._entry
            served = self._without_reload(entry)
            if served is not None:
                return served.value
            return await self._load(entry)

    async def refresh(self) -> T:
        """Reload unconditionally."""
        async with self._lock:
            return await self._load(self._entry)

    async def _load(self, previous: Optional[_Entry]) -> T:
        try:
            value = await self._loader()
        except MeetingRouterError as e:
            self._failure = _Failure(e, self._clock())
            if previous is None:
                raise
            logger.warning(
                "cache_refresh_failed_serving_stale",
                cache=self._name,
                age_seconds=round(self._clock() - previous.fetched_at, 1),
                error=str(e),
            )
            return previous.value

        self._entry = _Entry(value, self._clock())
        self._failure = None
        return value

    def clear(self) -> None:
        self._entry = None
        self._failure = None


class IdentityCorrelator:
    """Maps lowercased agent emails to Cal.com user ids.

    Only accepted team memberships are bookable, so pending invites are left
    out of the mapping. ``resolve()`` never raises.
    """

    def __init__(
        self,
        client: CalcomClient,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._client = client
        self.cache: TimedCache[dict[str, int]] = TimedCache(
            self._fetch_mapping,
            ttl_seconds if ttl_seconds is not None else config.IDENTITY_CACHE_TTL_SECONDS,
            clock=clock,
            name="identity",
        )

    async def _fetch_mapping(self) -> dict[str, int]:
        try:
            memberships = await self._client.list_team_memberships()
        except (IdentityFetchError, ConfigurationError):
            identity_cache_refresh_total.labels(outcome="error").inc()
            raise

        mapping: dict[str, int] = {}
        for membership in memberships:
            if not membership.accepted or membership.account_id is None:
                continue
            email = (membership.email or "").strip().lower()
            if email:
                mapping[email] = membership.account_id

        identity_cache_refresh_total.labels(outcome="success").inc()
        logger.info("identity_mapping_refreshed", accounts=len(mapping), memberships=len(memberships))
        return mapping

    async def resolve(self) -> dict[str, int]:
        """Return the email -> account id mapping (stale or empty on failure)."""
        try:
            return await self.cache.get()
        except (IdentityFetchError, ConfigurationError) as e:
            logger.warning("identity_mapping_unavailable", error=str(e))
            return {}
