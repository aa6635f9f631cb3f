"""
Booking load per Cal.com account.

Counts each agent's bookings in the current and next calendar month so the
quota and fairness rules can compare agents. Counts are rebuilt on every
request; booking state changes too fast to cache.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from meeting_router.config import config
from meeting_router.errors import BookingFetchError, ConfigurationError
from meeting_router.logging_config import get_logger
from meeting_router.metrics import booking_load_failures_total
from meeting_router.models import BookingCounts, RoutingContext
from meeting_router.scheduling_client import ACTIVE_STATUSES, LOAD_STATUSES, CalcomClient

logger = get_logger(__name__)


def _next_month(year: int, month: int) -> tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)


def month_window(now: datetime, tz: ZoneInfo) -> tuple[tuple[int, int], tuple[int, int], datetime, datetime]:
    """Return (current month, next month, window start, window end).

    Months are (year, month) pairs in the operating timezone. The window runs
    in UTC from the first instant of the current month to the last second of
    the next month.
    """
    local_now = now.astimezone(tz)
    current = (local_now.year, local_now.month)
    following = _next_month(*current)
    after_following = _next_month(*following)

    window_start = datetime(current[0], current[1], 1, tzinfo=timezone.utc)
    window_end = datetime(after_following[0], after_following[1], 1, tzinfo=timezone.utc) - timedelta(seconds=1)
    return current, following, window_start, window_end


class BookingLoadAggregator:
    """Builds BookingCounts from the paginated Cal.com bookings list."""

    def __init__(
        self,
        client: CalcomClient,
        tz_name: Optional[str] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._client = client
        self._tz = ZoneInfo(tz_name or config.OPERATING_TIMEZONE)
        self._now = now

    async def load(self, context: RoutingContext) -> BookingCounts:
        """Count bookings per account. Never raises.

        Manual assignment ignores quotas, so nothing is fetched. A failure on
        any page discards everything counted so far: partial counts would make
        some agents look under quota and others falsely over it.
        """
        if context.is_manual:
            return BookingCounts.empty()

        current, following, after, before = month_window(self._now(), self._tz)
        counts = BookingCounts()
        pages = 0

        try:
            async for page in self._client.booking_pages(after, before, LOAD_STATUSES):
                pages += 1
                for item in page.items:
                    if item.account_id is None or item.start_time is None:
                        continue
                    local_start = item.start_time.astimezone(self._tz)
                    month = (local_start.year, local_start.month)
                    if month == current:
                        bucket = counts.current_month
                    elif month == following:
                        bucket = counts.next_month
                    else:
                        continue
                    bucket[item.account_id] = bucket.get(item.account_id, 0) + 1
        except (BookingFetchError, ConfigurationError) as e:
            booking_load_failures_total.inc()
            logger.warning(
                "booking_load_failed",
                error=str(e),
                pages_fetched=pages,
                status_code=getattr(e, "status_code", None),
            )
            return BookingCounts.empty()

        logger.debug(
            "booking_load_aggregated",
            pages=pages,
            accounts_current=len(counts.current_month),
            accounts_next=len(counts.next_month),
        )
        return counts


async def booked_hosts_on(client: CalcomClient, day: date) -> list[int]:
    """Host ids of active bookings starting on ``day`` (UTC), one per booking.

    Raises BookingFetchError or ConfigurationError; the caller asked for this
    data explicitly, so there is nothing sensible to degrade to.
    """
    after = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    before = after + timedelta(days=1) - timedelta(seconds=1)

    host_ids: list[int] = []
    async for page in client.booking_pages(after, before, ACTIVE_STATUSES):
        for item in page.items:
            if item.account_id is None or item.start_time is None:
                continue
            # Cal.com does not always honour the date filter
            if item.start_time.astimezone(timezone.utc).date() == day:
                host_ids.append(item.account_id)
    return host_ids
