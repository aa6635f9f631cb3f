"""
Cal.com client: team memberships and the bookings list.

Agents book meetings through their Cal.com accounts; the router only reads
from Cal.com, it never writes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, AsyncIterator, Iterable, Optional

import httpx

from meeting_router.config import config
from meeting_router.errors import BookingFetchError, ConfigurationError, IdentityFetchError
from meeting_router.logging_config import get_logger
from meeting_router.models import BookingItem, BookingsPage, TeamMembership

logger = get_logger(__name__)

LOAD_STATUSES = ("upcoming", "recurring", "past")
ACTIVE_STATUSES = ("upcoming", "recurring")


def format_utc(dt: datetime) -> str:
    """Format a datetime the way Cal.com's afterStart/beforeEnd expect."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _host_id(booking: dict) -> Optional[int]:
    user = booking.get("user")
    if isinstance(user, dict) and isinstance(user.get("id"), int):
        return user["id"]
    hosts = booking.get("hosts")
    if isinstance(hosts, list) and hosts and isinstance(hosts[0], dict):
        host_id = hosts[0].get("id")
        if isinstance(host_id, int):
            return host_id
    return None


def parse_bookings_page(payload: dict) -> BookingsPage:
    """Normalize a bookings response.

    Two shapes are seen in the wild: ``data.bookings`` with a ``nextCursor``,
    and ``data`` as a list with ``pagination.hasNextPage``.
    """
    data = payload.get("data")
    if isinstance(data, dict):
        raw = data.get("bookings") or []
        has_next_page = data.get("nextCursor") is not None
    else:
        raw = data if isinstance(data, list) else []
        pagination = payload.get("pagination") or {}
        has_next_page = bool(pagination.get("hasNextPage"))

    items = [
        BookingItem(
            account_id=_host_id(booking),
            start_time=_parse_timestamp(booking.get("startTime") or booking.get("start")),
        )
        for booking in raw
        if isinstance(booking, dict)
    ]
    return BookingsPage(items=items, has_next_page=has_next_page)


def parse_membership(entry: dict) -> TeamMembership:
    user = entry.get("user") if isinstance(entry.get("user"), dict) else {}
    account_id = entry.get("userId", user.get("id"))
    return TeamMembership(
        account_id=account_id if isinstance(account_id, int) else None,
        accepted=entry.get("accepted") is True,
        email=entry.get("email") or user.get("email"),
    )


class CalcomClient:
    """Read-only access to the Cal.com v2 API."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {config.CALCOM_API_KEY}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=config.CALCOM_API_BASE_URL,
            timeout=config.HTTP_TIMEOUT_SECONDS,
            transport=self._transport,
        )

    async def list_team_memberships(self) -> list[TeamMembership]:
        """Fetch every membership of the configured team."""
        if not config.has_calcom_config():
            raise ConfigurationError("Missing Cal.com configuration")

        try:
            async with self._client() as client:
                resp = await client.get(
                    f"/teams/{config.CALCOM_TEAM_ID}/memberships",
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            raise IdentityFetchError(f"Cal.com memberships request failed: {e}") from e

        if not resp.is_success:
            raise IdentityFetchError(
                f"Cal.com memberships error: {resp.status_code}",
                status_code=resp.status_code,
                response_data={"body": resp.text[:500]},
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise IdentityFetchError(f"Invalid Cal.com memberships response: {e}") from e

        entries = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            raise IdentityFetchError("Cal.com memberships response has no data list")

        return [parse_membership(entry) for entry in entries if isinstance(entry, dict)]

    async def list_bookings(
        self,
        after: datetime,
        before: datetime,
        statuses: Iterable[str],
        page: int,
    ) -> BookingsPage:
        """Fetch a single page of bookings starting in ``[after, before]``."""
        if not config.has_calcom_key():
            raise ConfigurationError("Missing Cal.com API configuration")

        params = {
            "afterStart": format_utc(after),
            "beforeEnd": format_utc(before),
            "status": ",".join(statuses),
            "take": str(config.CALCOM_BOOKINGS_PAGE_SIZE),
            "page": str(page),
        }

        try:
            async with self._client() as client:
                resp = await client.get("/bookings", headers=self._headers(), params=params)
        except httpx.HTTPError as e:
            raise BookingFetchError(f"Cal.com bookings request failed: {e}") from e

        if not resp.is_success:
            raise BookingFetchError(
                f"Cal.com bookings error: {resp.status_code}",
                status_code=resp.status_code,
                response_data={"body": resp.text[:500], "page": page},
            )

        try:
            payload = resp.json()
        except ValueError as e:
            raise BookingFetchError(f"Invalid Cal.com bookings response: {e}") from e

        return parse_bookings_page(payload if isinstance(payload, dict) else {})

    def booking_pages(
        self,
        after: datetime,
        before: datetime,
        statuses: Iterable[str],
    ) -> "BookingPages":
        return BookingPages(self, after, before, tuple(statuses))


class BookingPages:
    """Lazy, restartable sequence of booking pages.

    Every ``async for`` starts again from page 1 and stops after the first
    page that reports no further page. Pages are fetched one at a time since
    each request depends on the previous page's cursor.
    """

    def __init__(self, client: CalcomClient, after: datetime, before: datetime, statuses: tuple[str, ...]):
        self._client = client
        self.after = after
        self.before = before
        self.statuses = statuses

    def __aiter__(self) -> AsyncIterator[BookingsPage]:
        return self._pages()

    async def _pages(self) -> AsyncIterator[BookingsPage]:
        page_number = 1
        while True:
            page = await self._client.list_bookings(self.after, self.before, self.statuses, page_number)
            yield page
            # A page can carry items and still be the last one
            if not page.has_next_page:
                return
            page_number += 1
