"""Tests for the Cal.com booking pagination and monthly load aggregation."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import httpx
import pytest

from meeting_router.booking_load import BookingLoadAggregator, booked_hosts_on, month_window
from meeting_router.errors import BookingFetchError
from meeting_router.models import AssignmentMode, RoutingContext
from meeting_router.scheduling_client import CalcomClient, parse_bookings_page

JERUSALEM = ZoneInfo("Asia/Jerusalem")
NOW = datetime(2025, 12, 15, 10, 0, tzinfo=timezone.utc)


def booking(user_id, start):
    return {"id": 1, "user": {"id": user_id} if user_id is not None else None, "startTime": start}


def page_payload(bookings, next_cursor=None):
    return {"status": "success", "data": {"bookings": bookings, "nextCursor": next_cursor}}


class PagedBookings:
    """MockTransport handler serving numbered pages; None entries fail with 500."""

    def __init__(self, pages):
        self.pages = pages
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        number = int(request.url.params["page"])
        payload = self.pages[number - 1]
        if payload is None:
            return httpx.Response(500, text="upstream exploded")
        return httpx.Response(200, json=payload)


def aggregator_for(handler):
    client = CalcomClient(transport=httpx.MockTransport(handler))
    return BookingLoadAggregator(client, tz_name="Asia/Jerusalem", now=lambda: NOW)


def test_month_window_rolls_over_the_year():
    current, following, start, end = month_window(NOW, JERUSALEM)

    assert current == (2025, 12)
    assert following == (2026, 1)
    assert start == datetime(2025, 12, 1, tzinfo=timezone.utc)
    assert end == datetime(2026, 1, 31, 23, 59, 59, tzinfo=timezone.utc)


def test_month_window_uses_operating_timezone_for_current_month():
    # 22:30 UTC on Jan 31 is already February in Jerusalem
    current, following, _, _ = month_window(datetime(2026, 1, 31, 22, 30, tzinfo=timezone.utc), JERUSALEM)

    assert current == (2026, 2)
    assert following == (2026, 3)


@pytest.mark.asyncio
async def test_load_counts_current_and_next_month_across_pages():
    handler = PagedBookings([
        page_payload([
            booking(1, "2025-12-03T08:00:00Z"),
            booking(1, "2025-12-20T08:00:00Z"),
            booking(2, "2026-01-05T08:00:00Z"),
        ], next_cursor=2),
        # Last page still carries items
        page_payload([booking(1, "2026-01-10T08:00:00.000Z")], next_cursor=None),
    ])

    counts = await aggregator_for(handler).load(RoutingContext())

    assert counts.current_month == {1: 2}
    assert counts.next_month == {2: 1, 1: 1}
    assert [r.url.params["page"] for r in handler.requests] == ["1", "2"]


@pytest.mark.asyncio
async def test_load_requests_expected_window_and_statuses():
    handler = PagedBookings([page_payload([])])

    await aggregator_for(handler).load(RoutingContext())

    params = handler.requests[0].url.params
    assert params["afterStart"] == "2025-12-01T00:00:00Z"
    assert params["beforeEnd"] == "2026-01-31T23:59:59Z"
    assert params["status"] == "upcoming,recurring,past"
    assert params["take"] == "100"
    assert handler.requests[0].headers["Authorization"] == "Bearer test-calcom-key"


@pytest.mark.asyncio
async def test_load_discards_bookings_outside_both_months_and_incomplete_ones():
    handler = PagedBookings([
        page_payload([
            booking(1, "2025-11-10T08:00:00Z"),
            booking(1, "2026-02-02T08:00:00Z"),
            # Feb 1st 00:30 local time
            booking(1, "2026-01-31T22:30:00Z"),
            booking(None, "2025-12-10T08:00:00Z"),
            booking(2, None),
            booking(2, "not-a-date"),
            booking(3, "2025-12-10T08:00:00Z"),
        ]),
    ])

    counts = await aggregator_for(handler).load(RoutingContext())

    assert counts.current_month == {3: 1}
    assert counts.next_month == {}


@pytest.mark.asyncio
async def test_load_failure_on_any_page_discards_partial_counts():
    handler = PagedBookings([
        page_payload([booking(1, "2025-12-03T08:00:00Z")], next_cursor=2),
        None,
    ])

    counts = await aggregator_for(handler).load(RoutingContext())

    assert counts.current_month == {}
    assert counts.next_month == {}
    assert len(handler.requests) == 2


@pytest.mark.asyncio
async def test_load_transport_error_returns_empty_counts():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    counts = await aggregator_for(handler).load(RoutingContext())

    assert counts.current_month == {} and counts.next_month == {}


@pytest.mark.asyncio
async def test_manual_mode_skips_fetching():
    handler = PagedBookings([page_payload([booking(1, "2025-12-03T08:00:00Z")])])

    counts = await aggregator_for(handler).load(RoutingContext(mode=AssignmentMode.MANUAL))

    assert counts.current_month == {}
    assert handler.requests == []


@pytest.mark.asyncio
async def test_missing_api_key_returns_empty_counts(monkeypatch):
    from meeting_router.config import config, Config

    monkeypatch.setattr(Config, "CALCOM_API_KEY", "", raising=False)
    monkeypatch.setattr(config, "CALCOM_API_KEY", "", raising=False)
    handler = PagedBookings([page_payload([booking(1, "2025-12-03T08:00:00Z")])])

    counts = await aggregator_for(handler).load(RoutingContext())

    assert counts.current_month == {}
    assert handler.requests == []


@pytest.mark.asyncio
async def test_booking_pages_restart_from_first_page():
    handler = PagedBookings([page_payload([], next_cursor=2), page_payload([])])
    client = CalcomClient(transport=httpx.MockTransport(handler))
    pages = client.booking_pages(NOW, NOW, ("upcoming",))

    first_pass = [page async for page in pages]
    second_pass = [page async for page in pages]

    assert len(first_pass) == len(second_pass) == 2
    assert [r.url.params["page"] for r in handler.requests] == ["1", "2", "1", "2"]


def test_parse_bookings_page_supports_paginated_list_shape():
    payload = {
        "status": "success",
        "data": [
            {"hosts": [{"id": 7, "name": "Dana"}], "start": "2025-12-03T08:00:00Z"},
        ],
        "pagination": {"hasNextPage": True},
    }

    page = parse_bookings_page(payload)

    assert page.has_next_page is True
    assert page.items[0].account_id == 7
    assert page.items[0].start_time == datetime(2025, 12, 3, 8, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_booked_hosts_on_filters_by_utc_date():
    handler = PagedBookings([
        page_payload([
            booking(1, "2025-12-03T08:00:00Z"),
            booking(1, "2025-12-03T12:00:00Z"),
            booking(2, "2025-12-04T00:30:00Z"),
        ]),
    ])
    client = CalcomClient(transport=httpx.MockTransport(handler))

    assert await booked_hosts_on(client, date(2025, 12, 3)) == [1, 1]
    params = handler.requests[0].url.params
    assert params["status"] == "upcoming,recurring"
    assert params["afterStart"] == "2025-12-03T00:00:00Z"
    assert params["beforeEnd"] == "2025-12-03T23:59:59Z"


@pytest.mark.asyncio
async def test_booked_hosts_on_propagates_fetch_errors():
    handler = PagedBookings([None])
    client = CalcomClient(transport=httpx.MockTransport(handler))

    with pytest.raises(BookingFetchError):
        await booked_hosts_on(client, date(2025, 12, 3))
