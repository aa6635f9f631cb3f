import re
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from meeting_router.booking_load import booked_hosts_on
from meeting_router.dependencies import get_calcom_client
from meeting_router.errors import BookingFetchError, ConfigurationError
from meeting_router.logging_config import get_logger
from meeting_router.models import BookedHostsResponse
from meeting_router.scheduling_client import CalcomClient

logger = get_logger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# GET /bookings/hosts?date=2025-01-31
# Gets: query param date (YYYY-MM-DD)
# Returns: BookedHostsResponse {hostUserIds: [int]} - one entry per active booking that day
# Example:
#   curl 'http://localhost:8000/bookings/hosts?date=2025-01-31'
@router.get("/hosts", response_model=BookedHostsResponse)
async def booked_hosts(
    day: Optional[str] = Query(None, alias="date"),
    client: CalcomClient = Depends(get_calcom_client),
):
    """Cal.com user ids of hosts already booked on a given day."""

    if not day:
        raise HTTPException(status_code=400, detail="Missing date parameter")
    if not DATE_RE.match(day):
        raise HTTPException(status_code=400, detail="Invalid date format. Expected YYYY-MM-DD")
    try:
        requested = date.fromisoformat(day)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format. Expected YYYY-MM-DD")

    try:
        host_ids = await booked_hosts_on(client, requested)
    except ConfigurationError as e:
        logger.error("bookings_configuration_missing", error=str(e))
        raise HTTPException(status_code=500, detail="Missing Cal.com API configuration")
    except BookingFetchError as e:
        logger.error("bookings_fetch_failed", error=str(e), status_code=e.status_code, date=day)
        raise HTTPException(status_code=502, detail="Failed to fetch bookings")

    return BookedHostsResponse(host_user_ids=host_ids)
