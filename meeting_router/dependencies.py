"""
Process-wide singletons handed to the routers through FastAPI dependencies.

Tests replace them with ``app.dependency_overrides``.
"""

from functools import lru_cache

from meeting_router.booking_load import BookingLoadAggregator
from meeting_router.directory_client import AirtableDirectoryClient
from meeting_router.identity_cache import IdentityCorrelator, TimedCache
from meeting_router.models import Specialization
from meeting_router.resolver import AssignmentResolver
from meeting_router.scheduling_client import CalcomClient

# Lead categories change rarely
SPECIALIZATIONS_TTL_SECONDS = 300


@lru_cache(maxsize=None)
def get_directory_client() -> AirtableDirectoryClient:
    return AirtableDirectoryClient()


@lru_cache(maxsize=None)
def get_calcom_client() -> CalcomClient:
    return CalcomClient()


@lru_cache(maxsize=None)
def get_identity_correlator() -> IdentityCorrelator:
    # One correlator per process: its cache is shared by every request
    return IdentityCorrelator(get_calcom_client())


@lru_cache(maxsize=None)
def get_resolver() -> AssignmentResolver:
    calcom = get_calcom_client()
    return AssignmentResolver(
        directory=get_directory_client(),
        identities=get_identity_correlator(),
        booking_load=BookingLoadAggregator(calcom),
    )


@lru_cache(maxsize=None)
def get_specializations_cache() -> TimedCache[list[Specialization]]:
    return TimedCache(
        get_directory_client().list_specializations,
        SPECIALIZATIONS_TTL_SECONDS,
        name="specializations",
    )
