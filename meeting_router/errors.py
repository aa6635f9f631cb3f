"""Error types raised by the upstream ports.

Only ``ConfigurationError`` and ``DirectoryFetchError`` ever reach the HTTP
layer. Identity and booking errors are absorbed by the component that made
the call.
"""

from typing import Optional


class MeetingRouterError(Exception):
    """Base error carrying upstream status details for the operator logs."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[dict] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data or {}


class ConfigurationError(MeetingRouterError):
    """Credentials or identifiers for a required port are missing."""


class DirectoryFetchError(MeetingRouterError):
    """The agents directory could not be read."""


class IdentityFetchError(MeetingRouterError):
    """Team memberships could not be read from the scheduling platform."""


class BookingFetchError(MeetingRouterError):
    """A page of bookings could not be read from the scheduling platform."""
