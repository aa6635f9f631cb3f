"""
Assignment resolver: the candidate agents list for one booking request.

Fans out to the directory, the identity cache and the booking load, then runs
the allocation pipeline over the joined data.
"""

import asyncio
import time
from typing import Optional

from meeting_router.allocation import attach_accounts, balance_load, filter_eligible, partition_by_quota
from meeting_router.booking_load import BookingLoadAggregator
from meeting_router.directory_client import AirtableDirectoryClient
from meeting_router.identity_cache import IdentityCorrelator
from meeting_router.language.collation import sort_by_name
from meeting_router.logging_config import get_logger
from meeting_router.metrics import agents_resolve_duration, quota_fallback_total
from meeting_router.models import Candidate, RoutingContext

logger = get_logger(__name__)


class AssignmentResolver:
    """Resolves the ordered list of agents a meeting can be routed to."""

    def __init__(
        self,
        directory: AirtableDirectoryClient,
        identities: IdentityCorrelator,
        booking_load: BookingLoadAggregator,
        fairness_gap: Optional[int] = None,
    ):
        self.directory = directory
        self.identities = identities
        self.booking_load = booking_load
        self.fairness_gap = fairness_gap

    async def resolve(self, context: RoutingContext) -> list[Candidate]:
        """Return eligible candidates sorted by Hebrew name.

        Raises ConfigurationError / DirectoryFetchError. Identity and booking
        failures are absorbed by their components and only degrade the result.
        """
        # Fail before any remote call when the directory cannot be reached
        self.directory.ensure_configured()

        started = time.perf_counter()
        tasks = [
            asyncio.ensure_future(self.directory.list_agents()),
            asyncio.ensure_future(self.identities.resolve()),
            asyncio.ensure_future(self.booking_load.load(context)),
        ]
        try:
            records, accounts, counts = await asyncio.gather(*tasks)
        except BaseException:
            # A failed directory fetch leaves nothing to join; stop the other fetches
            for task in tasks:
                task.cancel()
            raise

        candidates = attach_accounts(records, accounts)
        eligible = filter_eligible(candidates, context)
        partition = partition_by_quota(eligible, counts, context)
        if partition.used_fallback:
            quota_fallback_total.inc()
            logger.info("quota_fallback_used", candidates=len(partition.fallback))
        balanced = balance_load(partition.selected, counts, context, gap=self.fairness_gap)
        result = sort_by_name(balanced, lambda c: c.name)

        agents_resolve_duration.observe(time.perf_counter() - started)
        logger.info(
            "agents_resolved",
            mode=context.mode.value,
            category_filter=context.category_filter,
            interest_filter=context.interest_filter,
            even_distribution=context.even_distribution,
            directory=len(records),
            bookable=len(candidates),
            eligible=len(eligible),
            at_quota=len(partition.fallback),
            returned=len(result),
        )
        return result
