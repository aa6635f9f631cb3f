"""
Routing rules that narrow the agents roster down to the bookable candidates.

Pipeline order: join identities -> eligibility -> quota -> fairness.
Every step is a pure function of its inputs and the RoutingContext; the mode
on the context is the only switch between automatic and manual behaviour.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from meeting_router.config import config
from meeting_router.language.fields_he import FORBIDDEN_BLOCK_STATUS
from meeting_router.models import BookingCounts, Candidate, DirectoryRecord, RoutingContext


def attach_accounts(records: Iterable[DirectoryRecord], accounts: dict[str, int]) -> list[Candidate]:
    """Join records to Cal.com ids by lowercased email; unmatched records are dropped."""
    candidates = []
    for record in records:
        email = (record.email or "").strip().lower()
        account_id = accounts.get(email) if email else None
        if account_id is not None:
            candidates.append(Candidate(record=record, account_id=account_id))
    return candidates


def is_eligible(record: DirectoryRecord, context: RoutingContext) -> bool:
    """Check a single directory record against the request's filters.

    The category selector always applies. Block status and the lead's
    interest only apply in automatic mode; a dispatcher assigning by hand
    overrides them.
    """
    if record.excludes(context.category_filter):
        return False
    if context.is_manual:
        return True
    if record.block_status == FORBIDDEN_BLOCK_STATUS:
        return False
    if record.excludes(context.interest_filter):
        return False
    return True


def filter_eligible(candidates: Iterable[Candidate], context: RoutingContext) -> list[Candidate]:
    return [c for c in candidates if is_eligible(c.record, context)]


def is_at_quota(candidate: Candidate, counts: BookingCounts) -> bool:
    """At quota means the monthly limit is reached in BOTH months.

    An agent who is full this month can still take a meeting next month.
    """
    limit = candidate.monthly_limit
    if limit is None:
        return False
    return (
        counts.current(candidate.account_id) >= limit
        and counts.next(candidate.account_id) >= limit
    )


@dataclass
class QuotaPartition:
    primary: list[Candidate] = field(default_factory=list)
    fallback: list[Candidate] = field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return not self.primary and bool(self.fallback)

    @property
    def selected(self) -> list[Candidate]:
        # Everyone at quota still beats an empty list
        return self.primary if self.primary else self.fallback


def partition_by_quota(
    candidates: Iterable[Candidate],
    counts: BookingCounts,
    context: RoutingContext,
) -> QuotaPartition:
    """Split candidates into within-quota and at-quota pools.

    Manual mode never defers to quotas: everything lands in ``primary``.
    """
    partition = QuotaPartition()
    for candidate in candidates:
        if not context.is_manual and is_at_quota(candidate, counts):
            partition.fallback.append(candidate)
        else:
            partition.primary.append(candidate)
    return partition


def effective_count(candidate: Candidate, counts: BookingCounts) -> int:
    """Bookings in the month the agent can still be booked into."""
    current = counts.current(candidate.account_id)
    limit = candidate.monthly_limit
    if limit is not None and current >= limit:
        return counts.next(candidate.account_id)
    return current


def balance_load(
    candidates: list[Candidate],
    counts: BookingCounts,
    context: RoutingContext,
    gap: Optional[int] = None,
) -> list[Candidate]:
    """Keep agents within ``gap`` bookings of the least loaded one.

    Only runs when even distribution was requested in automatic mode, and
    never narrows a pool of one.
    """
    if not context.even_distribution or context.is_manual or len(candidates) <= 1:
        return candidates

    gap = config.FAIRNESS_GAP if gap is None else gap
    scored = [(c, effective_count(c, counts)) for c in candidates]
    ceiling = min(score for _, score in scored) + gap
    return [c for c, score in scored if score <= ceiling]
