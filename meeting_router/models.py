"""Data models for Meeting Router."""

import enum
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AssignmentMode(str, enum.Enum):
    """How the agent list is being requested.

    AUTOMATIC applies every routing rule. MANUAL is a dispatcher picking an
    agent by hand: block status, interest and quota rules are skipped, only
    the category selector still narrows the roster.
    """
    AUTOMATIC = "automatic"
    MANUAL = "manual"


class RoutingContext(BaseModel):
    """Per-request routing options threaded through the allocation pipeline."""
    mode: AssignmentMode = AssignmentMode.AUTOMATIC
    category_filter: Optional[str] = None
    interest_filter: Optional[str] = None
    even_distribution: bool = False

    @property
    def is_manual(self) -> bool:
        return self.mode is AssignmentMode.MANUAL


class DirectoryRecord(BaseModel):
    """One agent as stored in the Airtable agents table."""
    id: str
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    # field name -> True when the agent does NOT handle that lead category
    category_flags: dict[str, bool] = Field(default_factory=dict)
    block_status: Optional[str] = None
    daily_limit: Optional[int] = None
    monthly_limit: Optional[int] = None
    weight: Optional[int] = None

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def excludes(self, category: Optional[str]) -> bool:
        """True when the agent opted out of ``category``. No category excludes nothing."""
        if not category:
            return False
        return self.category_flags.get(category) is True


class Candidate(BaseModel):
    """A directory record that has a bookable Cal.com account."""
    record: DirectoryRecord
    account_id: int

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def monthly_limit(self) -> Optional[int]:
        return self.record.monthly_limit


class BookingCounts(BaseModel):
    """Per-account booking counts for the current and next calendar month."""
    current_month: dict[int, int] = Field(default_factory=dict)
    next_month: dict[int, int] = Field(default_factory=dict)

    @classmethod
    def empty(cls) -> "BookingCounts":
        return cls()

    def current(self, account_id: int) -> int:
        return self.current_month.get(account_id, 0)

    def next(self, account_id: int) -> int:
        return self.next_month.get(account_id, 0)


class TeamMembership(BaseModel):
    """A Cal.com team membership."""
    account_id: Optional[int] = None
    accepted: bool = False
    email: Optional[str] = None


class BookingItem(BaseModel):
    """The two booking fields the load aggregation needs."""
    account_id: Optional[int] = None
    start_time: Optional[datetime] = None


class BookingsPage(BaseModel):
    """One page of the Cal.com bookings list."""
    items: list[BookingItem] = Field(default_factory=list)
    has_next_page: bool = False


class Specialization(BaseModel):
    """A lead category (one boolean column in the agents table)."""
    id: str
    name: str


# Response models. The booking form consumes camelCase JSON.

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AgentOut(_CamelModel):
    """Agent as returned to the booking form."""
    id: str
    name: str
    email: Optional[str] = None
    account_id: Optional[int] = None
    daily_limit: Optional[int] = None
    monthly_limit: Optional[int] = None
    weight: Optional[int] = None
    phone: Optional[str] = None

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> "AgentOut":
        record = candidate.record
        return cls(
            id=record.id,
            name=record.name,
            email=record.email,
            account_id=candidate.account_id,
            daily_limit=record.daily_limit,
            monthly_limit=record.monthly_limit,
            weight=record.weight,
            phone=record.phone,
        )


class AgentsResponse(_CamelModel):
    """Response model for GET /agents."""
    agents: list[AgentOut]


class SpecializationsResponse(_CamelModel):
    """Response model for GET /specializations."""
    specializations: list[Specialization]


class BookedHostsResponse(_CamelModel):
    """Response model for GET /bookings/hosts."""
    host_user_ids: list[int]
