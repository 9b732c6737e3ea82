"""
Core Data Models for SplitLedger

These models define the strict schemas for every record the ledger
stores or derives. They are designed to:
1. Validate stored records on load (the store itself trusts nothing)
2. Round-trip through the record store in the camelCase shape
   existing data was written in
3. Keep money as Decimal in memory and plain numbers on the wire

DESIGN DECISION: Field names are snake_case in Python and camelCase on
the wire. Callers build models with snake_case names; the repository
serializes with aliases.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)
from pydantic.alias_generators import to_camel


# Decimal in memory, JSON number in storage
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

UNKNOWN_MEMBER_NAME = "Unknown"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_record_id(prefix: str, now: datetime) -> str:
    """
    Allocate an id like ``group-1718000000000-3f9a1c2b``.

    The millisecond timestamp keeps the shape of ids already in storage;
    the random suffix keeps two ids minted in the same millisecond apart.
    """
    millis = int(now.timestamp() * 1000)
    return f"{prefix}-{millis}-{uuid4().hex[:8]}"


class LedgerRecord(BaseModel):
    """Base for every model that lives in a record store collection."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_record(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dict in the stored (camelCase) shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_record(cls, record: dict[str, Any]):
        """Validate a stored dict. Raises pydantic.ValidationError on bad shape."""
        return cls.model_validate(record)


# =============================================================================
# GROUPS
# =============================================================================

class GroupMember(LedgerRecord):
    """
    One participant of one group.

    A user in two groups has two independent GroupMember entries,
    possibly with different display data.
    """

    user_id: str = Field(
        ...,
        min_length=1,
        description="User identifier, unique within the group"
    )
    display_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Name shown for this member in the group"
    )
    avatar: Optional[str] = Field(
        default=None,
        description="Avatar URL if the user has one"
    )
    joined_at: datetime = Field(
        default_factory=utc_now,
        description="When the member joined the group"
    )


class Group(LedgerRecord):
    """
    A named set of participants who share expenses.

    CRITICAL: A group with zero members is never persisted.
    Removing the last member deletes the group (and its expenses).
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Unique group identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Group name"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=1000,
    )
    created_by: str = Field(
        ...,
        description="user_id of the member who created the group"
    )
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    members: list[GroupMember] = Field(
        ...,
        min_length=1,
        description="Ordered member list; order drives pairwise balance output"
    )

    @model_validator(mode='after')
    def validate_unique_members(self) -> 'Group':
        """A user_id may appear only once per group."""
        seen = set()
        for member in self.members:
            if member.user_id in seen:
                raise ValueError(f"Duplicate member in group: {member.user_id}")
            seen.add(member.user_id)
        return self

    @property
    def member_ids(self) -> list[str]:
        return [member.user_id for member in self.members]

    def find_member(self, user_id: str) -> Optional[GroupMember]:
        for member in self.members:
            if member.user_id == user_id:
                return member
        return None

    def has_member(self, user_id: str) -> bool:
        return self.find_member(user_id) is not None

    def display_name_for(self, user_id: str) -> str:
        """Display name of a current member, or "Unknown" for anyone else."""
        member = self.find_member(user_id)
        return member.display_name if member else UNKNOWN_MEMBER_NAME


# =============================================================================
# EXPENSES
# =============================================================================

class ExpenseState(str, Enum):
    """
    Lifecycle of a shared expense.

    Single transition ACTIVE -> SETTLED. Nothing leaves SETTLED.
    """
    ACTIVE = "active"
    SETTLED = "settled"


class ExpenseSplit(LedgerRecord):
    """One member's share of a shared expense."""

    user_id: str = Field(..., min_length=1)
    amount: Money = Field(
        ...,
        ge=0,
        description="This member's share"
    )
    settled: bool = False


class SharedExpense(LedgerRecord):
    """
    An expense paid by one member and split among several.

    The split total is NOT required to equal the amount; callers
    supply the splits and the ledger stores them as given.
    Only the settled flags change after creation.
    """

    id: str = Field(..., min_length=1)
    group_id: str = Field(
        ...,
        description="Group this expense belongs to (the group owns its lifecycle)"
    )
    amount: Money = Field(
        ...,
        gt=0,
        description="Total paid"
    )
    description: str
    date: datetime = Field(
        ...,
        description="When the expense happened"
    )
    paid_by: str = Field(
        ...,
        description="user_id of the payer"
    )
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    settled: bool = False
    splits: list[ExpenseSplit] = Field(default_factory=list)

    @property
    def state(self) -> ExpenseState:
        return ExpenseState.SETTLED if self.settled else ExpenseState.ACTIVE

    @property
    def is_active(self) -> bool:
        return not self.settled

    @property
    def split_total(self) -> Decimal:
        return sum((split.amount for split in self.splits), Decimal("0"))


# =============================================================================
# DERIVED MODELS (never stored)
# =============================================================================

class Balance(BaseModel):
    """
    A pairwise debt: user_id owes other_user_id a positive amount.

    Recomputed on demand from the live ledger.
    """

    user_id: str
    other_user_id: str
    amount: Decimal = Field(..., gt=0)


class GroupSummary(BaseModel):
    """Totals shown next to a group's balance list."""

    group_id: str
    total_amount: Decimal = Decimal("0")
    active_total: Decimal = Decimal("0")
    settled_total: Decimal = Decimal("0")
    active_count: int = Field(default=0, ge=0)
    settled_count: int = Field(default=0, ge=0)
    net_balances: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Unsettled paid-minus-owed position per current member"
    )

    @property
    def is_settled_up(self) -> bool:
        return all(amount == 0 for amount in self.net_balances.values())


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single advisory issue found on an expense."""

    field: str
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'split_mismatch', 'non_member')"
    )
    message: str
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
    )


class ValidationResult(BaseModel):
    """
    Result of checking an expense against its group.

    Issues never block a write; they are surfaced for review.
    """

    expense_id: str
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.issues

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "warning")
