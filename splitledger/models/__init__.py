"""
Data Models Package

This package contains all Pydantic models used in SplitLedger.
Every record read from or written to the record store conforms to these schemas.
"""

from splitledger.models.ledger import (
    Balance,
    ExpenseSplit,
    ExpenseState,
    Group,
    GroupMember,
    GroupSummary,
    LedgerRecord,
    Money,
    SharedExpense,
    UNKNOWN_MEMBER_NAME,
    new_record_id,
    ValidationIssue,
    ValidationResult,
    utc_now,
)
from splitledger.models.notification import (
    Notification,
    NotificationBuilder,
    NotificationSeverity,
)

__all__ = [
    # Ledger models
    "Balance",
    "ExpenseSplit",
    "ExpenseState",
    "Group",
    "GroupMember",
    "GroupSummary",
    "LedgerRecord",
    "Money",
    "SharedExpense",
    "UNKNOWN_MEMBER_NAME",
    "new_record_id",
    "ValidationIssue",
    "ValidationResult",
    "utc_now",
    # Notification models
    "Notification",
    "NotificationBuilder",
    "NotificationSeverity",
]
