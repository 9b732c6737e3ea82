"""
Notification Models for SplitLedger

Every ledger operation reports its outcome on a side channel that the
presentation layer renders (title + description + severity).

DESIGN DECISION: Notifications are advisory. They never change the
return value or control flow of the operation that emitted them.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from splitledger.models.ledger import utc_now


class NotificationSeverity(str, Enum):
    """How the presentation layer should style a notification."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """A single user-facing message."""

    title: str = Field(..., max_length=100)
    description: str = Field(..., max_length=500)
    severity: NotificationSeverity = NotificationSeverity.SUCCESS
    timestamp: datetime = Field(default_factory=utc_now)

    # Context for structured logs; not shown to the user
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "title": self.title,
            "description": self.description,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }


class NotificationBuilder:
    """
    Helper class to build notifications for each ledger event.

    Usage:
        note = NotificationBuilder.group_created(group.id, group.name)
        note = NotificationBuilder.member_already_exists(group_id, user_id)
    """

    @staticmethod
    def group_created(group_id: str, name: str) -> Notification:
        return Notification(
            title="Group created",
            description=f"{name} has been created successfully",
            details={"group_id": group_id},
        )

    @staticmethod
    def group_create_failed(name: str) -> Notification:
        return Notification(
            title="Failed to create group",
            description="There was an error creating your group",
            severity=NotificationSeverity.ERROR,
            details={"name": name},
        )

    @staticmethod
    def member_added(group_id: str, display_name: str) -> Notification:
        return Notification(
            title="Member added",
            description=f"{display_name} has been added to the group",
            details={"group_id": group_id},
        )

    @staticmethod
    def member_already_exists(group_id: str, user_id: str) -> Notification:
        return Notification(
            title="Member already exists",
            description="This user is already a member of the group",
            severity=NotificationSeverity.WARNING,
            details={"group_id": group_id, "user_id": user_id},
        )

    @staticmethod
    def member_add_failed(group_id: str) -> Notification:
        return Notification(
            title="Failed to add member",
            description="There was an error adding the member to your group",
            severity=NotificationSeverity.ERROR,
            details={"group_id": group_id},
        )

    @staticmethod
    def member_removed(group_id: str, display_name: str) -> Notification:
        return Notification(
            title="Member removed",
            description=f"{display_name} has been removed from the group",
            details={"group_id": group_id},
        )

    @staticmethod
    def member_remove_failed(group_id: str) -> Notification:
        return Notification(
            title="Failed to remove member",
            description="There was an error removing the member from your group",
            severity=NotificationSeverity.ERROR,
            details={"group_id": group_id},
        )

    @staticmethod
    def group_deleted(group_id: str, expense_count: int) -> Notification:
        return Notification(
            title="Group deleted",
            description="Group has been deleted successfully",
            details={"group_id": group_id, "expenses_removed": expense_count},
        )

    @staticmethod
    def group_emptied(group_id: str) -> Notification:
        return Notification(
            title="Group deleted",
            description="Group has been deleted as it has no members",
            details={"group_id": group_id},
        )

    @staticmethod
    def group_delete_failed(group_id: str) -> Notification:
        return Notification(
            title="Failed to delete group",
            description="There was an error deleting your group",
            severity=NotificationSeverity.ERROR,
            details={"group_id": group_id},
        )

    @staticmethod
    def expense_added(expense_id: str, group_id: str, amount: str) -> Notification:
        return Notification(
            title="Expense added",
            description="Your shared expense has been added successfully",
            details={"expense_id": expense_id, "group_id": group_id, "amount": amount},
        )

    @staticmethod
    def expense_add_failed(group_id: str) -> Notification:
        return Notification(
            title="Failed to add expense",
            description="There was an error adding your shared expense",
            severity=NotificationSeverity.ERROR,
            details={"group_id": group_id},
        )

    @staticmethod
    def expense_settled(expense_id: str) -> Notification:
        return Notification(
            title="Expense settled",
            description="The expense has been marked as settled",
            details={"expense_id": expense_id},
        )

    @staticmethod
    def expense_settle_failed(expense_id: str) -> Notification:
        return Notification(
            title="Failed to settle expense",
            description="There was an error settling the expense",
            severity=NotificationSeverity.ERROR,
            details={"expense_id": expense_id},
        )
