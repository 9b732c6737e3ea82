"""
Expense Ledger

Records shared expenses and settles them.

An expense is created ACTIVE with caller-supplied splits and can only
move to SETTLED. Settling flips the expense and all of its splits in one
save. Nothing in the ledger un-settles an expense.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

import structlog

from splitledger.models.ledger import (
    ExpenseSplit,
    Group,
    SharedExpense,
    new_record_id,
    utc_now,
)
from splitledger.models.notification import NotificationBuilder
from splitledger.notifications import Notifier
from splitledger.services.storage import Repository, StorageError
from splitledger.validation import ExpenseValidator


logger = structlog.get_logger(__name__)


def build_equal_splits(amount: Decimal, member_ids: list[str]) -> list[ExpenseSplit]:
    """
    Divide an amount equally across members.

    This is the default split policy for a new expense. The shares are
    not rounded, so they always add back up to the amount.
    """
    if not member_ids:
        raise ValueError("Cannot split an expense across zero members")

    share = Decimal(amount) / len(member_ids)
    return [
        ExpenseSplit(user_id=user_id, amount=share, settled=False)
        for user_id in member_ids
    ]


class ExpenseLedger:
    """Shared expense records for every group."""

    def __init__(
        self,
        expenses: Repository[SharedExpense],
        groups: Optional[Repository[Group]] = None,
        notifier: Optional[Notifier] = None,
        validator: Optional[ExpenseValidator] = None,
        clock: Callable = utc_now,
    ):
        """
        Args:
            expenses: Shared-expenses repository
            groups: Groups repository, used only for advisory validation.
                    If None, membership checks are skipped.
            notifier: Notification side channel (log-only if None)
            validator: Advisory validator (built from settings if None)
        """
        self._expenses = expenses
        self._groups = groups
        self._notifier = notifier or Notifier()
        self._validator = validator or ExpenseValidator()
        self._clock = clock

    async def add_expense(
        self,
        group_id: str,
        amount: Decimal,
        description: str,
        date: datetime,
        paid_by: str,
        splits: list[ExpenseSplit],
    ) -> SharedExpense:
        """
        Record a new, unsettled expense.

        Splits are stored exactly as given; they are not recomputed and
        not required to add up to the amount.

        Raises:
            StorageError: If the expense could not be saved
        """
        now = self._clock()
        expense = SharedExpense(
            id=new_record_id("exp", now),
            group_id=group_id,
            amount=amount,
            description=description,
            date=date,
            paid_by=paid_by,
            created_at=now,
            updated_at=now,
            settled=False,
            splits=[split.model_copy() for split in splits],
        )

        await self._log_validation(expense)

        try:
            async with self._expenses.mutate() as expenses:
                expenses.append(expense)
        except StorageError as e:
            logger.error("expense_add_failed", group_id=group_id, error=str(e))
            await self._notifier.notify(NotificationBuilder.expense_add_failed(group_id))
            raise

        # Hand back what a later read will return
        expense = SharedExpense.from_record(expense.to_record())

        logger.info(
            "expense_added",
            expense_id=expense.id,
            group_id=group_id,
            amount=str(expense.amount),
            split_count=len(expense.splits),
        )
        await self._notifier.notify(
            NotificationBuilder.expense_added(expense.id, group_id, str(expense.amount))
        )
        return expense

    async def _log_validation(self, expense: SharedExpense) -> None:
        if self._groups is None:
            return

        try:
            group = await self._groups.find(lambda g: g.id == expense.group_id)
        except StorageError as e:
            # Advisory only; the write itself surfaces storage trouble
            logger.warning("expense_validation_skipped", error=str(e))
            return

        result = self._validator.validate(expense, group)
        for issue in result.issues:
            logger.warning(
                "expense_validation_issue",
                expense_id=expense.id,
                field=issue.field,
                issue_type=issue.issue_type,
                message=issue.message,
            )

    async def get_group_expenses(self, group_id: str) -> list[SharedExpense]:
        """Every expense of the group, settled or not, in storage order."""
        return await self._expenses.filter(lambda expense: expense.group_id == group_id)

    async def get_expense(self, expense_id: str) -> Optional[SharedExpense]:
        return await self._expenses.find(lambda expense: expense.id == expense_id)

    async def settle_expense(self, expense_id: str) -> Optional[SharedExpense]:
        """
        Mark an expense and all of its splits as settled.

        Settling an already settled expense is harmless; it stays settled.

        Returns:
            The settled expense, or None if the id is unknown or the save failed
        """
        try:
            settled = None
            async with self._expenses.mutate() as expenses:
                for expense in expenses:
                    if expense.id == expense_id:
                        expense.settled = True
                        expense.splits = [
                            split.model_copy(update={"settled": True})
                            for split in expense.splits
                        ]
                        expense.updated_at = self._clock()
                        settled = expense
                        break
        except StorageError as e:
            logger.error("expense_settle_failed", expense_id=expense_id, error=str(e))
            await self._notifier.notify(NotificationBuilder.expense_settle_failed(expense_id))
            return None

        if settled is None:
            return None

        logger.info("expense_settled", expense_id=expense_id, group_id=settled.group_id)
        await self._notifier.notify(NotificationBuilder.expense_settled(expense_id))
        return settled
