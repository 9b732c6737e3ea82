"""
Advisory Expense Validation

The ledger stores caller-supplied splits as given. It never rejects an
expense because the splits do not add up or because someone is not in
the group. This validator reports those situations so they show up
in logs and can be surfaced for review.

IMPORTANT: Validation NEVER silently fixes issues and never blocks a write.
"""

from decimal import Decimal
from typing import Optional

from splitledger.config import get_settings
from splitledger.models.ledger import (
    Group,
    SharedExpense,
    ValidationIssue,
    ValidationResult,
)


class ExpenseValidator:
    """Checks a shared expense against its group."""

    def __init__(self, split_tolerance: Optional[Decimal] = None):
        """
        Args:
            split_tolerance: Allowed gap between amount and split total.
                             Defaults to the configured ledger tolerance.
        """
        if split_tolerance is None:
            split_tolerance = get_settings().ledger.split_tolerance
        self._tolerance = split_tolerance

    def validate(self, expense: SharedExpense, group: Optional[Group]) -> ValidationResult:
        issues = []

        if not expense.splits:
            issues.append(ValidationIssue(
                field="splits",
                issue_type="empty",
                message="Expense has no splits; nobody owes anything for it",
                severity="warning",
            ))
        else:
            gap = abs(expense.split_total - expense.amount)
            if gap > self._tolerance:
                issues.append(ValidationIssue(
                    field="splits",
                    issue_type="split_mismatch",
                    message=(
                        f"Splits add up to {expense.split_total} "
                        f"but the expense amount is {expense.amount}"
                    ),
                    severity="warning",
                ))

        if group is None:
            issues.append(ValidationIssue(
                field="group_id",
                issue_type="unknown_group",
                message=f"Group {expense.group_id} does not exist",
                severity="warning",
            ))
            return ValidationResult(expense_id=expense.id, issues=issues)

        if not group.has_member(expense.paid_by):
            issues.append(ValidationIssue(
                field="paid_by",
                issue_type="non_member",
                message=f"Payer {expense.paid_by} is not a current member; their credit is ignored in balances",
                severity="warning",
            ))

        for split in expense.splits:
            if not group.has_member(split.user_id):
                issues.append(ValidationIssue(
                    field="splits",
                    issue_type="non_member",
                    message=f"Split owner {split.user_id} is not a current member; their share is ignored in balances",
                    severity="warning",
                ))

        return ValidationResult(expense_id=expense.id, issues=issues)
