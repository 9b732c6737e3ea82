"""Tests for the advisory ExpenseValidator."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from splitledger.models import ExpenseSplit, Group, GroupMember, SharedExpense
from splitledger.validation import ExpenseValidator


DATE = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def group() -> Group:
    return Group(
        id="g",
        name="Flat",
        created_by="u1",
        members=[
            GroupMember(user_id="u1", display_name="Asha"),
            GroupMember(user_id="u2", display_name="Ben"),
        ],
    )


def _expense(amount="20", paid_by="u1", splits=(("u1", "10"), ("u2", "10"))) -> SharedExpense:
    return SharedExpense(
        id="exp-1",
        group_id="g",
        amount=Decimal(amount),
        description="Power",
        date=DATE,
        paid_by=paid_by,
        splits=[ExpenseSplit(user_id=u, amount=Decimal(a)) for u, a in splits],
    )


class TestExpenseValidator:
    """Tests for ExpenseValidator.validate."""

    def test_clean_expense(self, group):
        result = ExpenseValidator(Decimal("0.01")).validate(_expense(), group)
        assert result.is_clean
        assert result.expense_id == "exp-1"

    def test_split_mismatch(self, group):
        result = ExpenseValidator(Decimal("0.01")).validate(_expense(amount="25"), group)
        assert [i.issue_type for i in result.issues] == ["split_mismatch"]
        assert result.warning_count == 1

    def test_mismatch_within_tolerance(self, group):
        expense = _expense(amount="20.00", splits=(("u1", "6.67"), ("u2", "13.33")))
        assert ExpenseValidator(Decimal("0.01")).validate(expense, group).is_clean

    def test_empty_splits(self, group):
        result = ExpenseValidator(Decimal("0.01")).validate(_expense(splits=()), group)
        assert [i.issue_type for i in result.issues] == ["empty"]

    def test_non_member_payer_and_split_owner(self, group):
        expense = _expense(paid_by="gone", splits=(("u1", "10"), ("ghost", "10")))
        result = ExpenseValidator(Decimal("0.01")).validate(expense, group)
        assert [(i.field, i.issue_type) for i in result.issues] == [
            ("paid_by", "non_member"),
            ("splits", "non_member"),
        ]

    def test_unknown_group(self):
        result = ExpenseValidator(Decimal("0.01")).validate(_expense(), None)
        assert [i.issue_type for i in result.issues] == ["unknown_group"]

    def test_issues_are_never_errors(self, group):
        expense = _expense(amount="99", paid_by="gone", splits=(("ghost", "1"),))
        result = ExpenseValidator(Decimal("0.01")).validate(expense, group)
        assert result.issues
        assert all(issue.severity == "warning" for issue in result.issues)

    def test_default_tolerance_from_settings(self, group):
        validator = ExpenseValidator()
        expense = _expense(amount="20.005")
        assert validator.validate(expense, group).is_clean


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
