"""
Balance Engine

Derives who owes whom inside a group from its unsettled expenses.

Two steps:
1. Net balances: for every current member, paid minus owed across all
   unsettled expenses. Payers and split owners who are no longer members
   contribute nothing.
2. Pairwise reduction: for every pair (A before B in member order),
   delta = net[A] - net[B]. A positive delta means B owes A delta / 2;
   a negative delta means A owes B -delta / 2; zero means no entry.

The halving is the established tie-break and existing figures depend on
it. There is no chaining of debts through third parties.

Balances are never stored; they are recomputed on every call.
"""

from decimal import Decimal
from typing import Iterable, Optional

from splitledger.ledger import ExpenseLedger
from splitledger.models.ledger import Balance, Group, GroupSummary, SharedExpense
from splitledger.registry import GroupRegistry


ZERO = Decimal("0")


def compute_net_balances(group: Group, expenses: Iterable[SharedExpense]) -> dict[str, Decimal]:
    """Paid-minus-owed per current member over the unsettled expenses."""
    net = {user_id: ZERO for user_id in group.member_ids}

    for expense in expenses:
        if expense.settled:
            continue

        if expense.paid_by in net:
            net[expense.paid_by] += expense.amount

        for split in expense.splits:
            if split.user_id in net:
                net[split.user_id] -= split.amount

    return net


def reduce_pairwise(member_ids: list[str], net: dict[str, Decimal]) -> list[Balance]:
    """Turn net balances into at most one debt per pair of members."""
    balances = []

    for i, first in enumerate(member_ids):
        for second in member_ids[i + 1:]:
            delta = net.get(first, ZERO) - net.get(second, ZERO)

            if delta > 0:
                balances.append(Balance(
                    user_id=second,
                    other_user_id=first,
                    amount=delta / 2,
                ))
            elif delta < 0:
                balances.append(Balance(
                    user_id=first,
                    other_user_id=second,
                    amount=-delta / 2,
                ))

    return balances


class BalanceEngine:
    """Reads a group and its expenses and derives balances and totals."""

    def __init__(self, registry: GroupRegistry, ledger: ExpenseLedger):
        self._registry = registry
        self._ledger = ledger

    async def _load(self, group_id: str) -> tuple[Optional[Group], list[SharedExpense]]:
        group = await self._registry.get_group(group_id)
        if group is None:
            return None, []
        expenses = await self._ledger.get_group_expenses(group_id)
        return group, expenses

    async def net_balances(self, group_id: str) -> dict[str, Decimal]:
        group, expenses = await self._load(group_id)
        if group is None:
            return {}
        return compute_net_balances(group, expenses)

    async def calculate_balances(self, group_id: str) -> list[Balance]:
        """
        Outstanding pairwise balances for a group.

        Returns an empty list for an unknown group or a settled-up one.
        """
        group, expenses = await self._load(group_id)
        if group is None:
            return []

        net = compute_net_balances(group, expenses)
        return reduce_pairwise(group.member_ids, net)

    async def summarize_group(self, group_id: str) -> Optional[GroupSummary]:
        """Totals and net positions for a group, or None if it does not exist."""
        group, expenses = await self._load(group_id)
        if group is None:
            return None

        summary = GroupSummary(
            group_id=group_id,
            net_balances=compute_net_balances(group, expenses),
        )
        for expense in expenses:
            summary.total_amount += expense.amount
            if expense.settled:
                summary.settled_total += expense.amount
                summary.settled_count += 1
            else:
                summary.active_total += expense.amount
                summary.active_count += 1
        return summary
