"""Tests for GroupRegistry."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from conftest import TickingClock, make_member, run
from splitledger.ledger import ExpenseLedger, build_equal_splits
from splitledger.models import Group, NotificationSeverity, SharedExpense
from splitledger.registry import GroupRegistry
from splitledger.services.storage import Collection, Repository


DATE = datetime(2024, 6, 1, tzinfo=timezone.utc)


async def _group_with(registry, *user_ids) -> Group:
    group = await registry.create_group("Flat", "Shared flat costs", make_member(user_ids[0]))
    for user_id in user_ids[1:]:
        group = await registry.add_member(group.id, make_member(user_id))
    return group


class TestCreateAndRead:
    """Tests for create_group and the read operations."""

    def test_create_group_seeds_creator(self, registry, notifications):
        group = run(registry.create_group("Trip", "Lisbon", make_member("u1", "Asha")))

        assert group.id.startswith("group-")
        assert group.created_by == "u1"
        assert group.member_ids == ["u1"]
        assert group.created_at == group.updated_at
        assert group.members[0].joined_at == group.created_at
        assert notifications[-1].title == "Group created"

    def test_created_group_is_persisted(self, registry):
        group = run(registry.create_group("Trip", None, make_member("u1")))
        loaded = run(registry.get_group(group.id))
        assert loaded == group

    def test_empty_description_is_stored_as_none(self, registry):
        group = run(registry.create_group("Trip", "", make_member("u1")))
        assert group.description is None

    def test_group_ids_are_unique(self, registry):
        ids = {run(registry.create_group(f"G{i}", None, make_member("u1"))).id for i in range(5)}
        assert len(ids) == 5

    def test_get_unknown_group(self, registry):
        assert run(registry.get_group("group-missing")) is None

    def test_list_groups_for_user(self, registry):
        first = run(_group_with(registry, "u1", "u2"))
        second = run(_group_with(registry, "u2", "u3"))
        run(_group_with(registry, "u3"))

        groups = run(registry.list_groups_for_user("u2"))
        assert [g.id for g in groups] == [first.id, second.id]
        assert run(registry.list_groups_for_user("nobody")) == []

    def test_is_member(self, registry):
        group = run(_group_with(registry, "u1", "u2"))
        assert run(registry.is_member(group.id, "u2")) is True
        assert run(registry.is_member(group.id, "u9")) is False
        assert run(registry.is_member("group-missing", "u1")) is False


class TestMembership:
    """Tests for add_member and remove_member."""

    def test_add_member(self, registry, notifications):
        group = run(_group_with(registry, "u1"))
        updated = run(registry.add_member(group.id, make_member("u2", "Ben")))

        assert updated.member_ids == ["u1", "u2"]
        assert notifications[-1].description == "Ben has been added to the group"
        assert run(registry.get_group(group.id)).member_ids == ["u1", "u2"]

    def test_add_member_stamps_joined_at_and_updated_at(self, store):
        clock = TickingClock()
        groups = Repository(store, Collection.GROUPS, Group)
        expenses = Repository(store, Collection.SHARED_EXPENSES, SharedExpense)
        registry = GroupRegistry(groups, expenses, clock=clock)

        group = run(registry.create_group("Trip", None, make_member("u1")))
        updated = run(registry.add_member(group.id, make_member("u2")))

        assert updated.updated_at > group.updated_at
        assert updated.members[1].joined_at == updated.updated_at

    def test_duplicate_add_is_a_no_op(self, registry, store, notifications):
        group = run(_group_with(registry, "u1", "u2"))
        saves_before = len(store.save_calls)

        first = run(registry.add_member(group.id, make_member("u2", "Someone else")))
        second = run(registry.add_member(group.id, make_member("u2")))

        assert first == group
        assert second == group
        assert run(registry.get_group(group.id)).member_ids == ["u1", "u2"]
        assert len(store.save_calls) == saves_before
        assert notifications[-1].severity == NotificationSeverity.WARNING
        assert notifications[-1].title == "Member already exists"

    def test_add_member_to_unknown_group(self, registry):
        assert run(registry.add_member("group-missing", make_member("u1"))) is None

    def test_remove_member(self, registry, notifications):
        group = run(_group_with(registry, "u1", "u2", "u3"))
        updated = run(registry.remove_member(group.id, "u2"))

        assert updated.member_ids == ["u1", "u3"]
        assert run(registry.get_group(group.id)).member_ids == ["u1", "u3"]
        assert notifications[-1].title == "Member removed"

    def test_remove_unknown_member_returns_group_unchanged(self, registry):
        group = run(_group_with(registry, "u1", "u2"))
        assert run(registry.remove_member(group.id, "u9")) == group

    def test_remove_member_from_unknown_group(self, registry):
        assert run(registry.remove_member("group-missing", "u1")) is None

    def test_removing_last_member_deletes_group_and_expenses(self, registry, ledger, notifications):
        group = run(_group_with(registry, "u1"))
        run(ledger.add_expense(
            group.id, Decimal("20"), "Taxi", DATE, "u1",
            build_equal_splits(Decimal("20"), ["u1"]),
        ))

        assert run(registry.remove_member(group.id, "u1")) is None
        assert run(registry.get_group(group.id)) is None
        assert run(ledger.get_group_expenses(group.id)) == []
        assert notifications[-1].description == "Group has been deleted as it has no members"

    def test_removing_everyone_one_by_one(self, registry, ledger):
        group = run(_group_with(registry, "u1", "u2", "u3"))
        other = run(_group_with(registry, "u1", "u2"))
        for payer in ("u1", "u2"):
            run(ledger.add_expense(
                group.id, Decimal("30"), "Food", DATE, payer,
                build_equal_splits(Decimal("30"), group.member_ids),
            ))
        kept = run(ledger.add_expense(
            other.id, Decimal("10"), "Coffee", DATE, "u1",
            build_equal_splits(Decimal("10"), other.member_ids),
        ))

        for user_id in ("u3", "u1", "u2"):
            run(registry.remove_member(group.id, user_id))

        assert run(registry.get_group(group.id)) is None
        assert run(ledger.get_group_expenses(group.id)) == []
        assert run(ledger.get_group_expenses(other.id)) == [kept]


class TestDeleteGroup:
    """Tests for delete_group cascade."""

    def test_delete_group_cascades(self, registry, ledger, notifications):
        group = run(_group_with(registry, "u1", "u2"))
        other = run(_group_with(registry, "u1"))
        run(ledger.add_expense(group.id, Decimal("10"), "A", DATE, "u1", []))
        run(ledger.add_expense(group.id, Decimal("20"), "B", DATE, "u2", []))
        kept = run(ledger.add_expense(other.id, Decimal("5"), "C", DATE, "u1", []))

        assert run(registry.delete_group(group.id)) is True
        assert run(registry.get_group(group.id)) is None
        assert run(ledger.get_group_expenses(group.id)) == []
        assert run(ledger.get_group_expenses(other.id)) == [kept]
        assert notifications[-1].details["expenses_removed"] == 2

    def test_delete_group_removes_unreadable_expenses_of_group(self, registry, ledger, store):
        """Expense records that fail validation are still cascaded by groupId."""
        group = run(_group_with(registry, "u1"))
        other = run(_group_with(registry, "u1"))
        run(ledger.add_expense(group.id, Decimal("10"), "A", DATE, "u1", []))

        raw = run(store.load(Collection.SHARED_EXPENSES))
        broken = {
            "id": "exp-broken",
            "groupId": group.id,
            "amount": 10,
            "splits": [{"userId": "u1", "amount": -5}],
        }
        unrelated = dict(broken, id="exp-other", groupId=other.id)
        run(store.save(Collection.SHARED_EXPENSES, raw + [broken, unrelated]))

        assert run(registry.delete_group(group.id)) is True

        remaining = run(store.load(Collection.SHARED_EXPENSES))
        assert [r["id"] for r in remaining] == ["exp-other"]

    def test_delete_unknown_group(self, registry, store):
        assert run(registry.delete_group("group-missing")) is False
        assert store.save_calls == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
