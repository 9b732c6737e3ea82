"""
Group Registry

Owns groups and their members: creation, membership changes, and
deletion (which cascades to the group's shared expenses).

Outcome policy:
- Unknown group/member ids return None (or the unchanged group), never raise
- Adding a member who is already there is a no-op with a warning notification
- Storage failures on membership changes and deletes are logged, notified,
  and reported as None/False; nothing is partially applied
- Storage failures on create and on reads propagate as StorageError
"""

from typing import Callable, Optional

import structlog

from splitledger.models.ledger import (
    Group,
    GroupMember,
    SharedExpense,
    new_record_id,
    utc_now,
)
from splitledger.models.notification import Notification, NotificationBuilder
from splitledger.notifications import Notifier
from splitledger.services.storage import Repository, StorageError


logger = structlog.get_logger(__name__)


class GroupRegistry:
    """
    Group lifecycle and membership.

    The registry writes to two collections: groups, and (on delete)
    shared expenses. Deleting a group is the only cross-collection write.
    """

    def __init__(
        self,
        groups: Repository[Group],
        expenses: Repository[SharedExpense],
        notifier: Optional[Notifier] = None,
        clock: Callable = utc_now,
    ):
        self._groups = groups
        self._expenses = expenses
        self._notifier = notifier or Notifier()
        self._clock = clock

    async def _notify(self, notification: Notification) -> None:
        await self._notifier.notify(notification)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list_groups_for_user(self, user_id: str) -> list[Group]:
        """Every group whose member list contains user_id, in storage order."""
        return await self._groups.filter(lambda group: group.has_member(user_id))

    async def get_group(self, group_id: str) -> Optional[Group]:
        return await self._groups.find(lambda group: group.id == group_id)

    async def is_member(self, group_id: str, user_id: str) -> bool:
        """Access check: does the group exist and contain this user?"""
        group = await self.get_group(group_id)
        return group is not None and group.has_member(user_id)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create_group(
        self,
        name: str,
        description: Optional[str],
        creator: GroupMember,
    ) -> Group:
        """
        Create a group with the creator as its only member.

        Raises:
            StorageError: If the group could not be saved
        """
        now = self._clock()
        group = Group(
            id=new_record_id("group", now),
            name=name,
            description=description or None,
            created_by=creator.user_id,
            created_at=now,
            updated_at=now,
            members=[creator.model_copy(update={"joined_at": now})],
        )

        try:
            async with self._groups.mutate() as groups:
                groups.append(group)
        except StorageError as e:
            logger.error("group_create_failed", name=name, error=str(e))
            await self._notify(NotificationBuilder.group_create_failed(name))
            raise

        logger.info("group_created", group_id=group.id, created_by=creator.user_id)
        await self._notify(NotificationBuilder.group_created(group.id, group.name))
        return group

    async def add_member(self, group_id: str, member: GroupMember) -> Optional[Group]:
        """
        Add a member to a group.

        Returns:
            The updated group; the unchanged group if the user is already
            a member; None if the group does not exist or the save failed
        """
        try:
            updated = None
            duplicate = False
            async with self._groups.mutate() as groups:
                for group in groups:
                    if group.id != group_id:
                        continue
                    if group.has_member(member.user_id):
                        duplicate = True
                    else:
                        now = self._clock()
                        group.members.append(member.model_copy(update={"joined_at": now}))
                        group.updated_at = now
                    updated = group
                    break
        except StorageError as e:
            logger.error("member_add_failed", group_id=group_id, error=str(e))
            await self._notify(NotificationBuilder.member_add_failed(group_id))
            return None

        if updated is None:
            return None

        if duplicate:
            logger.info("member_already_present", group_id=group_id, user_id=member.user_id)
            await self._notify(NotificationBuilder.member_already_exists(group_id, member.user_id))
        else:
            logger.info("member_added", group_id=group_id, user_id=member.user_id)
            await self._notify(NotificationBuilder.member_added(group_id, member.display_name))
        return updated

    async def remove_member(self, group_id: str, user_id: str) -> Optional[Group]:
        """
        Remove a member from a group.

        Removing the last member deletes the group and its expenses.

        Returns:
            The updated group; the unchanged group if the user was not a
            member; None if the group does not exist, was deleted because
            it became empty, or the save failed
        """
        try:
            group = await self.get_group(group_id)
            if group is None:
                return None

            removed = group.find_member(user_id)
            if removed is None:
                return group

            if len(group.members) == 1:
                await self._delete_cascade(group_id)
                logger.info("group_emptied", group_id=group_id, last_user_id=user_id)
                await self._notify(NotificationBuilder.group_emptied(group_id))
                return None

            updated = None
            async with self._groups.mutate() as groups:
                for candidate in groups:
                    if candidate.id == group_id:
                        candidate.members = [
                            m for m in candidate.members if m.user_id != user_id
                        ]
                        candidate.updated_at = self._clock()
                        updated = candidate
                        break
        except StorageError as e:
            logger.error("member_remove_failed", group_id=group_id, error=str(e))
            await self._notify(NotificationBuilder.member_remove_failed(group_id))
            return None

        if updated is None:
            return None

        logger.info("member_removed", group_id=group_id, user_id=user_id)
        await self._notify(NotificationBuilder.member_removed(group_id, removed.display_name))
        return updated

    async def delete_group(self, group_id: str) -> bool:
        """
        Delete a group and every shared expense tagged with it.

        Returns:
            True if the group existed and was deleted, False otherwise
        """
        try:
            removed_expenses = await self._delete_cascade(group_id)
        except StorageError as e:
            logger.error("group_delete_failed", group_id=group_id, error=str(e))
            await self._notify(NotificationBuilder.group_delete_failed(group_id))
            return False

        if removed_expenses is None:
            return False

        logger.info("group_deleted", group_id=group_id, expenses_removed=removed_expenses)
        await self._notify(NotificationBuilder.group_deleted(group_id, removed_expenses))
        return True

    async def _delete_cascade(self, group_id: str) -> Optional[int]:
        """
        Remove the group, then its expenses, as one logical unit.

        If the expense write fails the groups collection is put back the
        way it was, so callers never see a group without its expenses or
        expenses without their group.

        Returns the number of expenses removed, or None if the group
        did not exist.
        """
        groups_before = await self._groups.snapshot()

        found = False
        async with self._groups.mutate() as groups:
            kept = [group for group in groups if group.id != group_id]
            found = len(kept) != len(groups)
            groups[:] = kept

        if not found:
            return None

        try:
            # Unreadable expense records still carry their group id
            def tagged(raw) -> bool:
                return isinstance(raw, dict) and raw.get("groupId") == group_id

            async with self._expenses.mutate(drop_rejected=tagged) as expenses:
                kept_expenses = [e for e in expenses if e.group_id != group_id]
                removed = len(expenses) - len(kept_expenses)
                expenses[:] = kept_expenses
        except StorageError:
            logger.error("group_delete_rolled_back", group_id=group_id)
            await self._groups.restore(groups_before)
            raise

        return removed
