"""
Shared fixtures for SplitLedger tests.

Test strategy:
1. Unit tests for models and the pure balance functions
2. Component tests for registry/ledger/engine over the in-memory store
3. Failure tests with a store that can be told to fail
4. No real Google API calls (use mocks)
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from splitledger.models import GroupMember, Notification
from splitledger.orchestrator import create_app_components
from splitledger.services.storage import (
    Collection,
    InMemoryRecordStore,
    StoreUnavailableError,
)


def run(coro):
    """Drive a coroutine to completion."""
    return asyncio.run(coro)


class FlakyRecordStore(InMemoryRecordStore):
    """In-memory store whose loads/saves can be made to fail per collection."""

    def __init__(self):
        super().__init__()
        self.fail_saves: set[Collection] = set()
        self.fail_loads: set[Collection] = set()
        self.save_calls: list[Collection] = []

    async def load(self, collection: Collection) -> list[dict[str, Any]]:
        if collection in self.fail_loads:
            raise StoreUnavailableError(f"load of {collection.value} failed")
        return await super().load(collection)

    async def save(self, collection: Collection, records: list[dict[str, Any]]) -> None:
        self.save_calls.append(collection)
        if collection in self.fail_saves:
            raise StoreUnavailableError(f"save of {collection.value} failed")
        await super().save(collection, records)


class TickingClock:
    """Clock that moves forward one second per call."""

    def __init__(self, start: datetime = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)):
        self._now = start

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


def make_member(user_id: str, name: str = None) -> GroupMember:
    return GroupMember(user_id=user_id, display_name=name or user_id.upper())


@pytest.fixture
def store() -> FlakyRecordStore:
    return FlakyRecordStore()


@pytest.fixture
def notifications() -> list[Notification]:
    return []


@pytest.fixture
def components(store, notifications):
    return create_app_components(store=store, sink=notifications.append)


@pytest.fixture
def registry(components):
    return components[0]


@pytest.fixture
def ledger(components):
    return components[1]


@pytest.fixture
def engine(components):
    return components[2]
