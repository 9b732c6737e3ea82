"""
In-memory record store.

Used for tests and as the default backend. Records are deep-copied on
the way in and out so no caller can alias stored state.
"""

import copy
from typing import Any, Optional

from splitledger.services.storage.interface import Collection, RecordStore


class InMemoryRecordStore(RecordStore):
    """Dict-backed store keyed by collection."""

    def __init__(self, initial: Optional[dict[Collection, list[dict[str, Any]]]] = None):
        self._collections: dict[Collection, list[dict[str, Any]]] = {}
        for collection, records in (initial or {}).items():
            self._collections[Collection(collection)] = copy.deepcopy(records)

    async def load(self, collection: Collection) -> list[dict[str, Any]]:
        return copy.deepcopy(self._collections.get(collection, []))

    async def save(self, collection: Collection, records: list[dict[str, Any]]) -> None:
        self._collections[collection] = copy.deepcopy(records)
