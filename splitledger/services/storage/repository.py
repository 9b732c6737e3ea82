"""
Typed Repository over one record store collection

Wraps the "load whole collection, mutate, save whole collection"
pattern so callers never touch raw dicts or collection names.

Records are validated on load. Records that fail validation are either
skipped (and written back untouched on the next save, so nothing stored
is lost) or raised as CorruptCollectionError, depending on policy.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Generic, Literal, Optional, TypeVar

import structlog
from pydantic import ValidationError

from splitledger.models.ledger import LedgerRecord
from splitledger.services.storage.interface import (
    Collection,
    CorruptCollectionError,
    RecordStore,
)


T = TypeVar("T", bound=LedgerRecord)

logger = structlog.get_logger(__name__)


class Repository(Generic[T]):
    """
    One collection, one record type.

    Usage:
        groups = Repository(store, Collection.GROUPS, Group)
        async with groups.mutate() as records:
            records.append(new_group)
    """

    def __init__(
        self,
        store: RecordStore,
        collection: Collection,
        model: type[T],
        invalid_record_policy: Literal["skip", "raise"] = "skip",
    ):
        self._store = store
        self._collection = collection
        self._model = model
        self._policy = invalid_record_policy

    @property
    def collection(self) -> Collection:
        return self._collection

    async def _load(self) -> tuple[list[T], list[Any]]:
        """Load and validate. Returns (valid records, raw rejected records)."""
        raw_records = await self._store.load(self._collection)

        records: list[T] = []
        rejected: list[Any] = []
        for index, raw in enumerate(raw_records):
            try:
                records.append(self._model.from_record(raw))
            except ValidationError as e:
                if self._policy == "raise":
                    raise CorruptCollectionError(
                        f"Invalid record at index {index} in {self._collection.value}: {e}"
                    ) from e
                logger.warning(
                    "invalid_record_skipped",
                    collection=self._collection.value,
                    index=index,
                    error_count=e.error_count(),
                )
                rejected.append(raw)
        return records, rejected

    def _serialize(self, records: list[T], rejected: list[Any]) -> list[Any]:
        payload = [record.to_record() for record in records]
        # Skipped records are kept as-is
        payload.extend(rejected)
        return payload

    async def all(self) -> list[T]:
        """Every valid record, in storage order."""
        records, _ = await self._load()
        return records

    async def find(self, predicate: Callable[[T], bool]) -> Optional[T]:
        """First record matching the predicate, or None."""
        for record in await self.all():
            if predicate(record):
                return record
        return None

    async def filter(self, predicate: Callable[[T], bool]) -> list[T]:
        return [record for record in await self.all() if predicate(record)]

    @asynccontextmanager
    async def mutate(
        self,
        drop_rejected: Optional[Callable[[Any], bool]] = None,
    ) -> AsyncIterator[list[T]]:
        """
        Read-modify-write in one block.

        The yielded list may be mutated freely (append, remove, edit in
        place). It is saved once when the block exits cleanly and something
        changed; if the block raises, nothing is written.

        Args:
            drop_rejected: Predicate over raw records that failed validation.
                           Matching ones are removed on save instead of being
                           written back.
        """
        records, rejected = await self._load()
        before = self._serialize(records, rejected)
        yield records

        if drop_rejected is not None:
            kept = [raw for raw in rejected if not drop_rejected(raw)]
            if len(kept) != len(rejected):
                logger.info(
                    "invalid_records_dropped",
                    collection=self._collection.value,
                    count=len(rejected) - len(kept),
                )
            rejected = kept

        after = self._serialize(records, rejected)
        if after != before:
            await self._store.save(self._collection, after)

    async def snapshot(self) -> list[dict[str, Any]]:
        """Raw stored payload, for restoring after a failed multi-collection write."""
        return await self._store.load(self._collection)

    async def restore(self, raw_records: list[dict[str, Any]]) -> None:
        await self._store.save(self._collection, raw_records)
