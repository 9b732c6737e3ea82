"""
Abstract Record Store Interface

DESIGN DECISION: The ledger talks to a key/value record store that
only knows how to load and save whole collections. This allows us to:
1. Swap the JSON file store for Google Sheets (or a database) later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The contract is deliberately tiny: last write wins on a single save,
no transactions. Read-modify-write sequencing lives in Repository.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any


class Collection(str, Enum):
    """Named collections in the record store."""
    GROUPS = "groups"
    SHARED_EXPENSES = "shared-expenses"


class RecordStore(ABC):
    """
    Abstract interface for collection-level persistence.

    Any storage implementation (in-memory, JSON files, Google Sheets, ...)
    must implement these methods.
    """

    @abstractmethod
    async def load(self, collection: Collection) -> list[dict[str, Any]]:
        """
        Load every record of a collection, in storage order.

        Args:
            collection: Which collection to read

        Returns:
            The stored records, or an empty list if the collection
            has never been written

        Raises:
            StoreUnavailableError: If the backend cannot be reached
            CorruptCollectionError: If the stored payload cannot be parsed
        """
        pass

    @abstractmethod
    async def save(self, collection: Collection, records: list[dict[str, Any]]) -> None:
        """
        Replace a collection with the given records.

        A failed save must leave the previously stored collection intact.

        Args:
            collection: Which collection to write
            records: JSON-serializable records, in order

        Raises:
            StoreUnavailableError: If the write did not complete
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StoreUnavailableError(StorageError):
    """The storage backend could not be read or written."""
    pass


class CorruptCollectionError(StorageError):
    """A stored collection (or a record in it) does not have the expected shape."""
    pass
