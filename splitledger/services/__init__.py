"""Services package."""

from splitledger.services.storage import (
    Collection,
    CorruptCollectionError,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordStore,
    Repository,
    StorageError,
    StoreUnavailableError,
)

__all__ = [
    "Collection",
    "CorruptCollectionError",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "RecordStore",
    "Repository",
    "StorageError",
    "StoreUnavailableError",
]
