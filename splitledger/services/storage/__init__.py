"""
Storage Services Package

Provides the record store interface, a typed repository over it, and
concrete stores (in-memory, JSON files, Google Sheets). Designed to be swappable.
"""

from splitledger.services.storage.interface import (
    Collection,
    CorruptCollectionError,
    RecordStore,
    StorageError,
    StoreUnavailableError,
)
from splitledger.services.storage.repository import Repository
from splitledger.services.storage.memory import InMemoryRecordStore
from splitledger.services.storage.json_file import JsonFileRecordStore
from splitledger.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
)

__all__ = [
    # Interfaces
    "Collection",
    "RecordStore",
    "Repository",
    # Exceptions
    "CorruptCollectionError",
    "StorageError",
    "StoreUnavailableError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
]
