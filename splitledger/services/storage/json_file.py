"""
JSON File Record Store

One ``<collection>.json`` file per collection in a data directory,
mirroring the browser key/value layout the ledger was first built on.

Writes go to a temporary file in the same directory that is then
atomically renamed over the old one, so a failed save never leaves a
half-written collection behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from splitledger.config import get_settings
from splitledger.services.storage.interface import (
    Collection,
    CorruptCollectionError,
    RecordStore,
    StoreUnavailableError,
)


class JsonFileRecordStore(RecordStore):
    """File-per-collection JSON store with atomic replace on save."""

    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        self._data_dir = Path(data_dir or get_settings().storage.data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, collection: Collection) -> Path:
        return self._data_dir / f"{collection.value}.json"

    @retry(
        retry=retry_if_exception_type(StoreUnavailableError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    async def load(self, collection: Collection) -> list[dict[str, Any]]:
        path = self.path_for(collection)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StoreUnavailableError(f"Failed to read {path}: {e}")

        try:
            records = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptCollectionError(f"{path} is not valid JSON: {e}")

        if not isinstance(records, list):
            raise CorruptCollectionError(
                f"{path} must hold a JSON list, found {type(records).__name__}"
            )
        return records

    @retry(
        retry=retry_if_exception_type(StoreUnavailableError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    async def save(self, collection: Collection, records: list[dict[str, Any]]) -> None:
        path = self.path_for(collection)
        try:
            payload = json.dumps(records, indent=2)
        except (TypeError, ValueError) as e:
            raise CorruptCollectionError(f"Records for {collection.value} are not JSON-serializable: {e}")

        tmp_name = None
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir,
                prefix=f".{collection.value}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise StoreUnavailableError(f"Failed to write {path}: {e}")
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
