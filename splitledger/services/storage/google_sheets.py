"""
Google Sheets Record Store

DESIGN DECISION: Google Sheets is offered as a shared backend because:
1. Several people in a group can look at the ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (fine for household groups)
- No transactions (the repository and registry order writes carefully)
- Whole-collection reads and writes only

Each collection is one worksheet with an ``id`` column and a
``record_json`` column holding the serialized record.
"""

import json
from typing import Any, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from splitledger.config import GoogleSheetsSettings, get_settings
from splitledger.services.storage.interface import (
    Collection,
    CorruptCollectionError,
    RecordStore,
    StorageError,
    StoreUnavailableError,
)


SHEET_COLUMNS = ["id", "record_json"]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StoreUnavailableError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StoreUnavailableError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StoreUnavailableError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def sheet_name_for(self, collection: Collection) -> str:
        if collection == Collection.GROUPS:
            return self._settings.groups_sheet_name
        return self._settings.expenses_sheet_name

    def get_collection_sheet(self, collection: Collection) -> gspread.Worksheet:
        """Get or create the worksheet backing a collection."""
        spreadsheet = self.get_spreadsheet()
        title = self.sheet_name_for(collection)
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(SHEET_COLUMNS),
            )
            sheet.append_row(SHEET_COLUMNS)
        return sheet


class GoogleSheetsRecordStore(RecordStore):
    """
    Google Sheets implementation of the record store.

    Records are stored one per row, JSON-serialized.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _record_to_row(self, record: Any) -> list[str]:
        record_id = record.get("id", "") if isinstance(record, dict) else ""
        return [str(record_id), json.dumps(record)]

    def _row_to_record(self, row: list, row_number: int) -> Any:
        try:
            return json.loads(row[1])
        except (IndexError, json.JSONDecodeError) as e:
            raise CorruptCollectionError(f"Row {row_number} is not a JSON record: {e}")

    async def load(self, collection: Collection) -> list[dict[str, Any]]:
        """Read every non-empty row of the collection's worksheet."""
        try:
            sheet = self._client.get_collection_sheet(collection)
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to load {collection.value}: {e}")

        records = []
        for row_number, row in enumerate(all_rows, start=2):
            if not row or len(row) < 2 or not row[1]:  # Skip empty rows
                continue
            records.append(self._row_to_record(row, row_number))
        return records

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def save(self, collection: Collection, records: list[dict[str, Any]]) -> None:
        """
        Replace the worksheet contents.

        The whole previously used range is overwritten by a single update,
        blank-padded where the collection shrank, so a failed save leaves
        the old contents in place.
        """
        try:
            sheet = self._client.get_collection_sheet(collection)
            previous_rows = len(sheet.get_all_values())
            values = [SHEET_COLUMNS] + [self._record_to_row(r) for r in records]
            values.extend([["", ""]] * (previous_rows - len(values)))

            # values.update does not grow the grid
            if len(values) > sheet.row_count:
                sheet.resize(rows=len(values))

            sheet.update(range_name="A1", values=values, value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to save {collection.value}: {e}")
