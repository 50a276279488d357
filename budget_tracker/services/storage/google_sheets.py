"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the production backend because:
1. The user can view and fix their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (TableTransaction compensates on failure)
- Limited query capabilities (we read whole tables and filter in Python)

Row positions map to sheet rows as `position + 2`: sheet rows are
1-based and row 1 holds the header.
"""

from typing import Optional

import gspread
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from budget_tracker.config import GoogleSheetsSettings, get_settings
from budget_tracker.services.storage.interface import (
    ConnectionError,
    NotFoundError,
    StorageError,
    TableSchema,
    TableStoreInterface,
    build_table_schemas,
)


HEADER_ROWS = 1
NEW_SHEET_ROWS = 1000


def _sheet_row(position: int) -> int:
    """Convert a 0-based data position into a 1-based sheet row."""
    return position + HEADER_ROWS + 1


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    Worksheets are looked up once and cached.
    """

    def __init__(
        self,
        settings: Optional[GoogleSheetsSettings] = None,
        schemas: Optional[dict[str, TableSchema]] = None,
    ):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets
        self._schemas = schemas if schemas is not None else build_table_schemas()
        self._titles = self._settings.table_names()
        self._worksheets: dict[str, gspread.Worksheet] = {}

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
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

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
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def title_for(self, name: str) -> str:
        """Sheet title for a logical table name."""
        return self._titles.get(name, name)

    def find_worksheet(self, name: str) -> Optional[gspread.Worksheet]:
        """Get a worksheet if it exists."""
        if name in self._worksheets:
            return self._worksheets[name]
        try:
            sheet = self.get_spreadsheet().worksheet(self.title_for(name))
        except gspread.WorksheetNotFound:
            return None
        self._worksheets[name] = sheet
        return sheet

    def get_worksheet(self, name: str) -> gspread.Worksheet:
        """Get or create a worksheet, writing header and seed rows on creation."""
        sheet = self.find_worksheet(name)
        if sheet is not None:
            return sheet

        schema = self._schemas.get(name)
        sheet = self.get_spreadsheet().add_worksheet(
            title=self.title_for(name),
            rows=NEW_SHEET_ROWS,
            cols=len(schema.columns) if schema else 26,
        )
        if schema is not None:
            sheet.append_rows(
                [list(schema.columns)] + [list(row) for row in schema.seed_rows],
                value_input_option="RAW",
                table_range="A1",
            )
        self._worksheets[name] = sheet
        return sheet


class GoogleSheetsTableStore(TableStoreInterface):
    """
    Google Sheets implementation of the table store.

    Each table is one worksheet with one record per row.
    Values are written RAW so Sheets never reinterprets dates or numbers.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def ensure_table(self, name: str) -> None:
        try:
            self._client.get_worksheet(name)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to open table {name}: {e}")

    def has_table(self, name: str) -> bool:
        try:
            return self._client.find_worksheet(name) is not None
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to look up table {name}: {e}")

    @retry(
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _read_values(self, name: str) -> list[list[str]]:
        return self._client.get_worksheet(name).get_all_values()

    def read_all_rows(self, name: str) -> list[list[str]]:
        try:
            values = self._read_values(name)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read table {name}: {e}")

        rows = values[HEADER_ROWS:]
        # Trailing blank rows show up when cells were cleared by hand
        while rows and not any(str(cell).strip() for cell in rows[-1]):
            rows.pop()
        return rows

    def append_row(self, name: str, row: list[str]) -> int:
        try:
            sheet = self._client.get_worksheet(name)
            response = sheet.append_row(
                list(row),
                value_input_option="RAW",
                table_range="A1",
            )
        except Exception as e:
            raise StorageError(f"Failed to append to {name}: {e}")
        return self._appended_position(name, response)

    def _appended_position(self, name: str, response: Optional[dict]) -> int:
        """Position of the row just appended, from the API's updatedRange (e.g. 'Loans!A5:G5')."""
        updated = ((response or {}).get("updates") or {}).get("updatedRange", "")
        cell = updated.split("!")[-1].split(":")[0]
        digits = "".join(ch for ch in cell if ch.isdigit())
        if digits:
            return int(digits) - HEADER_ROWS - 1
        return len(self.read_all_rows(name)) - 1

    def update_row(self, name: str, position: int, row: list[str]) -> None:
        self.update_cells(name, position, 1, row)

    def update_cells(
        self,
        name: str,
        position: int,
        first_column: int,
        values: list[str],
    ) -> None:
        if position < 0:
            raise NotFoundError(f"No row {position} in table {name}")
        sheet_row = _sheet_row(position)
        start = rowcol_to_a1(sheet_row, first_column)
        end = rowcol_to_a1(sheet_row, first_column + len(values) - 1)
        try:
            sheet = self._client.get_worksheet(name)
            sheet.update(
                range_name=f"{start}:{end}",
                values=[list(values)],
                value_input_option="RAW",
            )
        except Exception as e:
            raise StorageError(f"Failed to update {name} row {position}: {e}")

    def insert_row(self, name: str, position: int, row: list[str]) -> None:
        if position < 0:
            raise NotFoundError(f"Cannot insert at row {position} in table {name}")
        try:
            sheet = self._client.get_worksheet(name)
            sheet.insert_row(
                list(row),
                index=_sheet_row(position),
                value_input_option="RAW",
            )
        except Exception as e:
            raise StorageError(f"Failed to insert into {name} at row {position}: {e}")

    def delete_row(self, name: str, position: int) -> None:
        if position < 0:
            raise NotFoundError(f"No row {position} in table {name}")
        try:
            sheet = self._client.get_worksheet(name)
            sheet.delete_rows(_sheet_row(position))
        except Exception as e:
            raise StorageError(f"Failed to delete {name} row {position}: {e}")
