"""
Google Sheets Profile Storage

One worksheet, one row per user. The first column is the user id; the
remaining columns are the profile document keys. Amounts and timestamps are
written as plain text (RAW) and normalised back into UserProfile on read.

TRADEOFFS:
- Each operation reads the whole sheet to locate the user's row. Fine for a
  personal-finance app's user count.
- A merge is read-modify-write of a single row; concurrent writers to the
  same row are last-writer-wins.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from wealthai.config import GoogleSheetsSettings, get_settings
from wealthai.models.profile import PROFILE_FIELDS, UserProfile, utc_now
from wealthai.services.storage.interface import (
    ConnectionError,
    MalformedProfileError,
    NotFoundError,
    ProfileStorageInterface,
    StorageError,
    check_fields,
)


# Column mappings for the Profiles sheet
PROFILE_COLUMNS = ["userId", *PROFILE_FIELDS]

logger = structlog.get_logger(__name__)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and worksheet lookup.
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
            except FileNotFoundError as e:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def get_profiles_sheet(self) -> gspread.Worksheet:
        """Get or create the Profiles worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.profiles_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.profiles_sheet_name,
                rows=1000,
                cols=len(PROFILE_COLUMNS),
            )
            sheet.append_row(PROFILE_COLUMNS)
        return sheet


def _to_cell(value: Any) -> str:
    """Render a document value as sheet text."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


class GoogleSheetsProfileStorage(ProfileStorageInterface):
    """
    Google Sheets implementation of profile storage.

    Blank cells read back as missing keys, so UserProfile defaults apply to
    optional text and required fields surface as MalformedProfileError.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_document(self, row: list) -> dict[str, str]:
        """Convert a spreadsheet row to a document (user id column dropped)."""
        document = {}
        for index, key in enumerate(PROFILE_COLUMNS[1:], start=1):
            if index < len(row) and row[index] != "":
                document[key] = row[index]
        return document

    def _document_to_row(self, user_id: str, document: dict[str, Any]) -> list[str]:
        """Convert a document to a spreadsheet row."""
        return [user_id] + [_to_cell(document.get(key)) for key in PROFILE_COLUMNS[1:]]

    def _find_row(
        self,
        sheet: gspread.Worksheet,
        user_id: str,
    ) -> tuple[Optional[int], Optional[dict[str, str]]]:
        """Locate the user's row. Returns (1-based row number, document)."""
        all_rows = sheet.get_all_values()
        # Row 1 is the header
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == user_id:
                return idx, self._row_to_document(row)
        return None, None

    def _write_row(
        self,
        sheet: gspread.Worksheet,
        row_number: Optional[int],
        row: list[str],
    ) -> None:
        if row_number is None:
            sheet.append_row(row, value_input_option="RAW")
        else:
            sheet.update(
                range_name=f"A{row_number}",
                values=[row],
                value_input_option="RAW",
            )

    async def create_or_merge(self, user_id: str, fields: dict[str, Any]) -> None:
        """Merge fields into the user's row, appending the row if it's new."""
        check_fields(fields, allow_immutable=True)
        try:
            sheet = self._client.get_profiles_sheet()
            row_number, existing = self._find_row(sheet, user_id)

            document: dict[str, Any] = dict(existing or {})
            document.update(fields)
            document["updatedAt"] = utc_now()

            self._write_row(sheet, row_number, self._document_to_row(user_id, document))
            logger.info(
                "profile_written",
                user_id=user_id,
                created=row_number is None,
                fields=sorted(fields),
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save profile: {e}") from e

    async def read(self, user_id: str) -> Optional[UserProfile]:
        """Retrieve the user's profile, or None if they have no row."""
        try:
            sheet = self._client.get_profiles_sheet()
            _, document = self._find_row(sheet, user_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to get profile: {e}") from e

        if document is None:
            return None

        try:
            return UserProfile.from_document(document)
        except ValidationError as e:
            raise MalformedProfileError(
                f"Stored profile for {user_id} is malformed: {e.error_count()} invalid fields"
            ) from e

    async def update(self, user_id: str, fields: dict[str, Any]) -> None:
        """Update fields on an existing row."""
        check_fields(fields, allow_immutable=False)
        try:
            sheet = self._client.get_profiles_sheet()
            row_number, existing = self._find_row(sheet, user_id)

            if row_number is None:
                raise NotFoundError(f"Profile not found: {user_id}")

            document: dict[str, Any] = dict(existing)
            document.update(fields)
            document["updatedAt"] = utc_now()

            self._write_row(sheet, row_number, self._document_to_row(user_id, document))
            logger.info("profile_updated", user_id=user_id, fields=sorted(fields))
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update profile: {e}") from e
