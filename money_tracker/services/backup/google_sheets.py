"""
Google Sheets Backup

DESIGN DECISION: When a user turns on "auto backup", their transactions and
categories are copied into a Google Sheets spreadsheet because:
1. Users can open their data directly in Sheets
2. It survives losing access to the Firebase project
3. It is easy to export further

TRADEOFFS:
- Each run rewrites the user's rows (no incremental sync)
- Rows of all users share one worksheet, keyed by the user ID column
- The backup is a copy, never read back by the app

This is the only place in the system that retries: Sheets API quota errors
are transient and a backup has no caller waiting on it.
"""

from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from money_tracker.config import get_settings
from money_tracker.models.finance import Category, Identity, Transaction


# Column mappings for the Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "user_id",
    "type",
    "category",
    "description",
    "amount",
    "date",
    "created_at",
]

# Column mappings for the Categories sheet
CATEGORY_COLUMNS = [
    "id",
    "user_id",
    "name",
    "type",
    "color",
    "created_at",
]

USER_ID_COLUMN = 2  # 1-based, same position in both sheets


class BackupError(Exception):
    """Backup to Google Sheets failed."""
    pass


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

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
                raise BackupError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise BackupError(f"Failed to connect to Google Sheets: {e}")

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
                raise BackupError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, title: str, columns: list[str]) -> gspread.Worksheet:
        """Get or create a worksheet with the given header row."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.transactions_sheet_name, TRANSACTION_COLUMNS)

    def get_categories_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.categories_sheet_name, CATEGORY_COLUMNS)


def transaction_to_row(transaction: Transaction) -> list:
    """Convert a Transaction to a spreadsheet row."""
    return [
        transaction.id,
        transaction.user_id,
        transaction.kind.value,
        transaction.category,
        transaction.description,
        transaction.amount,
        transaction.transaction_date.isoformat(),
        transaction.created_at.isoformat() if transaction.created_at else "",
    ]


def category_to_row(category: Category) -> list:
    """Convert a Category to a spreadsheet row."""
    return [
        category.id,
        category.user_id or "",
        category.name,
        category.kind.value if category.kind else "",
        category.color,
        category.created_at.isoformat() if category.created_at else "",
    ]


class GoogleSheetsBackup:
    """
    Copies one user's transactions and categories into Google Sheets.

    Each sheet is rewritten in a single update: rows owned by other users
    are kept and this user's rows are replaced by the current data.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _rows_of_others(
        sheet: gspread.Worksheet,
        user_id: str,
        columns: list[str],
    ) -> list[list]:
        """Header plus every row that belongs to someone else."""
        all_rows = sheet.get_all_values(value_render_option="UNFORMATTED_VALUE")
        if not all_rows:
            return [columns]
        header, body = all_rows[0], all_rows[1:]
        return [header] + [
            row
            for row in body
            if len(row) < USER_ID_COLUMN or row[USER_ID_COLUMN - 1] != user_id
        ]

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _replace_rows(
        self,
        sheet: gspread.Worksheet,
        user_id: str,
        columns: list[str],
        rows: list[list],
    ) -> None:
        # Three API calls per sheet regardless of how many rows match
        values = self._rows_of_others(sheet, user_id, columns) + rows
        sheet.clear()
        sheet.update(range_name="A1", values=values, value_input_option="RAW")

    async def export(
        self,
        identity: Identity,
        transactions: list[Transaction],
        categories: list[Category],
    ) -> tuple[int, int]:
        """
        Back up the given records for one identity.

        Returns:
            (transaction_rows, category_rows) written

        Raises:
            BackupError: If the spreadsheet can't be reached or written
        """
        owned_transactions = [t for t in transactions if t.user_id == identity.uid]
        owned_categories = [c for c in categories if c.user_id == identity.uid]

        try:
            self._replace_rows(
                self._client.get_transactions_sheet(),
                identity.uid,
                TRANSACTION_COLUMNS,
                [transaction_to_row(t) for t in owned_transactions],
            )
            self._replace_rows(
                self._client.get_categories_sheet(),
                identity.uid,
                CATEGORY_COLUMNS,
                [category_to_row(c) for c in owned_categories],
            )
        except BackupError:
            raise
        except Exception as e:
            raise BackupError(f"Failed to write backup: {e}")

        return len(owned_transactions), len(owned_categories)
