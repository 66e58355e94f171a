"""Backup services package."""

from money_tracker.services.backup.google_sheets import (
    CATEGORY_COLUMNS,
    TRANSACTION_COLUMNS,
    BackupError,
    GoogleSheetsBackup,
    GoogleSheetsClient,
    category_to_row,
    transaction_to_row,
)

__all__ = [
    "CATEGORY_COLUMNS",
    "TRANSACTION_COLUMNS",
    "BackupError",
    "GoogleSheetsBackup",
    "GoogleSheetsClient",
    "category_to_row",
    "transaction_to_row",
]
