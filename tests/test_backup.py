"""Tests for the Google Sheets backup (with a mocked gspread client)."""

import asyncio
from datetime import date
from unittest.mock import MagicMock

import pytest

from money_tracker.models import Category, Identity, TransactionKind
from money_tracker.services.backup import (
    CATEGORY_COLUMNS,
    TRANSACTION_COLUMNS,
    BackupError,
    GoogleSheetsBackup,
    category_to_row,
    transaction_to_row,
)

from conftest import make_transaction


def fake_sheet(rows):
    sheet = MagicMock()
    sheet.get_all_values.return_value = rows
    return sheet


@pytest.fixture
def identity():
    return Identity(uid="user-1")


class TestRows:

    def test_transaction_row_matches_columns(self):
        row = transaction_to_row(make_transaction(12.5, on=date(2024, 6, 1)))
        assert len(row) == len(TRANSACTION_COLUMNS)
        assert row[1] == "user-1"
        assert row[2] == "expense"
        assert row[6] == "2024-06-01"
        assert row[7] == ""

    def test_category_row_matches_columns(self):
        row = category_to_row(
            Category(id="c1", user_id="user-1", name="Food", kind=TransactionKind.EXPENSE)
        )
        assert len(row) == len(CATEGORY_COLUMNS)
        assert row[:4] == ["c1", "user-1", "Food", "expense"]


class TestExport:

    def test_replaces_only_the_users_rows(self, identity):
        """Rows of other users are kept; the user's rows are replaced."""
        transactions_sheet = fake_sheet([
            TRANSACTION_COLUMNS,
            ["old-1", "user-1"],
            ["other", "user-2"],
            ["old-2", "user-1"],
        ])
        categories_sheet = fake_sheet([CATEGORY_COLUMNS])
        client = MagicMock()
        client.get_transactions_sheet.return_value = transactions_sheet
        client.get_categories_sheet.return_value = categories_sheet

        counts = asyncio.run(GoogleSheetsBackup(client).export(
            identity,
            [
                make_transaction(10, transaction_id="t1"),
                make_transaction(99, user_id="user-2", transaction_id="t2"),
            ],
            [Category(id="c1", user_id="user-1", name="Food", kind=TransactionKind.EXPENSE)],
        ))

        assert counts == (1, 1)
        written = transactions_sheet.update.call_args.kwargs["values"]
        assert [row[0] for row in written] == ["id", "other", "t1"]
        categories_written = categories_sheet.update.call_args.kwargs["values"]
        assert [row[0] for row in categories_written] == ["id", "c1"]

    def test_single_update_per_sheet(self, identity):
        """Many matching rows still cost one clear and one update."""
        rows = [TRANSACTION_COLUMNS] + [[f"old-{i}", "user-1"] for i in range(300)]
        transactions_sheet = fake_sheet(rows)
        client = MagicMock()
        client.get_transactions_sheet.return_value = transactions_sheet
        client.get_categories_sheet.return_value = fake_sheet([CATEGORY_COLUMNS])

        asyncio.run(GoogleSheetsBackup(client).export(identity, [], []))

        transactions_sheet.delete_rows.assert_not_called()
        transactions_sheet.clear.assert_called_once()
        transactions_sheet.update.assert_called_once()
        assert transactions_sheet.update.call_args.kwargs["values"] == [TRANSACTION_COLUMNS]

    def test_empty_sheet_gets_header(self, identity):
        client = MagicMock()
        client.get_transactions_sheet.return_value = fake_sheet([])
        client.get_categories_sheet.return_value = fake_sheet([])

        assert asyncio.run(GoogleSheetsBackup(client).export(identity, [], [])) == (0, 0)
        written = client.get_transactions_sheet.return_value.update.call_args.kwargs["values"]
        assert written == [TRANSACTION_COLUMNS]

    def test_failure_is_wrapped(self, identity):
        client = MagicMock()
        client.get_transactions_sheet.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(BackupError, match="quota exceeded"):
            asyncio.run(GoogleSheetsBackup(client).export(identity, [], []))
