"""Tests for the TransactionStore."""

import asyncio
from datetime import date

import pytest

from money_tracker.models import TransactionKind
from money_tracker.stores import TransactionStore
from money_tracker.validation import (
    InvalidAmountError,
    InvalidKindError,
    MissingFieldError,
    NotAuthenticatedError,
)


def add(store, category="Food", description="Lunch", amount=10.0, kind="expense", on=None):
    return asyncio.run(store.add(category, description, amount, kind, on))


class TestTransactionPreconditions:
    """Rejected writes never reach the backend."""

    def test_requires_identity(self, storage, transactions):
        with pytest.raises(NotAuthenticatedError):
            add(transactions)
        assert storage.writes == []

    @pytest.mark.parametrize("amount", [0, -5, float("nan"), float("inf")])
    def test_non_positive_amount(self, storage, alice, transactions, amount):
        with pytest.raises(InvalidAmountError):
            add(transactions, amount=amount)
        assert storage.writes == []
        assert transactions.error == "Amount must be greater than 0"

    def test_missing_fields(self, storage, alice, transactions):
        with pytest.raises(MissingFieldError):
            add(transactions, description="")
        assert storage.writes == []

    def test_invalid_kind(self, storage, alice, transactions):
        with pytest.raises(InvalidKindError):
            add(transactions, kind="transfer")
        assert storage.writes == []

    def test_update_validates(self, storage, alice, transactions):
        add(transactions)
        t = transactions.items[0]
        with pytest.raises(InvalidAmountError):
            asyncio.run(transactions.update(t.model_copy(update={"amount": 0})))
        assert storage.writes == [("add", "transactions")]


class TestTransactionWrites:

    def test_add_stores_owner_and_date(self, alice, transactions):
        add(transactions, on=date(2024, 6, 1))
        [t] = transactions.items
        assert t.user_id == alice.uid
        assert t.transaction_date == date(2024, 6, 1)
        assert t.kind == TransactionKind.EXPENSE
        assert t.created_at is not None

    def test_date_defaults_to_today(self, alice, transactions):
        add(transactions)
        assert transactions.items[0].transaction_date == date.today()

    def test_newest_first(self, alice, transactions):
        for i in range(3):
            add(transactions, description=f"#{i}")
        assert [t.description for t in transactions.items] == ["#2", "#1", "#0"]

    def test_update(self, alice, transactions):
        add(transactions)
        t = transactions.items[0]
        asyncio.run(transactions.update(t.model_copy(update={"amount": 99.0})))
        assert transactions.items[0].amount == 99.0
        assert transactions.items[0].user_id == alice.uid

    def test_remove(self, alice, transactions):
        doc_id = add(transactions)
        asyncio.run(transactions.remove(doc_id))
        assert transactions.items == []

    def test_remove_requires_identity(self, storage, transactions):
        with pytest.raises(NotAuthenticatedError):
            asyncio.run(transactions.remove("anything"))
        assert storage.writes == []


class TestDerivedValues:

    def test_totals(self, alice, transactions):
        add(transactions, amount=1000, kind="income", category="Salary")
        add(transactions, amount=50)
        add(transactions, amount=30)
        assert transactions.income == 1000
        assert transactions.expense == 80
        assert transactions.balance == 920

    def test_balance_is_income_minus_expense(self, alice, transactions):
        for amount, kind in [(5, "expense"), (7, "income"), (11, "expense"), (13, "income")]:
            add(transactions, amount=amount, kind=kind)
        assert transactions.balance == transactions.income - transactions.expense

    def test_recent_is_first_five_delivered(self, alice, transactions):
        for i in range(7):
            add(transactions, description=f"#{i}")
        assert [t.description for t in transactions.recent] == ["#6", "#5", "#4", "#3", "#2"]

    def test_recent_limit(self, storage, session, alice):
        store = TransactionStore(storage, session, recent_limit=2).attach()
        for i in range(3):
            add(store, description=f"#{i}")
        assert len(store.recent) == 2
        store.detach()

    def test_empty(self, transactions):
        assert transactions.income == 0
        assert transactions.expense == 0
        assert transactions.balance == 0
        assert transactions.recent == []


class TestTransactionSubscription:

    def test_owner_filter(self, storage, alice, transactions):
        asyncio.run(storage.add_document("transactions", {
            "userId": "someone-else",
            "type": "expense",
            "amount": 1,
            "date": "2024-06-01",
        }))
        add(transactions)
        assert len(transactions.items) == 1

    def test_on_change_fires_on_snapshot(self, alice, transactions):
        changes = []
        transactions.on_change(lambda: changes.append(len(transactions.items)))
        add(transactions)
        assert changes == [1]
