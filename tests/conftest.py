"""
Shared fixtures.

Everything runs against the in-memory auth and storage backends; no test
talks to Firebase or Google Sheets.
"""

import asyncio
from datetime import date

import pytest

from money_tracker.models import Identity, Transaction, TransactionKind
from money_tracker.services.auth import InMemoryAuthService
from money_tracker.services.storage import InMemoryDocumentStore
from money_tracker.stores import (
    CategoryStore,
    SessionState,
    SettingsStore,
    TransactionStore,
)


class RecordingDocumentStore(InMemoryDocumentStore):
    """In-memory store that records every write it receives."""

    def __init__(self):
        super().__init__()
        self.writes: list[tuple[str, str]] = []

    async def set_document(self, collection, doc_id, data):
        self.writes.append(("set", collection))
        await super().set_document(collection, doc_id, data)

    async def add_document(self, collection, data):
        self.writes.append(("add", collection))
        return await super().add_document(collection, data)

    async def update_document(self, collection, doc_id, data):
        self.writes.append(("update", collection))
        await super().update_document(collection, doc_id, data)

    async def delete_document(self, collection, doc_id):
        self.writes.append(("delete", collection))
        await super().delete_document(collection, doc_id)


def make_transaction(
    amount: float,
    kind: TransactionKind = TransactionKind.EXPENSE,
    category: str = "Food",
    on: date = date(2024, 6, 15),
    user_id: str = "user-1",
    transaction_id: str = "t",
) -> Transaction:
    return Transaction(
        id=transaction_id,
        user_id=user_id,
        kind=kind,
        category=category,
        description="test",
        amount=amount,
        transaction_date=on,
    )


@pytest.fixture
def auth():
    return InMemoryAuthService()


@pytest.fixture
def storage():
    return RecordingDocumentStore()


@pytest.fixture
def session(auth):
    state = SessionState(auth)
    state.start()
    yield state
    state.close()


@pytest.fixture
def alice(session) -> Identity:
    """Register and sign in a user."""
    return asyncio.run(session.register("alice@example.com", "secret123"))


@pytest.fixture
def categories(storage, session):
    store = CategoryStore(storage, session)
    store.attach()
    yield store
    store.detach()


@pytest.fixture
def transactions(storage, session):
    store = TransactionStore(storage, session)
    store.attach()
    yield store
    store.detach()


@pytest.fixture
def settings_store(storage, session):
    return SettingsStore(storage, session)
