"""Tests for the SettingsStore."""

import asyncio

import pytest

from money_tracker.models import TransactionKind, UserSettings
from money_tracker.services.storage import StorageError
from money_tracker.stores import SettingsStore
from money_tracker.validation import NotAuthenticatedError


class FailingReadStore:
    """Document store whose reads always fail."""

    async def get_document(self, collection, doc_id):
        raise StorageError("permission denied")


class TestLoad:

    def test_missing_document_gives_defaults(self, alice, settings_store):
        settings = asyncio.run(settings_store.load())
        assert settings == UserSettings()
        assert not settings_store.loading

    def test_partial_document_is_merged(self, storage, alice, settings_store):
        asyncio.run(storage.set_document(
            "userSettings", alice.uid, {"currency": "JPY", "weeklyBudget": 70}
        ))
        settings = asyncio.run(settings_store.load())
        assert settings.currency == "JPY"
        assert settings.weekly_budget == 70
        assert settings.theme == "light"
        assert settings.default_transaction_type == TransactionKind.EXPENSE

    def test_without_identity_is_a_noop(self, storage, settings_store):
        assert asyncio.run(settings_store.load()) == UserSettings()
        assert not settings_store.loading

    def test_failure_is_swallowed(self, session, alice):
        """A failed read keeps the previous value and records the error."""
        store = SettingsStore(FailingReadStore(), session)
        settings = asyncio.run(store.load())
        assert settings == UserSettings()
        assert store.error == "permission denied"
        assert not store.loading

    @pytest.mark.parametrize("stored", [
        {"currency": "EUR", "monthlyBudget": None},
        {"defaultTransactionType": "transfer"},
    ])
    def test_malformed_document_keeps_previous_value(self, storage, alice, settings_store, stored):
        """A stored record the model rejects is logged and ignored."""
        asyncio.run(settings_store.save(UserSettings(currency="GBP")))
        asyncio.run(storage.set_document("userSettings", alice.uid, stored))

        settings = asyncio.run(settings_store.load())

        assert settings.currency == "GBP"
        assert settings_store.error
        assert not settings_store.loading


class TestSave:

    def test_save_persists_full_record(self, storage, alice, settings_store):
        asyncio.run(settings_store.save(UserSettings(currency="EUR", monthly_budget=300)))
        stored = asyncio.run(storage.get_document("userSettings", alice.uid))
        assert stored["currency"] == "EUR"
        assert stored["monthlyBudget"] == 300
        assert stored["dateFormat"] == "MM/DD/YYYY"
        assert "updatedAt" in stored
        assert settings_store.settings.currency == "EUR"

    def test_save_requires_identity(self, storage, settings_store):
        with pytest.raises(NotAuthenticatedError):
            asyncio.run(settings_store.save(UserSettings()))
        assert storage.writes == []

    def test_negative_budget_accepted(self, alice, settings_store):
        asyncio.run(settings_store.save(UserSettings(monthly_budget=-1)))
        assert settings_store.settings.monthly_budget == -1

    def test_round_trip(self, storage, session, alice, settings_store):
        asyncio.run(settings_store.save(UserSettings(theme="dark")))
        fresh = SettingsStore(storage, session)
        assert asyncio.run(fresh.load()).theme == "dark"


class TestReset:

    def test_reset_writes_defaults(self, storage, alice, settings_store):
        asyncio.run(settings_store.save(UserSettings(currency="GBP")))
        asyncio.run(settings_store.reset())
        stored = asyncio.run(storage.get_document("userSettings", alice.uid))
        assert stored["currency"] == "USD"
        assert settings_store.settings == UserSettings()

    def test_reset_requires_identity(self, settings_store):
        with pytest.raises(NotAuthenticatedError):
            asyncio.run(settings_store.reset())

    def test_on_change(self, alice, settings_store):
        changes = []
        settings_store.on_change(lambda: changes.append(settings_store.settings.currency))
        asyncio.run(settings_store.save(UserSettings(currency="INR")))
        assert changes == ["INR"]
