"""Tests for the in-memory document store and subscriptions."""

import asyncio
from datetime import datetime

import pytest

from money_tracker.services.storage import (
    SERVER_TIMESTAMP,
    DocumentQuery,
    InMemoryDocumentStore,
    NotFoundError,
    Subscription,
)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


class TestDocuments:

    def test_get_missing_document(self, store):
        assert asyncio.run(store.get_document("userSettings", "nobody")) is None

    def test_set_and_get(self, store):
        asyncio.run(store.set_document("userSettings", "u1", {"currency": "EUR"}))
        assert asyncio.run(store.get_document("userSettings", "u1")) == {"currency": "EUR"}

    def test_returned_data_is_a_copy(self, store):
        """Mutating a read result must not change the stored document."""
        asyncio.run(store.set_document("c", "d", {"tags": ["a"]}))
        data = asyncio.run(store.get_document("c", "d"))
        data["tags"].append("b")
        assert asyncio.run(store.get_document("c", "d")) == {"tags": ["a"]}

    def test_add_stamps_server_timestamp(self, store):
        doc_id = asyncio.run(store.add_document("c", {"createdAt": SERVER_TIMESTAMP}))
        data = asyncio.run(store.get_document("c", doc_id))
        assert isinstance(data["createdAt"], datetime)

    def test_server_timestamps_strictly_increase(self, store):
        first = asyncio.run(store.add_document("c", {"createdAt": SERVER_TIMESTAMP}))
        second = asyncio.run(store.add_document("c", {"createdAt": SERVER_TIMESTAMP}))
        a = asyncio.run(store.get_document("c", first))["createdAt"]
        b = asyncio.run(store.get_document("c", second))["createdAt"]
        assert b > a

    def test_update_merges(self, store):
        asyncio.run(store.set_document("c", "d", {"a": 1, "b": 2}))
        asyncio.run(store.update_document("c", "d", {"b": 3}))
        assert asyncio.run(store.get_document("c", "d")) == {"a": 1, "b": 3}

    def test_update_missing_raises(self, store):
        with pytest.raises(NotFoundError):
            asyncio.run(store.update_document("c", "missing", {"a": 1}))

    def test_delete_missing_is_not_an_error(self, store):
        asyncio.run(store.delete_document("c", "missing"))


class TestWatch:

    def test_initial_snapshot_is_delivered(self, store):
        asyncio.run(store.set_document("c", "d", {"userId": "u1"}))
        received = []
        store.watch(DocumentQuery(collection="c"), received.append)
        assert received == [[("d", {"userId": "u1"})]]

    def test_equality_filter(self, store):
        asyncio.run(store.set_document("c", "mine", {"userId": "u1"}))
        asyncio.run(store.set_document("c", "theirs", {"userId": "u2"}))
        received = []
        store.watch(DocumentQuery(collection="c", where={"userId": "u1"}), received.append)
        assert [doc_id for doc_id, _ in received[-1]] == ["mine"]

    def test_full_result_set_on_every_change(self, store):
        """Every delivery is the whole result set, not a diff."""
        received = []
        store.watch(DocumentQuery(collection="c"), received.append)
        asyncio.run(store.add_document("c", {"n": 1}))
        asyncio.run(store.add_document("c", {"n": 2}))
        assert [len(snapshot) for snapshot in received] == [0, 1, 2]

    def test_descending_order(self, store):
        received = []
        store.watch(
            DocumentQuery(collection="c", order_by="createdAt", descending=True),
            received.append,
        )
        asyncio.run(store.add_document("c", {"n": 1, "createdAt": SERVER_TIMESTAMP}))
        asyncio.run(store.add_document("c", {"n": 2, "createdAt": SERVER_TIMESTAMP}))
        assert [data["n"] for _, data in received[-1]] == [2, 1]

    def test_other_collections_do_not_notify(self, store):
        received = []
        store.watch(DocumentQuery(collection="c"), received.append)
        asyncio.run(store.add_document("other", {"n": 1}))
        assert len(received) == 1

    def test_unsubscribe_stops_delivery(self, store):
        received = []
        subscription = store.watch(DocumentQuery(collection="c"), received.append)
        subscription.unsubscribe()
        asyncio.run(store.add_document("c", {"n": 1}))
        assert len(received) == 1
        assert store.watcher_count == 0


class TestSubscription:

    def test_unsubscribe_is_idempotent(self):
        calls = []
        subscription = Subscription(lambda: calls.append(1), name="test")
        subscription.unsubscribe()
        subscription.unsubscribe()
        assert calls == [1]
        assert not subscription.active

    def test_context_manager_releases(self, store):
        with store.watch(DocumentQuery(collection="c"), lambda snapshot: None) as sub:
            assert sub.active
            assert store.watcher_count == 1
        assert store.watcher_count == 0
