"""
In-Memory Storage Implementation

Implements the document store interface with plain dicts. Used when
``storage_backend=memory`` and by the test suite.

It mirrors the Firestore behaviours the stores depend on:
- watch() delivers the full result set immediately and after every write
- SERVER_TIMESTAMP is replaced by a strictly increasing UTC clock
- update() of a missing document raises NotFoundError
"""

import copy
import threading
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import uuid4

from money_tracker.services.storage.interface import (
    SERVER_TIMESTAMP,
    DocumentQuery,
    DocumentStoreInterface,
    NotFoundError,
    Snapshot,
    SnapshotCallback,
    Subscription,
)


class InMemoryDocumentStore(DocumentStoreInterface):
    """Dict-backed document store with synchronous live queries."""

    def __init__(self):
        self._collections: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._watchers: dict[int, tuple[DocumentQuery, SnapshotCallback]] = {}
        self._next_watcher = 0
        self._last_timestamp: Optional[datetime] = None
        self._lock = threading.RLock()

    def _now(self) -> datetime:
        now = datetime.now(timezone.utc)
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _prepare(self, data: dict[str, Any]) -> dict[str, Any]:
        return {
            key: self._now() if value is SERVER_TIMESTAMP else copy.deepcopy(value)
            for key, value in data.items()
        }

    def _run_query(self, query: DocumentQuery) -> Snapshot:
        with self._lock:
            docs = [
                (doc_id, copy.deepcopy(data))
                for doc_id, data in self._collections[query.collection].items()
                if all(data.get(field) == value for field, value in query.where.items())
            ]

        if query.order_by:
            field = query.order_by
            present = [d for d in docs if d[1].get(field) is not None]
            missing = [d for d in docs if d[1].get(field) is None]
            present.sort(key=lambda d: d[1][field], reverse=query.descending)
            docs = present + missing

        return docs

    def _notify(self, collection: str) -> None:
        with self._lock:
            watchers = [
                (query, callback)
                for query, callback in self._watchers.values()
                if query.collection == collection
            ]
        # Callbacks run outside the lock so they may read the store.
        for query, callback in watchers:
            callback(self._run_query(query))

    async def get_document(
        self,
        collection: str,
        doc_id: str,
    ) -> Optional[dict[str, Any]]:
        with self._lock:
            data = self._collections[collection].get(doc_id)
            return copy.deepcopy(data) if data is not None else None

    async def set_document(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
    ) -> None:
        with self._lock:
            self._collections[collection][doc_id] = self._prepare(data)
        self._notify(collection)

    async def add_document(
        self,
        collection: str,
        data: dict[str, Any],
    ) -> str:
        doc_id = uuid4().hex
        with self._lock:
            self._collections[collection][doc_id] = self._prepare(data)
        self._notify(collection)
        return doc_id

    async def update_document(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
    ) -> None:
        with self._lock:
            existing = self._collections[collection].get(doc_id)
            if existing is None:
                raise NotFoundError(f"Document not found: {collection}/{doc_id}")
            existing.update(self._prepare(data))
        self._notify(collection)

    async def delete_document(
        self,
        collection: str,
        doc_id: str,
    ) -> None:
        with self._lock:
            removed = self._collections[collection].pop(doc_id, None)
        if removed is not None:
            self._notify(collection)

    def watch(
        self,
        query: DocumentQuery,
        callback: SnapshotCallback,
    ) -> Subscription:
        with self._lock:
            watcher_id = self._next_watcher
            self._next_watcher += 1
            self._watchers[watcher_id] = (query, callback)

        def cancel() -> None:
            with self._lock:
                self._watchers.pop(watcher_id, None)

        callback(self._run_query(query))
        return Subscription(cancel, name=query.collection)

    @property
    def watcher_count(self) -> int:
        """Number of live queries currently registered."""
        with self._lock:
            return len(self._watchers)
