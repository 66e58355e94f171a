"""
Storage Services Package

Provides the document store interface and its implementations.
Firestore is the production backend; the in-memory store shares the same
interface for local runs and tests.
"""

from money_tracker.services.storage.interface import (
    SERVER_TIMESTAMP,
    BackendConnectionError,
    DocumentQuery,
    DocumentStoreInterface,
    NotFoundError,
    Snapshot,
    SnapshotCallback,
    StorageError,
    Subscription,
)
from money_tracker.services.storage.firestore import (
    FirestoreClient,
    FirestoreDocumentStore,
)
from money_tracker.services.storage.memory import InMemoryDocumentStore

__all__ = [
    # Interface
    "DocumentQuery",
    "DocumentStoreInterface",
    "SERVER_TIMESTAMP",
    "Snapshot",
    "SnapshotCallback",
    "Subscription",
    # Exceptions
    "BackendConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "FirestoreClient",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
]
