"""
Abstract Document Store Interface

DESIGN DECISION: The stores never talk to Firestore directly. They go through
this interface so that:
1. The in-memory backend can stand in for local runs and tests
2. Live subscriptions are explicit objects with an explicit unsubscribe()
3. Business logic stays decoupled from the SDK

The interface is intentionally small - only what the stores need:
single-document read/write, collection add/update/delete, and a filtered,
ordered live query that re-delivers the FULL result set on every change.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field


# A snapshot is the complete, ordered result of a query: (doc_id, data) pairs.
Snapshot = list[tuple[str, dict[str, Any]]]
SnapshotCallback = Callable[[Snapshot], None]


class _ServerTimestamp:
    """Placeholder replaced by the backend's own clock at write time."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class DocumentQuery(BaseModel):
    """
    A live query over one collection.

    Only equality filters are supported; that is all the stores use.
    """

    collection: str = Field(..., min_length=1)
    where: dict[str, Any] = Field(
        default_factory=dict,
        description="field -> required value"
    )
    order_by: Optional[str] = None
    descending: bool = False


class Subscription:
    """
    Handle for a live subscription.

    unsubscribe() is idempotent. Use as a context manager to guarantee
    release when the consumer goes away.
    """

    def __init__(self, cancel: Callable[[], None], name: str = ""):
        self._cancel = cancel
        self._name = name
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._active

    @property
    def name(self) -> str:
        return self._name

    def unsubscribe(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._cancel()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()

    def __repr__(self) -> str:
        state = "active" if self._active else "cancelled"
        return f"Subscription({self._name!r}, {state})"


class DocumentStoreInterface(ABC):
    """
    Abstract interface for the document database.

    Any backend (Firestore, in-memory, ...) must implement these methods.
    """

    @abstractmethod
    async def get_document(
        self,
        collection: str,
        doc_id: str,
    ) -> Optional[dict[str, Any]]:
        """
        Read one document.

        Returns:
            The document data, or None if it doesn't exist

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def set_document(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
    ) -> None:
        """
        Create or fully overwrite one document.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def add_document(
        self,
        collection: str,
        data: dict[str, Any],
    ) -> str:
        """
        Add a document with a generated ID.

        Values equal to SERVER_TIMESTAMP are replaced by the backend clock.

        Returns:
            The new document ID

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def update_document(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
    ) -> None:
        """
        Merge fields into an existing document.

        Raises:
            NotFoundError: If the document doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_document(
        self,
        collection: str,
        doc_id: str,
    ) -> None:
        """
        Delete one document. Deleting a missing document is not an error.

        Raises:
            StorageError: If the delete fails
        """
        pass

    @abstractmethod
    def watch(
        self,
        query: DocumentQuery,
        callback: SnapshotCallback,
    ) -> Subscription:
        """
        Start a live query.

        The callback receives the full matching result set once right away
        and again after every change. It may be invoked from a background
        thread.

        Returns:
            A Subscription; call unsubscribe() to stop delivery
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Document not found in storage."""
    pass


class BackendConnectionError(StorageError):
    """Could not connect to the storage backend."""
    pass
