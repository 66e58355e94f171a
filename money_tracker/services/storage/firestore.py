"""
Cloud Firestore Storage Implementation

DESIGN DECISION: Firestore is the system of record because it gives us:
1. Live queries (on_snapshot) that push the full result set on every change
2. Server timestamps for a stable "newest first" ordering
3. Security rules for per-user isolation on the client SDKs

TRADEOFFS:
- The Admin SDK authenticates with a service account and BYPASSES security
  rules, so every query here must filter by owner itself
- No multi-document transactions are used (each write is independent)
- Snapshot callbacks arrive on a background thread owned by the SDK

The implementation follows the abstract interface, so the stores can run
against the in-memory backend without changes.
"""

from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions

from money_tracker.config import get_settings
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


class FirestoreClient:
    """
    Low-level Firestore client wrapper.

    Handles Firebase app initialization with service account credentials.
    """

    def __init__(self):
        self._db = None
        self._settings = get_settings().firebase

    def connect(self):
        """
        Get the Firestore client, initializing the Firebase app once.
        """
        if self._db is None:
            try:
                try:
                    app = firebase_admin.get_app()
                except ValueError:
                    cred = credentials.Certificate(self._settings.credentials_path)
                    app = firebase_admin.initialize_app(
                        cred,
                        {"projectId": self._settings.project_id},
                    )
                self._db = firestore.client(app)
            except FileNotFoundError:
                raise BackendConnectionError(
                    f"Firebase credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise BackendConnectionError(f"Failed to connect to Firestore: {e}")

        return self._db


class FirestoreDocumentStore(DocumentStoreInterface):
    """
    Firestore implementation of the document store.

    Writes are single-document operations. Live queries map directly onto
    Query.on_snapshot.
    """

    def __init__(self, client: Optional[FirestoreClient] = None):
        self._client = client or FirestoreClient()

    @staticmethod
    def _prepare(data: dict[str, Any]) -> dict[str, Any]:
        """Swap our timestamp placeholder for the SDK sentinel."""
        return {
            key: firestore.SERVER_TIMESTAMP if value is SERVER_TIMESTAMP else value
            for key, value in data.items()
        }

    def _build_query(self, query: DocumentQuery):
        ref = self._client.connect().collection(query.collection)
        for field, value in query.where.items():
            ref = ref.where(filter=firestore.FieldFilter(field, "==", value))
        if query.order_by:
            direction = (
                firestore.Query.DESCENDING if query.descending
                else firestore.Query.ASCENDING
            )
            ref = ref.order_by(query.order_by, direction=direction)
        return ref

    async def get_document(
        self,
        collection: str,
        doc_id: str,
    ) -> Optional[dict[str, Any]]:
        """Read one document."""
        try:
            snapshot = self._client.connect().collection(collection).document(doc_id).get()
        except BackendConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {collection}/{doc_id}: {e}")

        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    async def set_document(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
    ) -> None:
        """Create or overwrite one document."""
        try:
            self._client.connect().collection(collection).document(doc_id).set(
                self._prepare(data)
            )
        except BackendConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write {collection}/{doc_id}: {e}")

    async def add_document(
        self,
        collection: str,
        data: dict[str, Any],
    ) -> str:
        """Add a document with a generated ID."""
        try:
            _, doc_ref = self._client.connect().collection(collection).add(
                self._prepare(data)
            )
            return doc_ref.id
        except BackendConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to add to {collection}: {e}")

    async def update_document(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
    ) -> None:
        """Merge fields into an existing document."""
        try:
            self._client.connect().collection(collection).document(doc_id).update(
                self._prepare(data)
            )
        except google_exceptions.NotFound:
            raise NotFoundError(f"Document not found: {collection}/{doc_id}")
        except BackendConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update {collection}/{doc_id}: {e}")

    async def delete_document(
        self,
        collection: str,
        doc_id: str,
    ) -> None:
        """Delete one document."""
        try:
            self._client.connect().collection(collection).document(doc_id).delete()
        except BackendConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete {collection}/{doc_id}: {e}")

    def watch(
        self,
        query: DocumentQuery,
        callback: SnapshotCallback,
    ) -> Subscription:
        """Start an on_snapshot listener for the query."""

        def on_snapshot(docs, changes, read_time) -> None:
            snapshot: Snapshot = [(doc.id, doc.to_dict()) for doc in docs]
            callback(snapshot)

        try:
            watch = self._build_query(query).on_snapshot(on_snapshot)
        except BackendConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to watch {query.collection}: {e}")

        return Subscription(watch.unsubscribe, name=query.collection)
