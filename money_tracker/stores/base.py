"""
Store building blocks

Observable gives every store an on_change() hook the UI can follow.
LiveCollectionStore keeps an owner-filtered collection in memory by
following the session: it subscribes when an identity appears, swaps the
whole list on every snapshot, and cancels the subscription when the
identity goes away or the store is detached.
"""

import threading
from typing import TYPE_CHECKING, Any, Callable, Generic, Optional, TypeVar

from pydantic import ValidationError

from money_tracker.audit import ActivityLogger
from money_tracker.models.activity import ActivityEventType
from money_tracker.models.finance import Identity
from money_tracker.services.storage import (
    DocumentQuery,
    DocumentStoreInterface,
    Snapshot,
    Subscription,
)
from money_tracker.validation import PreconditionError, require_identity

if TYPE_CHECKING:
    from money_tracker.stores.session import SessionState


class Observable:
    """Minimal change-listener registry."""

    def __init__(self):
        self._change_listeners: dict[int, Callable[[], None]] = {}
        self._next_change_listener = 0
        self._change_lock = threading.Lock()

    def on_change(self, callback: Callable[[], None]) -> Subscription:
        """Call `callback` after every state change until unsubscribed."""
        with self._change_lock:
            listener_id = self._next_change_listener
            self._next_change_listener += 1
            self._change_listeners[listener_id] = callback

        def cancel() -> None:
            with self._change_lock:
                self._change_listeners.pop(listener_id, None)

        return Subscription(cancel, name=f"{type(self).__name__}.on_change")

    def _emit(self) -> None:
        with self._change_lock:
            listeners = list(self._change_listeners.values())
        for callback in listeners:
            callback()


ItemT = TypeVar("ItemT")


class LiveCollectionStore(Observable, Generic[ItemT]):
    """
    Base class for stores backed by a live, owner-filtered query.

    Subclasses set `collection`/`entity_type` (and optionally `order_by`)
    and implement `_parse`.
    """

    collection: str = ""
    entity_type: str = ""
    order_by: Optional[str] = None
    descending: bool = False

    def __init__(
        self,
        storage: DocumentStoreInterface,
        session: "SessionState",
        activity_logger: Optional[ActivityLogger] = None,
    ):
        super().__init__()
        self._storage = storage
        self._session = session
        self._logger = activity_logger or ActivityLogger()
        self._items: list[ItemT] = []
        self._owner: Optional[str] = None
        self._subscription: Optional[Subscription] = None
        self._session_subscription: Optional[Subscription] = None
        self.loading = True
        self.error: Optional[str] = None

    @property
    def items(self) -> list[ItemT]:
        """The most recently delivered snapshot."""
        return list(self._items)

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def _parse(self, doc_id: str, data: dict[str, Any]) -> ItemT:
        """Convert one stored document into a model."""
        raise NotImplementedError

    def _query_for(self, identity: Identity) -> DocumentQuery:
        return DocumentQuery(
            collection=self.collection,
            where={"userId": identity.uid},
            order_by=self.order_by,
            descending=self.descending,
        )

    # ------------------------------------------------------------------
    # Subscription lifecycle
    # ------------------------------------------------------------------

    def attach(self) -> "LiveCollectionStore[ItemT]":
        """
        Start following the session.

        Subscribes as soon as an identity is available and re-subscribes
        when it changes. Pair with detach().
        """
        if self._session_subscription is None:
            self._session_subscription = self._session.on_change(self._sync_with_session)
            self._sync_with_session()
        return self

    def detach(self) -> None:
        """Stop following the session and cancel the live query."""
        if self._session_subscription is not None:
            self._session_subscription.unsubscribe()
            self._session_subscription = None
        self._cancel_subscription()
        self._items = []
        self.loading = True

    def __enter__(self) -> "LiveCollectionStore[ItemT]":
        return self.attach()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.detach()

    def _sync_with_session(self) -> None:
        identity = self._session.identity
        if identity is None:
            self._cancel_subscription()
            self._items = []
            self.loading = False
            self._emit()
            return

        if identity.uid == self._owner and self.subscribed:
            return

        self._cancel_subscription()
        self._owner = identity.uid
        owner = identity.uid
        self._subscription = self._storage.watch(
            self._query_for(identity),
            lambda snapshot: self._on_snapshot(owner, snapshot),
        )
        self._logger.log_subscription(
            ActivityEventType.SUBSCRIPTION_STARTED, self.collection, identity.uid
        )

    def _cancel_subscription(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._logger.log_subscription(
                ActivityEventType.SUBSCRIPTION_CANCELLED, self.collection, self._owner
            )
        self._subscription = None
        self._owner = None

    def _on_snapshot(self, owner: str, snapshot: Snapshot) -> None:
        if owner != self._owner:
            return  # Late delivery for a cancelled subscription

        items = []
        for doc_id, data in snapshot:
            try:
                items.append(self._parse(doc_id, data))
            except ValidationError:
                continue  # Skip malformed documents
        self._items = items
        self.loading = False
        self._emit()

    # ------------------------------------------------------------------
    # Write helpers
    # ------------------------------------------------------------------

    def _current_identity(self) -> Identity:
        return require_identity(self._session.identity)

    def _rejected(self, operation: str, error: PreconditionError) -> None:
        self.error = str(error)
        identity = self._session.identity
        self._logger.log_write_rejected(
            self.entity_type,
            operation,
            error,
            user_id=identity.uid if identity else None,
        )

    async def _write(self, operation: str, awaitable, user_id: str):
        """Await a backend write, recording and re-raising any failure."""
        try:
            return await awaitable
        except Exception as e:
            self.error = str(e)
            self._logger.log_write_failed(
                self.entity_type, operation, e, user_id=user_id
            )
            raise
