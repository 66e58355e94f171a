"""
Transaction Store

Live list of the signed-in identity's transactions, newest first by
server creation time, plus the running totals the dashboard shows.
"""

from datetime import date
from typing import Any, Optional, Union

from money_tracker.models.activity import ActivityEventType
from money_tracker.models.finance import Transaction, TransactionKind
from money_tracker.services.storage import SERVER_TIMESTAMP
from money_tracker.stores.base import LiveCollectionStore
from money_tracker.validation import (
    PreconditionError,
    parse_kind,
    validate_transaction_fields,
)


def _sum_kind(transactions: list[Transaction], kind: TransactionKind) -> float:
    return sum(t.amount for t in transactions if t.kind == kind)


class TransactionStore(LiveCollectionStore[Transaction]):
    """The signed-in identity's transactions, ordered by createdAt descending."""

    collection = "transactions"
    entity_type = "transaction"
    order_by = "createdAt"
    descending = True

    def __init__(self, storage, session, activity_logger=None, recent_limit: int = 5):
        super().__init__(storage, session, activity_logger)
        self.recent_limit = recent_limit

    def _parse(self, doc_id: str, data: dict[str, Any]) -> Transaction:
        return Transaction.from_document(doc_id, data)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def income(self) -> float:
        return _sum_kind(self._items, TransactionKind.INCOME)

    @property
    def expense(self) -> float:
        return _sum_kind(self._items, TransactionKind.EXPENSE)

    @property
    def balance(self) -> float:
        return self.income - self.expense

    @property
    def recent(self) -> list[Transaction]:
        """The first few transactions in delivered (newest first) order."""
        return self._items[: self.recent_limit]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add(
        self,
        category: str,
        description: str,
        amount: Optional[float],
        kind,
        transaction_date: Union[date, str, None] = None,
    ) -> str:
        """
        Record a transaction.

        Args:
            category: Category label
            description: Free text
            amount: Strictly positive amount
            kind: "income" or "expense"
            transaction_date: Calendar date, defaults to today

        Returns:
            The new document ID

        Raises:
            NotAuthenticatedError, MissingFieldError, InvalidAmountError,
            InvalidKindError: Before the backend is contacted
            StorageError: If the backend refuses the write
        """
        self.error = None
        try:
            identity = self._current_identity()
            validate_transaction_fields(category, description, amount)
            kind = parse_kind(kind)
        except PreconditionError as e:
            self._rejected("add", e)
            raise

        if transaction_date is None:
            transaction_date = date.today()
        if isinstance(transaction_date, date):
            transaction_date = transaction_date.isoformat()

        document = {
            "category": category.strip(),
            "description": description.strip(),
            "amount": float(amount),
            "type": kind.value,
            "userId": identity.uid,
            "date": transaction_date,
            "createdAt": SERVER_TIMESTAMP,
        }
        doc_id = await self._write(
            "add",
            self._storage.add_document(self.collection, document),
            identity.uid,
        )
        self._logger.log_write(
            ActivityEventType.TRANSACTION_ADDED,
            self.entity_type,
            doc_id,
            identity.uid,
            details={"type": kind.value, "amount": document["amount"]},
        )
        return doc_id

    async def update(self, transaction: Transaction) -> None:
        """Overwrite the editable fields of an existing transaction."""
        self.error = None
        try:
            identity = self._current_identity()
            validate_transaction_fields(
                transaction.category, transaction.description, transaction.amount
            )
        except PreconditionError as e:
            self._rejected("update", e)
            raise

        await self._write(
            "update",
            self._storage.update_document(
                self.collection, transaction.id, transaction.to_document()
            ),
            identity.uid,
        )
        self._logger.log_write(
            ActivityEventType.TRANSACTION_UPDATED,
            self.entity_type,
            transaction.id,
            identity.uid,
        )

    async def remove(self, transaction_id: str) -> None:
        """Delete a transaction."""
        self.error = None
        try:
            identity = self._current_identity()
        except PreconditionError as e:
            self._rejected("remove", e)
            raise

        await self._write(
            "remove",
            self._storage.delete_document(self.collection, transaction_id),
            identity.uid,
        )
        self._logger.log_write(
            ActivityEventType.TRANSACTION_DELETED,
            self.entity_type,
            transaction_id,
            identity.uid,
        )
