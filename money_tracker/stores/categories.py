"""
Category Store

Live, owner-filtered list of the signed-in identity's categories.
Writes are checked locally first; on success nothing is changed in memory,
the subscription delivers the updated set.
"""

from typing import Any, Optional

from money_tracker.models.activity import ActivityEventType
from money_tracker.models.finance import DEFAULT_CATEGORY_COLOR, Category, TransactionKind
from money_tracker.services.storage import SERVER_TIMESTAMP
from money_tracker.stores.base import LiveCollectionStore
from money_tracker.validation import (
    PreconditionError,
    ensure_unique_category_name,
    parse_kind,
    validate_category_fields,
)


class CategoryStore(LiveCollectionStore[Category]):
    """The signed-in identity's categories, unordered."""

    collection = "categories"
    entity_type = "category"

    def __init__(
        self,
        storage,
        session,
        activity_logger=None,
        default_color: str = DEFAULT_CATEGORY_COLOR,
    ):
        super().__init__(storage, session, activity_logger)
        self.default_color = default_color

    def _parse(self, doc_id: str, data: dict[str, Any]) -> Category:
        return Category.from_document(doc_id, data)

    def by_kind(self, kind) -> list[Category]:
        """Loaded categories of one kind, e.g. for a transaction form."""
        kind = TransactionKind(kind)
        return [c for c in self._items if c.kind == kind]

    async def add(
        self,
        name: str,
        kind,
        color: Optional[str] = None,
    ) -> str:
        """
        Create a category.

        Returns:
            The new document ID

        Raises:
            NotAuthenticatedError, MissingFieldError, InvalidKindError,
            DuplicateCategoryError: Before the backend is contacted
            StorageError: If the backend refuses the write
        """
        self.error = None
        try:
            identity = self._current_identity()
            validate_category_fields(name, kind)
            kind = parse_kind(kind)
            ensure_unique_category_name(name, kind, self._items)
        except PreconditionError as e:
            self._rejected("add", e)
            raise

        document = {
            "name": name.strip(),
            "type": kind.value,
            "color": color or self.default_color,
            "userId": identity.uid,
            "createdAt": SERVER_TIMESTAMP,
        }
        doc_id = await self._write(
            "add",
            self._storage.add_document(self.collection, document),
            identity.uid,
        )
        self._logger.log_write(
            ActivityEventType.CATEGORY_ADDED,
            self.entity_type,
            doc_id,
            identity.uid,
            details={"name": document["name"], "type": kind.value},
        )
        return doc_id

    async def update(self, category: Category) -> None:
        """
        Overwrite a category's name, kind and color.

        The uniqueness check skips the category itself, so saving it
        unchanged is allowed.
        """
        self.error = None
        try:
            identity = self._current_identity()
            validate_category_fields(category.name, category.kind)
            ensure_unique_category_name(
                category.name, category.kind, self._items, exclude_id=category.id
            )
        except PreconditionError as e:
            self._rejected("update", e)
            raise

        await self._write(
            "update",
            self._storage.update_document(
                self.collection, category.id, category.to_document()
            ),
            identity.uid,
        )
        self._logger.log_write(
            ActivityEventType.CATEGORY_UPDATED,
            self.entity_type,
            category.id,
            identity.uid,
        )

    async def remove(self, category_id: str) -> None:
        """Delete a category. Transactions using its name are left alone."""
        self.error = None
        try:
            identity = self._current_identity()
        except PreconditionError as e:
            self._rejected("remove", e)
            raise

        await self._write(
            "remove",
            self._storage.delete_document(self.collection, category_id),
            identity.uid,
        )
        self._logger.log_write(
            ActivityEventType.CATEGORY_DELETED,
            self.entity_type,
            category_id,
            identity.uid,
        )
