"""
Write Preconditions

DESIGN DECISION: Every create/update/delete is checked locally before the
backend is contacted. A failed check raises a PreconditionError whose message
is safe to show the user as-is.

Checks:
- An identity must be signed in
- Required fields must be present
- Transaction amounts must be strictly positive
- Category names must be unique per kind among the loaded categories

IMPORTANT: The uniqueness check only sees what the live subscription has
delivered so far. The backend does not enforce it, so two concurrent writers
can still create duplicates.
"""

import math
from typing import Iterable, Optional

from money_tracker.models.finance import (
    Category,
    Identity,
    TransactionKind,
)


class PreconditionError(Exception):
    """Base exception for writes rejected before reaching the backend."""
    pass


class NotAuthenticatedError(PreconditionError):
    """No identity is signed in."""

    def __init__(self, message: str = "Please login first"):
        super().__init__(message)


class MissingFieldError(PreconditionError):
    """A required field is empty."""

    def __init__(self, fields: Iterable[str] = ()):
        self.fields = list(fields)
        super().__init__("Please fill all fields")


class InvalidAmountError(PreconditionError):
    """Amount is zero, negative or not finite."""

    def __init__(self, amount: float):
        self.amount = amount
        super().__init__("Amount must be greater than 0")


class InvalidKindError(PreconditionError):
    """Kind is neither income nor expense."""

    def __init__(self, kind):
        self.kind = kind
        super().__init__("Type must be income or expense")


class DuplicateCategoryError(PreconditionError):
    """A category with the same name and kind is already loaded."""

    def __init__(self, name: str, kind: TransactionKind):
        self.name = name
        self.kind = kind
        super().__init__("Category with this name already exists")


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def require_identity(identity: Optional[Identity]) -> Identity:
    """Return the identity, or raise if nobody is signed in."""
    if identity is None:
        raise NotAuthenticatedError()
    return identity


def parse_kind(kind) -> TransactionKind:
    """Coerce "income"/"expense" (or the enum itself) to TransactionKind."""
    try:
        return TransactionKind(kind)
    except ValueError:
        raise InvalidKindError(kind)


def validate_transaction_fields(
    category: Optional[str],
    description: Optional[str],
    amount: Optional[float],
) -> None:
    """
    Check the required transaction fields.

    Raises:
        MissingFieldError: category, description or amount is empty
        InvalidAmountError: amount is not a finite, strictly positive number
    """
    missing = [
        name
        for name, value in (
            ("category", category),
            ("description", description),
            ("amount", amount),
        )
        if _is_blank(value)
    ]
    if missing:
        raise MissingFieldError(missing)

    if not math.isfinite(amount) or amount <= 0:
        raise InvalidAmountError(amount)


def validate_category_fields(
    name: Optional[str],
    kind: Optional[TransactionKind],
) -> None:
    """
    Check the required category fields.

    Raises:
        MissingFieldError: name or kind is empty
    """
    missing = [
        field
        for field, value in (("name", name), ("kind", kind))
        if _is_blank(value)
    ]
    if missing:
        raise MissingFieldError(missing)


def ensure_unique_category_name(
    name: str,
    kind: TransactionKind,
    existing: Iterable[Category],
    exclude_id: Optional[str] = None,
) -> None:
    """
    Reject a name already used by another loaded category of the same kind.

    Comparison ignores case and surrounding whitespace. The same name under
    a different kind is allowed.

    Args:
        name: Proposed category name
        kind: Proposed category kind
        existing: Categories currently loaded for the owner
        exclude_id: ID of the category being updated, if any

    Raises:
        DuplicateCategoryError: if a clash is found
    """
    wanted = name.strip().lower()
    for category in existing:
        if exclude_id is not None and category.id == exclude_id:
            continue
        if category.kind == kind and category.name.strip().lower() == wanted:
            raise DuplicateCategoryError(name, kind)
