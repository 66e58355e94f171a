"""
Core Data Models for Money Tracker

These models define the schemas for every record the stores read from and
write to the document database. They are designed to:
1. Map cleanly onto the stored documents (camelCase field names)
2. Be serializable for storage and logging
3. Stay lenient about field values - business rules live in the validator

DESIGN DECISION: The models do NOT enforce "amount > 0" or "name required".
Those are preconditions of the write operations and are reported by
money_tracker.validation with human-readable messages, before any backend
call is made.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """Whether money came in or went out."""
    INCOME = "income"
    EXPENSE = "expense"


DEFAULT_CATEGORY_COLOR = "#3b82f6"


# =============================================================================
# IDENTITY
# =============================================================================

class Identity(BaseModel):
    """
    The authenticated user as reported by the auth service.

    This system only observes identities - it never creates or edits them.
    """
    model_config = ConfigDict(frozen=True)

    uid: str = Field(
        ...,
        min_length=1,
        description="Opaque identifier issued by the auth service"
    )
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    provider_id: str = Field(
        default="password",
        description="Sign-in provider (password, google.com, ...)"
    )


# =============================================================================
# TRANSACTIONS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense entry, owned by one identity.

    Stored in the ``transactions`` collection. ``created_at`` is stamped by
    the server and drives the ordering of the live subscription; the
    calendar ``transaction_date`` drives every statistic.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str = Field(
        ...,
        description="Document ID"
    )
    user_id: str = Field(
        ...,
        alias="userId",
        description="Owner identity"
    )
    kind: TransactionKind = Field(
        ...,
        alias="type",
    )
    category: str = ""
    description: str = ""
    amount: float = 0.0
    transaction_date: date = Field(
        ...,
        alias="date",
        description="Calendar date of the transaction"
    )
    created_at: Optional[datetime] = Field(
        default=None,
        alias="createdAt",
        description="Server creation timestamp"
    )

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Transaction":
        """Build a Transaction from a stored document."""
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> dict[str, Any]:
        """
        Editable fields in their stored shape.

        Ownership and the creation timestamp are never rewritten.
        """
        return {
            "category": self.category,
            "description": self.description,
            "amount": self.amount,
            "type": self.kind.value,
            "date": self.transaction_date.isoformat(),
        }


# =============================================================================
# CATEGORIES
# =============================================================================

class Category(BaseModel):
    """
    A user-defined label for transactions.

    Names are unique per (owner, kind), ignoring case. That rule is checked
    against the categories currently loaded in memory only.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    id: str
    user_id: Optional[str] = Field(
        default=None,
        alias="userId",
    )
    name: str = ""
    kind: Optional[TransactionKind] = Field(
        default=None,
        alias="type",
    )
    color: str = DEFAULT_CATEGORY_COLOR
    created_at: Optional[datetime] = Field(
        default=None,
        alias="createdAt",
    )

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Category":
        """Build a Category from a stored document."""
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> dict[str, Any]:
        """Editable fields in their stored shape."""
        return {
            "name": self.name,
            "type": self.kind.value if self.kind else None,
            "color": self.color,
        }


# =============================================================================
# USER SETTINGS
# =============================================================================

class UserSettings(BaseModel):
    """
    Per-identity preferences, stored as ``userSettings/{uid}``.

    Every field has a default, so a loaded record is always complete.
    Values are NOT validated beyond their type: a negative budget is kept.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    currency: str = "USD"
    date_format: str = "MM/DD/YYYY"
    theme: str = "light"
    notifications: bool = True
    auto_backup: bool = True
    default_transaction_type: TransactionKind = TransactionKind.EXPENSE
    monthly_budget: float = 0.0
    weekly_budget: float = 0.0

    @classmethod
    def merged_with_defaults(cls, stored: Optional[dict[str, Any]]) -> "UserSettings":
        """Overlay a (possibly partial) stored record on the defaults."""
        merged = cls().to_document()
        merged.update(stored or {})
        return cls.model_validate(merged)

    def to_document(self) -> dict[str, Any]:
        """The full record in its stored (camelCase) shape."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# STATISTICS
# =============================================================================

class BudgetStatus(BaseModel):
    """Spend against a budget for one period."""

    spent: float = Field(
        ...,
        description="Expense total for the period"
    )
    budget: float = Field(
        ...,
        description="Configured budget for the period"
    )
    percentage: float = Field(
        ...,
        description="spent / budget * 100, or 0 when there is no budget"
    )
