"""
Data Models Package

This package contains all Pydantic models used in Money Tracker.
All data flowing between the stores and the backend conforms to these schemas.
"""

from money_tracker.models.finance import (
    DEFAULT_CATEGORY_COLOR,
    BudgetStatus,
    Category,
    Identity,
    Transaction,
    TransactionKind,
    UserSettings,
)
from money_tracker.models.activity import (
    ActivityEvent,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Finance models
    "DEFAULT_CATEGORY_COLOR",
    "BudgetStatus",
    "Category",
    "Identity",
    "Transaction",
    "TransactionKind",
    "UserSettings",
    # Activity models
    "ActivityEvent",
    "ActivityEventType",
    "ActivitySeverity",
]
