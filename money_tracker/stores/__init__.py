"""
Stores Package

Session-scoped state the UI reads from: the signed-in identity, settings,
and the live category and transaction lists.
"""

from money_tracker.stores.base import LiveCollectionStore, Observable
from money_tracker.stores.categories import CategoryStore
from money_tracker.stores.session import SessionState
from money_tracker.stores.settings import SettingsStore
from money_tracker.stores.transactions import TransactionStore

__all__ = [
    "CategoryStore",
    "LiveCollectionStore",
    "Observable",
    "SessionState",
    "SettingsStore",
    "TransactionStore",
]
