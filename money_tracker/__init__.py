"""
Money Tracker - Source Package

A personal finance tracker: income and expense transactions, user-defined
categories, per-user settings and a dashboard of derived figures, backed by
Firebase Authentication and Cloud Firestore.

DESIGN PRINCIPLES:
1. Every record belongs to exactly one identity
2. Preconditions are checked before the backend is contacted
3. Live subscriptions are the source of truth for lists
4. Subscriptions are released explicitly, never left to the garbage collector
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Money Tracker Team"
