"""Navigation guard."""

from money_tracker.routing.guard import (
    GuardAction,
    GuardDecision,
    RouteGuard,
)

__all__ = [
    "GuardAction",
    "GuardDecision",
    "RouteGuard",
]
