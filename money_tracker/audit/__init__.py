"""Activity logging package."""

from money_tracker.audit.logger import ActivityLogger

__all__ = ["ActivityLogger"]
