"""
Activity Models for Money Tracker

Every significant action in the system produces an ActivityEvent that is
written to the structured log. This gives:
1. A trace of what each user did and when
2. Debugging information when the backend misbehaves
3. A record of rejected writes and why they were rejected
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we log."""
    # Session
    USER_REGISTERED = "user_registered"
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGNED_OUT = "user_signed_out"
    AUTH_STATE_CHANGED = "auth_state_changed"
    AUTH_FAILED = "auth_failed"

    # Writes
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    CATEGORY_ADDED = "category_added"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_DELETED = "category_deleted"
    WRITE_REJECTED = "write_rejected"
    WRITE_FAILED = "write_failed"

    # Settings
    SETTINGS_LOADED = "settings_loaded"
    SETTINGS_LOAD_FAILED = "settings_load_failed"
    SETTINGS_SAVED = "settings_saved"
    SETTINGS_RESET = "settings_reset"

    # Subscriptions
    SUBSCRIPTION_STARTED = "subscription_started"
    SUBSCRIPTION_CANCELLED = "subscription_cancelled"

    # Backup
    BACKUP_COMPLETED = "backup_completed"
    BACKUP_FAILED = "backup_failed"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single logged event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    # Who and what
    user_id: Optional[str] = None
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'category', 'settings')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }
