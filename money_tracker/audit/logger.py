"""
Activity Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of who changed what
2. Debugging capability when the backend rejects a call
3. A visible record of the failures the settings load path swallows

The activity logger never raises: a logging failure must not break a write
that already reached the backend.
"""

from typing import Any, Optional

import structlog

from money_tracker.models.activity import (
    ActivityEvent,
    ActivityEventType,
    ActivitySeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class ActivityLogger:
    """
    Central activity logging service.

    Writes ActivityEvents to the structured log, at the level matching
    their severity.
    """

    def __init__(self, name: str = "money_tracker"):
        self._logger = structlog.get_logger(name)

    def log(self, event: ActivityEvent) -> None:
        """Log an activity event."""
        log_dict = event.to_log_dict()

        if event.severity == ActivitySeverity.ERROR:
            self._logger.error("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.WARNING:
            self._logger.warning("activity_event", **log_dict)
        elif event.severity == ActivitySeverity.DEBUG:
            self._logger.debug("activity_event", **log_dict)
        else:
            self._logger.info("activity_event", **log_dict)

    def log_session_event(
        self,
        event_type: ActivityEventType,
        user_id: Optional[str],
        provider: Optional[str] = None,
    ) -> None:
        """Log a sign-in, sign-up, sign-out or auth state change."""
        self.log(ActivityEvent(
            event_type=event_type,
            user_id=user_id,
            entity_type="identity",
            entity_id=user_id,
            description=event_type.value.replace("_", " ").capitalize(),
            details={"provider": provider} if provider else {},
        ))

    def log_auth_failed(
        self,
        operation: str,
        error: Exception,
    ) -> None:
        """Log a rejected auth call."""
        self.log(ActivityEvent(
            event_type=ActivityEventType.AUTH_FAILED,
            severity=ActivitySeverity.WARNING,
            entity_type="identity",
            description=f"Auth operation failed: {operation}",
            details={"operation": operation, "error_type": type(error).__name__},
            error_message=str(error),
        ))

    def log_write(
        self,
        event_type: ActivityEventType,
        entity_type: str,
        entity_id: Optional[str],
        user_id: Optional[str],
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """Log a successful create/update/delete."""
        self.log(ActivityEvent(
            event_type=event_type,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} {event_type.value.rsplit('_', 1)[-1]}",
            details=details or {},
        ))

    def log_write_rejected(
        self,
        entity_type: str,
        operation: str,
        error: Exception,
        user_id: Optional[str] = None,
    ) -> None:
        """Log a write that failed a local precondition."""
        self.log(ActivityEvent(
            event_type=ActivityEventType.WRITE_REJECTED,
            severity=ActivitySeverity.WARNING,
            user_id=user_id,
            entity_type=entity_type,
            description=f"Rejected {entity_type} {operation}",
            details={"operation": operation, "reason": type(error).__name__},
            error_message=str(error),
        ))

    def log_write_failed(
        self,
        entity_type: str,
        operation: str,
        error: Exception,
        user_id: Optional[str] = None,
    ) -> None:
        """Log a write the backend refused."""
        self.log(ActivityEvent(
            event_type=ActivityEventType.WRITE_FAILED,
            severity=ActivitySeverity.ERROR,
            user_id=user_id,
            entity_type=entity_type,
            description=f"Backend refused {entity_type} {operation}",
            details={"operation": operation, "error_type": type(error).__name__},
            error_message=str(error),
        ))

    def log_settings_event(
        self,
        event_type: ActivityEventType,
        user_id: Optional[str],
        error: Optional[Exception] = None,
    ) -> None:
        """Log a settings load/save/reset, successful or not."""
        failed = error is not None
        self.log(ActivityEvent(
            event_type=event_type,
            severity=ActivitySeverity.ERROR if failed else ActivitySeverity.INFO,
            user_id=user_id,
            entity_type="settings",
            entity_id=user_id,
            description=event_type.value.replace("_", " ").capitalize(),
            error_message=str(error) if failed else None,
        ))

    def log_subscription(
        self,
        event_type: ActivityEventType,
        collection: str,
        user_id: Optional[str],
    ) -> None:
        """Log a live subscription starting or being cancelled."""
        self.log(ActivityEvent(
            event_type=event_type,
            severity=ActivitySeverity.DEBUG,
            user_id=user_id,
            entity_type=collection,
            description=f"{event_type.value.replace('_', ' ').capitalize()}: {collection}",
        ))

    def log_backup(
        self,
        user_id: str,
        transaction_count: int = 0,
        category_count: int = 0,
        error: Optional[Exception] = None,
    ) -> None:
        """Log the outcome of a Sheets backup."""
        if error is not None:
            self.log(ActivityEvent(
                event_type=ActivityEventType.BACKUP_FAILED,
                severity=ActivitySeverity.ERROR,
                user_id=user_id,
                entity_type="backup",
                description="Backup to Google Sheets failed",
                error_message=str(error),
            ))
            return

        self.log(ActivityEvent(
            event_type=ActivityEventType.BACKUP_COMPLETED,
            user_id=user_id,
            entity_type="backup",
            description="Backup to Google Sheets completed",
            details={
                "transactions": transaction_count,
                "categories": category_count,
            },
        ))
