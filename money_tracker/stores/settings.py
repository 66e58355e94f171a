"""
Settings Store

One ``userSettings/{uid}`` document per identity, always read back as a
complete record: stored fields are laid over the defaults.

Load failures are logged and swallowed so a broken read never blocks the
UI; the previous in-memory value stays visible. Save and reset failures
propagate to the caller.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from money_tracker.audit import ActivityLogger
from money_tracker.models.activity import ActivityEventType
from money_tracker.models.finance import UserSettings
from money_tracker.services.storage import DocumentStoreInterface
from money_tracker.stores.base import Observable
from money_tracker.validation import PreconditionError, require_identity

if TYPE_CHECKING:
    from money_tracker.stores.session import SessionState


COLLECTION = "userSettings"


class SettingsStore(Observable):
    """Per-identity preferences with defaults merged on load."""

    def __init__(
        self,
        storage: DocumentStoreInterface,
        session: "SessionState",
        activity_logger: Optional[ActivityLogger] = None,
    ):
        super().__init__()
        self._storage = storage
        self._session = session
        self._logger = activity_logger or ActivityLogger()
        self._settings = UserSettings()
        self.loading = True
        self.error: Optional[str] = None

    @property
    def settings(self) -> UserSettings:
        return self._settings

    def _replace(self, settings: UserSettings) -> None:
        self._settings = settings
        self._emit()

    async def load(self) -> UserSettings:
        """
        Read the signed-in identity's settings.

        A missing document yields the defaults. Without an identity this
        is a no-op.
        """
        identity = self._session.identity
        if identity is None:
            self.loading = False
            return self._settings

        self.error = None
        try:
            stored = await self._storage.get_document(COLLECTION, identity.uid)
            merged = UserSettings.merged_with_defaults(stored)
        except Exception as e:
            self.error = str(e)
            self._logger.log_settings_event(
                ActivityEventType.SETTINGS_LOAD_FAILED, identity.uid, error=e
            )
        else:
            self._replace(merged)
            self._logger.log_settings_event(
                ActivityEventType.SETTINGS_LOADED, identity.uid
            )
        finally:
            self.loading = False

        return self._settings

    async def save(self, settings: UserSettings) -> None:
        """
        Persist the full record, then mirror it locally.

        Raises:
            NotAuthenticatedError: If nobody is signed in
            StorageError: If the write fails
        """
        await self._write(settings, ActivityEventType.SETTINGS_SAVED)

    async def reset(self) -> None:
        """Persist the defaults and adopt them locally."""
        await self._write(UserSettings(), ActivityEventType.SETTINGS_RESET)

    async def _write(self, settings: UserSettings, event_type: ActivityEventType) -> None:
        self.error = None
        try:
            identity = require_identity(self._session.identity)
        except PreconditionError as e:
            self.error = str(e)
            raise

        document = {
            **settings.to_document(),
            "updatedAt": datetime.now(timezone.utc).isoformat(),
        }
        try:
            await self._storage.set_document(COLLECTION, identity.uid, document)
        except Exception as e:
            self.error = str(e)
            self._logger.log_write_failed("settings", event_type.value, e, user_id=identity.uid)
            raise

        self._replace(settings.model_copy())
        self._logger.log_settings_event(event_type, identity.uid)

    def clear(self) -> None:
        """Drop back to the defaults without touching the backend."""
        self.loading = True
        self.error = None
        self._replace(UserSettings())
