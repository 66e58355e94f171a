"""
Application Context for Money Tracker

This module ties the services and stores together and owns their lifetime.
One AppContext corresponds to one signed-in session:
1. start()  - listen for auth state, subscribe the live stores, load settings
2. sign-in / register / federated sign-in - delegate to the session, reload settings
3. sign_out() - sign out, then close(): every subscription and listener is
   released and the settings fall back to defaults

DESIGN DECISION: Nothing here is process-global. The UI creates a context,
passes it around, and tears it down on sign-out, so a previous user's data
can never leak into the next session.
"""

from typing import Optional

import structlog

from money_tracker.audit import ActivityLogger
from money_tracker.config import get_settings
from money_tracker.models.finance import DEFAULT_CATEGORY_COLOR, Identity
from money_tracker.routing import RouteGuard
from money_tracker.services.auth import (
    AuthServiceInterface,
    FirebaseAuthService,
    InMemoryAuthService,
)
from money_tracker.services.backup import BackupError, GoogleSheetsBackup
from money_tracker.services.storage import (
    DocumentStoreInterface,
    FirestoreClient,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
)
from money_tracker.stats import DashboardStats
from money_tracker.stores import (
    CategoryStore,
    SessionState,
    SettingsStore,
    TransactionStore,
)


logger = structlog.get_logger(__name__)


class AppContext:
    """
    Everything one session of the UI needs, wired together.

    Stores are attached by start() and detached by close(). close() is
    idempotent and start() may be called again afterwards.
    """

    def __init__(
        self,
        auth: AuthServiceInterface,
        storage: DocumentStoreInterface,
        backup: Optional[GoogleSheetsBackup] = None,
        activity_logger: Optional[ActivityLogger] = None,
        public_paths: Optional[frozenset[str]] = None,
        recent_limit: int = 5,
        top_limit: int = 5,
        default_category_color: str = DEFAULT_CATEGORY_COLOR,
    ):
        self.auth = auth
        self.storage = storage
        self.backup = backup
        self.logger = activity_logger or ActivityLogger()

        self.session = SessionState(auth, self.logger)
        self.settings = SettingsStore(storage, self.session, self.logger)
        self.categories = CategoryStore(
            storage, self.session, self.logger, default_color=default_category_color
        )
        self.transactions = TransactionStore(
            storage, self.session, self.logger, recent_limit=recent_limit
        )
        self.stats = DashboardStats(self.transactions, self.settings, top_limit=top_limit)
        self.guard = RouteGuard(self.session, public_paths=public_paths)

    @property
    def identity(self) -> Optional[Identity]:
        return self.session.identity

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    async def start(self, timeout: Optional[float] = None) -> "AppContext":
        """Wait for the first auth report, then subscribe and load settings."""
        self.session.start()
        await self.session.wait_until_settled(timeout)
        self._attach_stores()
        await self.settings.load()
        return self

    def _attach_stores(self) -> None:
        self.session.start()
        self.categories.attach()
        self.transactions.attach()

    def close(self) -> None:
        """Release every subscription and listener held by this context."""
        self.transactions.detach()
        self.categories.detach()
        self.settings.clear()
        self.session.close()

    async def __aenter__(self) -> "AppContext":
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Session operations
    # ------------------------------------------------------------------

    async def register(self, email: str, password: str) -> Identity:
        identity = await self.session.register(email, password)
        self._attach_stores()
        await self.settings.load()
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        identity = await self.session.sign_in(email, password)
        self._attach_stores()
        await self.settings.load()
        return identity

    async def sign_in_with_federated_provider(
        self,
        id_token: str,
        provider_id: str = "google.com",
    ) -> Identity:
        identity = await self.session.sign_in_with_federated_provider(id_token, provider_id)
        self._attach_stores()
        await self.settings.load()
        return identity

    async def sign_out(self) -> None:
        """Sign out and tear the context down."""
        try:
            await self.session.sign_out()
        finally:
            self.close()

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    async def backup_if_enabled(self) -> Optional[tuple[int, int]]:
        """
        Export the signed-in user's data to Google Sheets.

        Runs only when a backup target is configured and the user has
        auto-backup switched on.

        Returns:
            (transaction_rows, category_rows), or None if skipped

        Raises:
            BackupError: If the export fails
        """
        identity = self.session.identity
        if self.backup is None or identity is None:
            return None
        if not self.settings.settings.auto_backup:
            return None

        try:
            counts = await self.backup.export(
                identity,
                self.transactions.items,
                self.categories.items,
            )
        except BackupError as e:
            self.logger.log_backup(identity.uid, error=e)
            raise

        self.logger.log_backup(identity.uid, *counts)
        return counts


def create_app_context(storage_backend: Optional[str] = None) -> AppContext:
    """
    Factory function to build an AppContext from configuration.

    Args:
        storage_backend: "firestore" or "memory"; defaults to the
                         STORAGE_BACKEND setting.

    The Google Sheets backup is wired in only when it is configured.
    """
    app_settings = get_settings().app
    backend = storage_backend or app_settings.storage_backend

    if backend == "memory":
        auth: AuthServiceInterface = InMemoryAuthService()
        storage: DocumentStoreInterface = InMemoryDocumentStore()
    elif backend == "firestore":
        auth = FirebaseAuthService()
        storage = FirestoreDocumentStore(FirestoreClient())
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    backup = None
    try:
        backup = GoogleSheetsBackup()
    except Exception as e:
        # Backup not configured - continue without it
        logger.warning("backup_not_configured", error=str(e))

    return AppContext(
        auth=auth,
        storage=storage,
        backup=backup,
        public_paths=app_settings.public_paths_set,
        recent_limit=app_settings.recent_transactions_limit,
        top_limit=app_settings.top_categories_limit,
        default_category_color=app_settings.default_category_color,
    )
