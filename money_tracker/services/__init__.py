"""Services package."""

from money_tracker.services.auth import (
    AuthError,
    AuthServiceInterface,
    AuthServiceUnavailableError,
    EmailAlreadyInUseError,
    FirebaseAuthService,
    InMemoryAuthService,
    InvalidCredentialsError,
    WeakPasswordError,
)
from money_tracker.services.backup import (
    BackupError,
    GoogleSheetsBackup,
    GoogleSheetsClient,
)
from money_tracker.services.storage import (
    BackendConnectionError,
    DocumentQuery,
    DocumentStoreInterface,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    NotFoundError,
    StorageError,
    Subscription,
)

__all__ = [
    # Auth services
    "AuthError",
    "AuthServiceInterface",
    "AuthServiceUnavailableError",
    "EmailAlreadyInUseError",
    "FirebaseAuthService",
    "InMemoryAuthService",
    "InvalidCredentialsError",
    "WeakPasswordError",
    # Backup services
    "BackupError",
    "GoogleSheetsBackup",
    "GoogleSheetsClient",
    # Storage services
    "BackendConnectionError",
    "DocumentQuery",
    "DocumentStoreInterface",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
    "NotFoundError",
    "StorageError",
    "Subscription",
]
