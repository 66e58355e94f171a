"""Auth services package."""

from money_tracker.services.auth.interface import (
    AuthError,
    AuthServiceInterface,
    AuthServiceUnavailableError,
    AuthStateCallback,
    EmailAlreadyInUseError,
    InvalidCredentialsError,
    WeakPasswordError,
)
from money_tracker.services.auth.firebase_auth import FirebaseAuthService
from money_tracker.services.auth.memory import InMemoryAuthService

__all__ = [
    "AuthError",
    "AuthServiceInterface",
    "AuthServiceUnavailableError",
    "AuthStateCallback",
    "EmailAlreadyInUseError",
    "FirebaseAuthService",
    "InMemoryAuthService",
    "InvalidCredentialsError",
    "WeakPasswordError",
]
