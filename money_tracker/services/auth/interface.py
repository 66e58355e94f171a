"""
Abstract Auth Service Interface

The auth service owns identities; we only ask it to sign users in and out
and listen for the result. Like the client SDKs, every implementation keeps
a "current identity" and notifies listeners whenever it changes, no matter
which call caused the change.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from money_tracker.models.finance import Identity
from money_tracker.services.storage.interface import Subscription


AuthStateCallback = Callable[[Optional[Identity]], None]


class AuthServiceInterface(ABC):
    """
    Abstract interface for the authentication backend.

    Subclasses implement the four sign-in/out calls and report the outcome
    through _set_current(); listener bookkeeping lives here.
    """

    def __init__(self):
        self._current: Optional[Identity] = None
        self._listeners: dict[int, AuthStateCallback] = {}
        self._next_listener = 0
        self._listener_lock = threading.Lock()

    @property
    def current_identity(self) -> Optional[Identity]:
        return self._current

    def on_auth_state_changed(self, callback: AuthStateCallback) -> Subscription:
        """
        Register a listener for identity changes.

        The callback is invoked once immediately with the current identity
        (possibly None) and then after every change.
        """
        with self._listener_lock:
            listener_id = self._next_listener
            self._next_listener += 1
            self._listeners[listener_id] = callback

        def cancel() -> None:
            with self._listener_lock:
                self._listeners.pop(listener_id, None)

        callback(self._current)
        return Subscription(cancel, name="auth_state")

    def _set_current(self, identity: Optional[Identity]) -> None:
        self._current = identity
        with self._listener_lock:
            listeners = list(self._listeners.values())
        for callback in listeners:
            callback(identity)

    @abstractmethod
    async def sign_up_with_email(self, email: str, password: str) -> Identity:
        """
        Create an account and sign it in.

        Raises:
            EmailAlreadyInUseError, WeakPasswordError, AuthError
        """
        pass

    @abstractmethod
    async def sign_in_with_email(self, email: str, password: str) -> Identity:
        """
        Sign in with email and password.

        Raises:
            InvalidCredentialsError, AuthError
        """
        pass

    @abstractmethod
    async def sign_in_with_idp(self, provider_id: str, id_token: str) -> Identity:
        """
        Sign in with a federated provider's ID token (e.g. Google).

        Raises:
            InvalidCredentialsError, AuthError
        """
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """Forget the current identity."""
        pass


class AuthError(Exception):
    """Base exception for auth operations."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)


class InvalidCredentialsError(AuthError):
    """Email/password or provider token was rejected."""
    pass


class EmailAlreadyInUseError(AuthError):
    """An account already exists for this email."""
    pass


class WeakPasswordError(AuthError):
    """Password does not meet the provider's rules."""
    pass


class AuthServiceUnavailableError(AuthError):
    """Could not reach the auth service."""
    pass
