"""
Session State

Tracks the signed-in identity and whether the auth service has reported
for the first time yet. The identity can change at any moment through the
auth-state listener, not only as a result of the calls made here, so
callers should read `identity` when they need it instead of caching it.
"""

import asyncio
import threading
from typing import Optional

from money_tracker.audit import ActivityLogger
from money_tracker.models.activity import ActivityEventType
from money_tracker.models.finance import Identity
from money_tracker.services.auth import AuthServiceInterface
from money_tracker.services.storage import Subscription
from money_tracker.stores.base import Observable


class SessionState(Observable):
    """
    The current identity plus a loading flag.

    `loading` stays True until the auth service delivers its first
    auth-state notification, which happens during start().
    """

    def __init__(
        self,
        auth: AuthServiceInterface,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        super().__init__()
        self._auth = auth
        self._logger = activity_logger or ActivityLogger()
        self._identity: Optional[Identity] = None
        self._loading = True
        self._settled = threading.Event()
        self._auth_subscription: Optional[Subscription] = None

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    # ------------------------------------------------------------------
    # Auth-state listener
    # ------------------------------------------------------------------

    def start(self) -> "SessionState":
        """Register the auth-state listener. Safe to call more than once."""
        if self._auth_subscription is None:
            self._auth_subscription = self._auth.on_auth_state_changed(
                self._on_auth_state
            )
        return self

    def close(self) -> None:
        """Unregister the auth-state listener."""
        if self._auth_subscription is not None:
            self._auth_subscription.unsubscribe()
            self._auth_subscription = None

    async def wait_until_settled(self, timeout: Optional[float] = None) -> bool:
        """
        Suspend until the first auth-state notification has arrived.

        Does not register the listener; call start() first.

        Returns:
            True once settled, False if `timeout` seconds passed first
        """
        if self._settled.is_set():
            return True
        return await asyncio.to_thread(self._settled.wait, timeout)

    def _on_auth_state(self, identity: Optional[Identity]) -> None:
        first = self._loading
        changed = identity != self._identity
        self._identity = identity
        self._loading = False
        self._settled.set()

        if changed and not first:
            self._logger.log_session_event(
                ActivityEventType.AUTH_STATE_CHANGED,
                identity.uid if identity else None,
            )
        if changed or first:
            self._emit()

    def _set_identity(self, identity: Optional[Identity]) -> None:
        if identity != self._identity:
            self._identity = identity
            self._emit()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def register(self, email: str, password: str) -> Identity:
        """Create an email/password account and sign it in."""
        try:
            identity = await self._auth.sign_up_with_email(email, password)
        except Exception as e:
            self._logger.log_auth_failed("register", e)
            raise

        self._set_identity(identity)
        self._logger.log_session_event(
            ActivityEventType.USER_REGISTERED, identity.uid, identity.provider_id
        )
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        """Sign in with email and password."""
        try:
            identity = await self._auth.sign_in_with_email(email, password)
        except Exception as e:
            self._logger.log_auth_failed("sign_in", e)
            raise

        self._set_identity(identity)
        self._logger.log_session_event(
            ActivityEventType.USER_SIGNED_IN, identity.uid, identity.provider_id
        )
        return identity

    async def sign_in_with_federated_provider(
        self,
        id_token: str,
        provider_id: str = "google.com",
    ) -> Identity:
        """Sign in with an ID token obtained from a federated provider."""
        try:
            identity = await self._auth.sign_in_with_idp(provider_id, id_token)
        except Exception as e:
            self._logger.log_auth_failed("sign_in_with_federated_provider", e)
            raise

        self._set_identity(identity)
        self._logger.log_session_event(
            ActivityEventType.USER_SIGNED_IN, identity.uid, provider_id
        )
        return identity

    async def sign_out(self) -> None:
        """Sign out and clear the local identity."""
        previous = self._identity
        try:
            await self._auth.sign_out()
        except Exception as e:
            self._logger.log_auth_failed("sign_out", e)
            raise

        self._set_identity(None)
        self._logger.log_session_event(
            ActivityEventType.USER_SIGNED_OUT, previous.uid if previous else None
        )
