"""
In-Memory Auth Service

Accounts live in a dict for the lifetime of the process. Used with
``storage_backend=memory`` and by the test suite. Enforces the same rules
the Firebase backend reports: unique emails, six-character passwords and
matching credentials.
"""

import hashlib
from typing import Optional
from uuid import uuid4

from money_tracker.models.finance import Identity
from money_tracker.services.auth.interface import (
    AuthServiceInterface,
    EmailAlreadyInUseError,
    InvalidCredentialsError,
    WeakPasswordError,
)


MIN_PASSWORD_LENGTH = 6


def _hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class InMemoryAuthService(AuthServiceInterface):
    """Dict-backed auth service."""

    def __init__(self, initial_identity: Optional[Identity] = None):
        super().__init__()
        self._accounts: dict[str, tuple[str, Identity]] = {}
        self._federated: dict[tuple[str, str], Identity] = {}
        self._current = initial_identity

    async def sign_up_with_email(self, email: str, password: str) -> Identity:
        key = (email or "").strip().lower()
        if not key:
            raise InvalidCredentialsError("INVALID_EMAIL", code="INVALID_EMAIL")
        if key in self._accounts:
            raise EmailAlreadyInUseError("EMAIL_EXISTS", code="EMAIL_EXISTS")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise WeakPasswordError(
                f"WEAK_PASSWORD : Password should be at least {MIN_PASSWORD_LENGTH} characters",
                code="WEAK_PASSWORD",
            )

        identity = Identity(uid=uuid4().hex, email=key)
        self._accounts[key] = (_hash_password(password), identity)
        self._set_current(identity)
        return identity

    async def sign_in_with_email(self, email: str, password: str) -> Identity:
        account = self._accounts.get((email or "").strip().lower())
        if account is None or account[0] != _hash_password(password or ""):
            raise InvalidCredentialsError(
                "INVALID_LOGIN_CREDENTIALS", code="INVALID_LOGIN_CREDENTIALS"
            )

        identity = account[1]
        self._set_current(identity)
        return identity

    async def sign_in_with_idp(self, provider_id: str, id_token: str) -> Identity:
        if not id_token:
            raise InvalidCredentialsError(
                "INVALID_IDP_RESPONSE", code="INVALID_IDP_RESPONSE"
            )

        key = (provider_id, id_token)
        identity = self._federated.get(key)
        if identity is None:
            identity = Identity(uid=uuid4().hex, provider_id=provider_id)
            self._federated[key] = identity
        self._set_current(identity)
        return identity

    async def sign_out(self) -> None:
        self._set_current(None)
