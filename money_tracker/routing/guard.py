"""
Route Guard

Decides, for every navigation, whether to let the user through or send
them somewhere else.

IMPORTANT: No decision is made while the session is still loading. On a
cold start the identity is unknown until the auth service reports, and
redirecting before then would bounce a signed-in user to the login page.
resolve() therefore waits for the session to settle first.
"""

from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional

from pydantic import BaseModel

if TYPE_CHECKING:
    from money_tracker.stores.session import SessionState


class GuardAction(str, Enum):
    ALLOW = "allow"
    REDIRECT = "redirect"
    DEFER = "defer"


class GuardDecision(BaseModel):
    """Outcome of a navigation check."""

    action: GuardAction
    target: Optional[str] = None

    @classmethod
    def allow(cls) -> "GuardDecision":
        return cls(action=GuardAction.ALLOW)

    @classmethod
    def redirect(cls, target: str) -> "GuardDecision":
        return cls(action=GuardAction.REDIRECT, target=target)

    @classmethod
    def defer(cls) -> "GuardDecision":
        return cls(action=GuardAction.DEFER)


class RouteGuard:
    """Navigation gate driven by the session's identity and loading flag."""

    def __init__(
        self,
        session: "SessionState",
        public_paths: Optional[Iterable[str]] = None,
        login_path: str = "/login",
        register_path: str = "/register",
        home_path: str = "/",
    ):
        self._session = session
        self.login_path = login_path
        self.register_path = register_path
        self.home_path = home_path
        # Signed-in users are sent home from these
        self.auth_paths = frozenset({login_path, register_path})
        self.public_paths = (
            frozenset(public_paths)
            if public_paths is not None
            else self.auth_paths | {home_path}
        )

    def evaluate(self, path: str) -> GuardDecision:
        """Decide right now, deferring if the session hasn't settled."""
        if self._session.loading:
            return GuardDecision.defer()

        authenticated = self._session.is_authenticated
        if authenticated and path in self.auth_paths:
            return GuardDecision.redirect(self.home_path)

        if path in self.public_paths:
            return GuardDecision.allow()

        if not authenticated:
            return GuardDecision.redirect(self.login_path)

        return GuardDecision.allow()

    async def resolve(self, path: str) -> GuardDecision:
        """Wait for the session to settle, then decide. Never defers."""
        await self._session.wait_until_settled()
        return self.evaluate(path)
