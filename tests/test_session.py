"""Tests for the auth backends and SessionState."""

import asyncio

import pytest

from money_tracker.models import Identity
from money_tracker.services.auth import (
    EmailAlreadyInUseError,
    InMemoryAuthService,
    InvalidCredentialsError,
    WeakPasswordError,
)
from money_tracker.stores import SessionState


class TestInMemoryAuth:

    def test_duplicate_email(self, auth):
        asyncio.run(auth.sign_up_with_email("a@example.com", "secret123"))
        with pytest.raises(EmailAlreadyInUseError):
            asyncio.run(auth.sign_up_with_email("A@Example.com", "secret123"))

    def test_weak_password(self, auth):
        with pytest.raises(WeakPasswordError):
            asyncio.run(auth.sign_up_with_email("a@example.com", "123"))

    def test_wrong_password(self, auth):
        asyncio.run(auth.sign_up_with_email("a@example.com", "secret123"))
        with pytest.raises(InvalidCredentialsError):
            asyncio.run(auth.sign_in_with_email("a@example.com", "wrong-pass"))

    def test_federated_identity_is_stable(self, auth):
        first = asyncio.run(auth.sign_in_with_idp("google.com", "token-1"))
        second = asyncio.run(auth.sign_in_with_idp("google.com", "token-1"))
        assert first.uid == second.uid
        assert first.provider_id == "google.com"

    def test_listener_called_immediately(self, auth):
        seen = []
        auth.on_auth_state_changed(seen.append)
        assert seen == [None]


class TestSessionState:

    def test_loading_until_started(self, auth):
        """Loading stays true until the first auth notification."""
        state = SessionState(auth)
        assert state.loading
        state.start()
        assert not state.loading
        assert state.identity is None

    def test_restores_existing_identity(self):
        """An identity already known to the auth service shows up on start."""
        identity = Identity(uid="u1", email="u1@example.com")
        state = SessionState(InMemoryAuthService(initial_identity=identity)).start()
        assert state.identity == identity
        assert state.is_authenticated

    def test_register_sets_identity(self, session):
        identity = asyncio.run(session.register("bob@example.com", "secret123"))
        assert session.identity == identity

    def test_sign_in_and_out(self, session):
        asyncio.run(session.register("bob@example.com", "secret123"))
        asyncio.run(session.sign_out())
        assert session.identity is None

        identity = asyncio.run(session.sign_in("bob@example.com", "secret123"))
        assert session.identity == identity

    def test_federated_sign_in(self, session):
        identity = asyncio.run(session.sign_in_with_federated_provider("id-token"))
        assert session.identity == identity
        assert identity.provider_id == "google.com"

    def test_failure_propagates_unchanged(self, session):
        """Auth errors reach the caller as-is and leave the identity alone."""
        with pytest.raises(InvalidCredentialsError):
            asyncio.run(session.sign_in("nobody@example.com", "secret123"))
        assert session.identity is None

    def test_external_change_updates_identity(self, auth, session):
        """The listener follows changes not made through the session."""
        identity = asyncio.run(auth.sign_in_with_idp("google.com", "tok"))
        assert session.identity == identity

    def test_on_change_notified(self, session):
        changes = []
        session.on_change(lambda: changes.append(session.identity))
        asyncio.run(session.register("bob@example.com", "secret123"))
        assert len(changes) == 1
        assert changes[0] is not None

    def test_close_stops_following(self, auth, session):
        session.close()
        asyncio.run(auth.sign_in_with_idp("google.com", "tok"))
        assert session.identity is None

    def test_wait_until_settled(self, auth):
        state = SessionState(auth).start()
        assert asyncio.run(state.wait_until_settled(timeout=1))
        assert not state.loading

    def test_wait_does_not_reregister_after_close(self, auth):
        """Waiting on a closed session leaves the listener unregistered."""
        state = SessionState(auth).start()
        state.close()

        assert asyncio.run(state.wait_until_settled(timeout=1))
        asyncio.run(auth.sign_in_with_idp("google.com", "tok"))
        assert state.identity is None

    def test_wait_times_out_when_never_started(self, auth):
        state = SessionState(auth)
        assert asyncio.run(state.wait_until_settled(timeout=0.05)) is False
        assert state.loading
