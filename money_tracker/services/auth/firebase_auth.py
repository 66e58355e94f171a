"""
Firebase Authentication via the Identity Toolkit REST API

The Admin SDK cannot sign a user in with a password, so sign-in goes through
the same REST endpoints the web SDK uses:
- accounts:signUp              (email/password registration)
- accounts:signInWithPassword  (email/password sign-in)
- accounts:signInWithIdp       (federated sign-in with a provider ID token)

Failures are mapped onto the AuthError hierarchy. There is no retry: a
rejected or failed call surfaces to the caller immediately.
"""

from typing import Any, Optional

import requests

from money_tracker.config import get_settings
from money_tracker.models.finance import Identity
from money_tracker.services.auth.interface import (
    AuthError,
    AuthServiceInterface,
    AuthServiceUnavailableError,
    EmailAlreadyInUseError,
    InvalidCredentialsError,
    WeakPasswordError,
)


IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts:{method}"

# Identity Toolkit error codes -> our exceptions
_ERROR_CODES: dict[str, type[AuthError]] = {
    "EMAIL_NOT_FOUND": InvalidCredentialsError,
    "INVALID_PASSWORD": InvalidCredentialsError,
    "INVALID_LOGIN_CREDENTIALS": InvalidCredentialsError,
    "INVALID_EMAIL": InvalidCredentialsError,
    "INVALID_IDP_RESPONSE": InvalidCredentialsError,
    "USER_DISABLED": InvalidCredentialsError,
    "EMAIL_EXISTS": EmailAlreadyInUseError,
    "WEAK_PASSWORD": WeakPasswordError,
}


def _error_from_response(response: requests.Response, fallback: str) -> AuthError:
    """Translate an Identity Toolkit error body into an AuthError."""
    try:
        message = response.json().get("error", {}).get("message", fallback)
    except ValueError:
        message = fallback

    # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters"
    code = message.split(" ", 1)[0].strip()
    error_cls = _ERROR_CODES.get(code, AuthError)
    return error_cls(message, code=code)


class FirebaseAuthService(AuthServiceInterface):
    """
    Auth service backed by Firebase Authentication.

    Holds the ID token of the signed-in user in memory only.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        super().__init__()
        self._settings = get_settings().firebase
        self._http = session or requests.Session()
        self._id_token: Optional[str] = None

    @property
    def id_token(self) -> Optional[str]:
        return self._id_token

    def _post(self, method: str, payload: dict[str, Any], fallback: str) -> dict[str, Any]:
        url = IDENTITY_TOOLKIT_URL.format(method=method)
        try:
            response = self._http.post(
                url,
                params={"key": self._settings.api_key},
                json=payload,
                timeout=self._settings.request_timeout_seconds,
            )
        except requests.RequestException as e:
            raise AuthServiceUnavailableError(f"Could not reach Firebase Auth: {e}")

        if response.status_code != 200:
            raise _error_from_response(response, fallback)
        return response.json()

    def _accept(self, data: dict[str, Any], provider_id: str) -> Identity:
        identity = Identity(
            uid=data["localId"],
            email=data.get("email"),
            display_name=data.get("displayName") or None,
            photo_url=data.get("photoUrl") or None,
            provider_id=data.get("providerId", provider_id),
        )
        self._id_token = data.get("idToken")
        self._set_current(identity)
        return identity

    async def sign_up_with_email(self, email: str, password: str) -> Identity:
        data = self._post(
            "signUp",
            {"email": email, "password": password, "returnSecureToken": True},
            fallback="Sign up failed",
        )
        return self._accept(data, "password")

    async def sign_in_with_email(self, email: str, password: str) -> Identity:
        data = self._post(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
            fallback="Login failed",
        )
        return self._accept(data, "password")

    async def sign_in_with_idp(self, provider_id: str, id_token: str) -> Identity:
        request_uri = (
            f"https://{self._settings.auth_domain}"
            if self._settings.auth_domain
            else "http://localhost"
        )
        data = self._post(
            "signInWithIdp",
            {
                "postBody": f"id_token={id_token}&providerId={provider_id}",
                "requestUri": request_uri,
                "returnSecureToken": True,
                "returnIdpCredential": True,
            },
            fallback="Federated sign in failed",
        )
        return self._accept(data, provider_id)

    async def sign_out(self) -> None:
        self._id_token = None
        self._set_current(None)
