"""
shopledger.providers.firebase_identity

Identity provider backed by Firebase Authentication.

Responsibilities:
- Drive the Identity Toolkit REST API (`accounts:*`) through `httpx`.
- Keep profile records (`users/<uid>`) in the document store, falling back to the auth
  record when the profile document is missing.
- Emit auth-state changes to subscribers on sign-in/sign-out, like the web SDK does.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import httpx

from shopledger.auth.models import Identity, LoginGrant, RegistrationProfile
from shopledger.observability.logging import get_logger
from shopledger.providers.documents import USERS_COLLECTION, DocumentStore
from shopledger.providers.errors import IdentityProviderError, UnsupportedOperationError
from shopledger.providers.identity import AuthStateCallback, IdentityProvider, Unsubscribe

log = get_logger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"

# Identity Toolkit error codes -> messages shown in the auth form.
_FRIENDLY_ERRORS: dict[str, str] = {
    "EMAIL_EXISTS": "An account with this email already exists.",
    "EMAIL_NOT_FOUND": "Invalid email or password.",
    "INVALID_PASSWORD": "Invalid email or password.",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password.",
    "USER_DISABLED": "This account has been disabled.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Please try again later.",
    "EXPIRED_OOB_CODE": "This link has expired. Please request a new one.",
    "INVALID_OOB_CODE": "This link is invalid or has already been used.",
    "WEAK_PASSWORD": "Password is too weak.",
    "INVALID_ID_TOKEN": "Your session is no longer valid. Please log in again.",
}


class FirebaseIdentityProvider(IdentityProvider):
    name = "firebase"

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        api_key: str,
        documents: DocumentStore | None = None,
        federated_provider_id: str = "google.com",
        request_uri: str = "http://localhost",
    ) -> None:
        self._http = http
        self._api_key = api_key
        self._documents = documents
        self._federated_provider_id = federated_provider_id
        self._request_uri = request_uri

        # Signed-in user for this process (the web SDK keeps the same in memory).
        self._current: Identity | None = None
        self._id_token: str | None = None
        self._refresh_token: str | None = None
        self._listeners: list[AuthStateCallback] = []

    async def _call(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            r = await self._http.post(
                f"{IDENTITY_TOOLKIT_URL}/accounts:{endpoint}",
                params={"key": self._api_key},
                json=payload,
            )
        except httpx.HTTPError as e:
            log.warning("firebase_transport_error", endpoint=endpoint, error=str(e))
            raise IdentityProviderError("Network error. Please try again.") from e
        if r.is_error:
            raise IdentityProviderError(_firebase_message(r))
        body = r.json()
        return body if isinstance(body, dict) else {}

    async def register(self, profile: RegistrationProfile) -> str:
        body = await self._call(
            "signUp",
            {"email": profile.email, "password": profile.password, "returnSecureToken": True},
        )
        uid = str(body.get("localId", ""))
        id_token = str(body.get("idToken", ""))
        await self._call("update", {"idToken": id_token, "displayName": profile.name})
        await self._save_profile(
            uid,
            {
                "id": uid,
                "name": profile.name,
                "email": profile.email,
                "role": str(profile.role),
                "status": "active",
                "createdAt": datetime.now(tz=UTC).isoformat(),
                "isEmailVerified": False,
            },
        )
        await self._call("sendOobCode", {"requestType": "VERIFY_EMAIL", "idToken": id_token})
        return "Registration successful! Please check your email to verify your account."

    async def login(self, email: str, password: str) -> LoginGrant:
        body = await self._call(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        user = await self._profile_for(body)
        return self._signed_in(user, body)

    async def login_with_federated_provider(self, credential: str | None = None) -> LoginGrant:
        if not credential:
            raise IdentityProviderError("A federated sign-in credential is required.")
        body = await self._call(
            "signInWithIdp",
            {
                "postBody": f"id_token={credential}&providerId={self._federated_provider_id}",
                "requestUri": self._request_uri,
                "returnSecureToken": True,
                "returnIdpCredential": True,
            },
        )
        user = await self._profile_for(body, create_missing=True)
        return self._signed_in(user, body)

    async def logout(self) -> None:
        # Identity Toolkit has no server-side sign-out; dropping the tokens is the sign-out.
        self._current = None
        self._id_token = None
        self._refresh_token = None
        self._emit(None)

    async def get_current_user(self) -> Identity:
        if self._id_token is None:
            raise IdentityProviderError("No user logged in")
        body = await self._call("lookup", {"idToken": self._id_token})
        users = body.get("users") or []
        if not users:
            raise IdentityProviderError("No user logged in")
        return await self._profile_for(users[0])

    def on_auth_state_change(self, callback: AuthStateCallback) -> Unsubscribe:
        self._listeners.append(callback)
        callback(self._current)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    async def request_password_reset(self, email: str) -> str:
        await self._call("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})
        return "Password reset email sent! Please check your inbox."

    async def reset_password(self, token: str, new_password: str) -> str:
        await self._call("resetPassword", {"oobCode": token, "newPassword": new_password})
        return "Your password has been reset. You can now log in."

    async def verify_email(self, token: str) -> str:
        body = await self._call("update", {"oobCode": token})
        uid = body.get("localId")
        if uid and self._documents is not None:
            await self._save_profile(str(uid), {"isEmailVerified": True})
        return "Email verified successfully."

    async def change_password(self, old_password: str, new_password: str) -> str:
        if self._current is None:
            raise IdentityProviderError("No user logged in")
        # Re-authenticate first so a stolen session cannot change the password.
        body = await self._call(
            "signInWithPassword",
            {"email": self._current.email, "password": old_password, "returnSecureToken": True},
        )
        updated = await self._call(
            "update",
            {"idToken": body.get("idToken"), "password": new_password, "returnSecureToken": True},
        )
        self._id_token = updated.get("idToken") or self._id_token
        self._refresh_token = updated.get("refreshToken") or self._refresh_token
        return "Password changed successfully."

    async def _profile_for(self, auth_record: dict[str, Any], *, create_missing: bool = False) -> Identity:
        uid = str(auth_record.get("localId", ""))
        fallback = {
            "id": uid,
            "name": auth_record.get("displayName") or "",
            "email": auth_record.get("email") or "",
            "role": "user",
            "status": "active",
            "isEmailVerified": bool(auth_record.get("emailVerified", False)),
        }
        doc = None
        if self._documents is not None:
            try:
                doc = await self._documents.get_document(USERS_COLLECTION, uid)
            except UnsupportedOperationError:
                doc = None
        if doc is None:
            if create_missing:
                await self._save_profile(uid, {**fallback, "createdAt": datetime.now(tz=UTC).isoformat()})
            return Identity.from_mapping(fallback)
        return Identity.from_mapping({**fallback, **doc})

    async def _save_profile(self, uid: str, fields: dict[str, Any]) -> None:
        if self._documents is None:
            return
        await self._documents.upsert_merge(USERS_COLLECTION, uid, fields)

    def _signed_in(self, user: Identity, body: dict[str, Any]) -> LoginGrant:
        self._current = user
        self._id_token = str(body.get("idToken", ""))
        refresh = body.get("refreshToken")
        self._refresh_token = refresh if isinstance(refresh, str) else None
        self._emit(user)
        return LoginGrant(user=user, access_token=self._id_token, refresh_token=self._refresh_token)

    def _emit(self, user: Identity | None) -> None:
        for callback in list(self._listeners):
            callback(user)


def _firebase_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"Authentication service error ({response.status_code})"
    raw = ""
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        raw = str(body["error"].get("message", ""))
    # Codes may carry a suffix, e.g. "WEAK_PASSWORD : Password should be at least 6 characters".
    code = raw.split(":", 1)[0].strip()
    return _FRIENDLY_ERRORS.get(code, raw or f"Authentication service error ({response.status_code})")


# --- Module Notes -----------------------------------------------------------
# Tokens live in memory only; persistence across restarts is the controller's credential
# holder + snapshot fallback, exactly as with the web SDK's local persistence disabled.
