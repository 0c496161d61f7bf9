"""
shopledger.providers.http_identity

Identity provider backed by a REST auth API.

Responsibilities:
- Call the `/auth/*` endpoints with a shared `httpx.AsyncClient`.
- Attach the stored access token as a bearer credential.
- Translate HTTP/transport failures into `IdentityProviderError` with a displayable message.
"""

from __future__ import annotations

from typing import Any

import httpx

from shopledger.auth.credentials import CredentialHolder
from shopledger.auth.models import Identity, LoginGrant, RegistrationProfile
from shopledger.observability.logging import get_logger
from shopledger.providers.errors import IdentityProviderError
from shopledger.providers.identity import IdentityProvider

log = get_logger(__name__)


class HttpIdentityProvider(IdentityProvider):
    """
    Expects `http` to carry the API base url (e.g. `http://localhost:3001/api`).
    No live auth-state stream: the controller uses the one-shot `get_current_user` path.
    """

    name = "http-identity"

    def __init__(self, *, http: httpx.AsyncClient, credentials: CredentialHolder | None = None) -> None:
        self._http = http
        self._credentials = credentials

    def _authz(self) -> dict[str, str]:
        token = self._credentials.get_access_token() if self._credentials else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _call(self, method: str, path: str, *, json: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            r = await self._http.request(method, path, json=json, headers=self._authz())
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise IdentityProviderError(_error_message(e.response)) from e
        except httpx.HTTPError as e:
            log.warning("identity_http_transport_error", path=path, error=str(e))
            raise IdentityProviderError("Network error. Please try again.") from e
        if not r.content:
            return {}
        body = r.json()
        return body if isinstance(body, dict) else {}

    async def register(self, profile: RegistrationProfile) -> str:
        body = await self._call(
            "POST",
            "/auth/register",
            json={
                "name": profile.name,
                "email": profile.email,
                "password": profile.password,
                "role": str(profile.role),
            },
        )
        return str(body.get("message") or "Registration successful")

    async def login(self, email: str, password: str) -> LoginGrant:
        body = await self._call("POST", "/auth/login", json={"email": email, "password": password})
        return _grant(body)

    async def logout(self) -> None:
        await self._call("POST", "/auth/logout")

    async def get_current_user(self) -> Identity:
        body = await self._call("GET", "/auth/me")
        user = body.get("user")
        if not isinstance(user, dict):
            raise IdentityProviderError("No user logged in")
        return Identity.from_mapping(user)

    async def request_password_reset(self, email: str) -> str:
        body = await self._call("POST", "/auth/forgot-password", json={"email": email})
        return str(body.get("message") or "Password reset email sent")

    async def reset_password(self, token: str, new_password: str) -> str:
        body = await self._call(
            "POST", "/auth/reset-password", json={"token": token, "password": new_password}
        )
        return str(body.get("message") or "Password has been reset")

    async def verify_email(self, token: str) -> str:
        body = await self._call("POST", "/auth/verify-email", json={"token": token})
        return str(body.get("message") or "Email verified")

    async def change_password(self, old_password: str, new_password: str) -> str:
        body = await self._call(
            "POST",
            "/auth/change-password",
            json={"currentPassword": old_password, "newPassword": new_password},
        )
        return str(body.get("message") or "Password changed")


def _grant(body: dict[str, Any]) -> LoginGrant:
    user = body.get("user")
    token = body.get("accessToken")
    if not isinstance(user, dict) or not isinstance(token, str):
        raise IdentityProviderError("Unexpected response from authentication service")
    refresh = body.get("refreshToken")
    return LoginGrant(
        user=Identity.from_mapping(user),
        access_token=token,
        refresh_token=refresh if isinstance(refresh, str) else None,
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return f"Request failed with status {response.status_code}"


# --- Module Notes -----------------------------------------------------------
# Token refresh is not attempted here: an expired access token surfaces as a 401 message and
# the controller's startup check drops the cached session.
