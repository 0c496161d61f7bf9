"""
tests.test_firebase_identity

Firebase provider against a mocked Identity Toolkit endpoint.
"""

from __future__ import annotations

import json

import httpx
import pytest

from shopledger.auth.models import RegistrationProfile
from shopledger.providers.documents import InMemoryDocumentStore
from shopledger.providers.errors import IdentityProviderError
from shopledger.providers.firebase_identity import FirebaseIdentityProvider


class Toolkit:
    """Records calls and answers per `accounts:<op>` endpoint."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []
        self.responses: dict[str, httpx.Response] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        assert request.url.params["key"] == "k"
        op = request.url.path.rsplit(":", 1)[1]
        self.calls.append((op, json.loads(request.content)))
        return self.responses.get(op) or httpx.Response(200, json={})


def _provider(toolkit: Toolkit, documents: InMemoryDocumentStore | None = None) -> tuple:
    http = httpx.AsyncClient(transport=httpx.MockTransport(toolkit))
    return http, FirebaseIdentityProvider(http=http, api_key="k", documents=documents)


@pytest.mark.asyncio
async def test_sign_in_prefers_profile_document_and_emits() -> None:
    toolkit = Toolkit()
    toolkit.responses["signInWithPassword"] = httpx.Response(
        200, json={"localId": "uid1", "email": "a@b.co", "idToken": "id", "refreshToken": "rt"}
    )
    documents = InMemoryDocumentStore()
    documents.put("users", "uid1", {"name": "Ada", "role": "admin"})
    http, provider = _provider(toolkit, documents)

    pushed: list = []
    provider.on_auth_state_change(pushed.append)
    async with http:
        grant = await provider.login("a@b.co", "pw")

    assert grant.user.name == "Ada"
    assert grant.user.is_admin
    assert grant.refresh_token == "rt"
    assert pushed == [None, grant.user]


@pytest.mark.asyncio
async def test_error_codes_map_to_friendly_messages() -> None:
    toolkit = Toolkit()
    toolkit.responses["signInWithPassword"] = httpx.Response(
        400, json={"error": {"code": 400, "message": "INVALID_LOGIN_CREDENTIALS"}}
    )
    toolkit.responses["signUp"] = httpx.Response(
        400, json={"error": {"message": "WEAK_PASSWORD : Password should be at least 6 characters"}}
    )
    http, provider = _provider(toolkit)
    async with http:
        with pytest.raises(IdentityProviderError, match="Invalid email or password."):
            await provider.login("a@b.co", "pw")
        with pytest.raises(IdentityProviderError, match="Password is too weak."):
            await provider.register(RegistrationProfile(name="A", email="a@b.co", password="Secret123!"))


@pytest.mark.asyncio
async def test_register_creates_profile_and_sends_verification() -> None:
    toolkit = Toolkit()
    toolkit.responses["signUp"] = httpx.Response(200, json={"localId": "uid2", "idToken": "id2"})
    documents = InMemoryDocumentStore()
    http, provider = _provider(toolkit, documents)
    async with http:
        message = await provider.register(RegistrationProfile(name="Bo", email="bo@b.co", password="Secret123!"))

    assert "verify" in message
    assert [op for op, _ in toolkit.calls] == ["signUp", "update", "sendOobCode"]
    assert toolkit.calls[2][1]["requestType"] == "VERIFY_EMAIL"
    profile = documents.peek("users", "uid2")
    assert profile is not None
    assert profile["role"] == "user"
    assert profile["status"] == "active"


@pytest.mark.asyncio
async def test_logout_emits_none_and_current_user_requires_session() -> None:
    toolkit = Toolkit()
    http, provider = _provider(toolkit)
    pushed: list = []
    unsubscribe = provider.on_auth_state_change(pushed.append)
    async with http:
        await provider.logout()
        with pytest.raises(IdentityProviderError, match="No user logged in"):
            await provider.get_current_user()
    unsubscribe()
    await provider.logout()
    assert pushed == [None, None]


@pytest.mark.asyncio
async def test_federated_sign_in_requires_credential() -> None:
    http, provider = _provider(Toolkit())
    async with http:
        with pytest.raises(IdentityProviderError):
            await provider.login_with_federated_provider(None)


# --- Module Notes -----------------------------------------------------------
# Toolkit answers every unlisted endpoint with an empty 200.
