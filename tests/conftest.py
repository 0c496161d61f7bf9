"""
tests.conftest

Shared fixtures: in-memory stores, a scriptable identity provider and token helpers.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from shopledger.auth.jwt import JwtConfig, issue_token
from shopledger.auth.models import Identity, LoginGrant, RegistrationProfile, Role
from shopledger.providers.documents import InMemoryDocumentStore
from shopledger.providers.errors import IdentityProviderError, UnsupportedOperationError
from shopledger.providers.identity import AuthStateCallback, IdentityProvider, Unsubscribe
from shopledger.session.activity import LocalActivitySource
from shopledger.settings import Settings
from shopledger.storage.kv import MemoryKeyValueStore

JWT_CFG = JwtConfig(alg="HS256", issuer="shopledger-tests", secret="test-secret")

ALICE = Identity(id="u-alice", name="Alice", email="alice@example.com")
ADMIN = Identity(id="u-admin", name="Root", email="root@example.com", role=Role.admin)


def make_token(subject: str = "u-alice", ttl: timedelta = timedelta(hours=1)) -> str:
    return issue_token(cfg=JWT_CFG, subject=subject, ttl=ttl)


class FakeIdentityProvider(IdentityProvider):
    """
    Scriptable provider. `live=True` enables the auth-state stream; `login_delay` and
    `gate` let tests interleave operations.
    """

    name = "fake"

    def __init__(self, *, live: bool = False, user: Identity = ALICE) -> None:
        self.live = live
        self.user = user
        self.current: Identity | None = None
        self.fail_login: str | None = None
        self.fail_logout = False
        self.login_delay = 0.0
        self.gate: asyncio.Event | None = None
        self.registered: list[RegistrationProfile] = []
        self.calls: list[str] = []
        self._listeners: list[AuthStateCallback] = []

    async def register(self, profile: RegistrationProfile) -> str:
        self.calls.append("register")
        self.registered.append(profile)
        return "Registration successful"

    async def login(self, email: str, password: str) -> LoginGrant:
        self.calls.append("login")
        if self.gate is not None:
            await self.gate.wait()
        if self.login_delay:
            await asyncio.sleep(self.login_delay)
        if self.fail_login:
            raise IdentityProviderError(self.fail_login)
        self.current = self.user
        self.emit(self.user)
        return LoginGrant(user=self.user, access_token=make_token(self.user.id), refresh_token="refresh-1")

    async def login_with_federated_provider(self, credential: str | None = None) -> LoginGrant:
        self.calls.append("login_with_federated_provider")
        return await self.login("", "")

    async def logout(self) -> None:
        self.calls.append("logout")
        if self.fail_logout:
            raise IdentityProviderError("Network error. Please try again.")
        self.current = None
        self.emit(None)

    async def get_current_user(self) -> Identity:
        self.calls.append("get_current_user")
        if self.current is None:
            raise IdentityProviderError("No user logged in")
        return self.current

    def on_auth_state_change(self, callback: AuthStateCallback) -> Unsubscribe:
        if not self.live:
            raise UnsupportedOperationError(self.name, "on_auth_state_change")
        self._listeners.append(callback)
        callback(self.current)
        return lambda: self._listeners.remove(callback)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def emit(self, user: Identity | None) -> None:
        for callback in list(self._listeners):
            callback(user)

    async def request_password_reset(self, email: str) -> str:
        return "Password reset email sent"


@pytest.fixture()
def settings() -> Settings:
    return Settings(env="test", session_timeout_seconds=0.05)


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture()
def documents() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture()
def activity() -> LocalActivitySource:
    return LocalActivitySource()


# --- Module Notes -----------------------------------------------------------
# FakeIdentityProvider emits to live listeners before returning a grant, like Firebase does.
