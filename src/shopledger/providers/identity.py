"""
shopledger.providers.identity

Identity provider interface.

Responsibilities:
- Declare the full capability set every provider exposes.
- Fail unimplemented capabilities with `UnsupportedOperationError` instead of leaving them absent.
"""

from __future__ import annotations

from collections.abc import Callable

from shopledger.auth.models import Identity, LoginGrant, RegistrationProfile
from shopledger.providers.errors import UnsupportedOperationError

AuthStateCallback = Callable[[Identity | None], None]
Unsubscribe = Callable[[], None]


class IdentityProvider:
    name = "identity-provider"

    async def register(self, profile: RegistrationProfile) -> str:
        """Create the account; returns a user-facing message. Does not sign the user in."""
        raise UnsupportedOperationError(self.name, "register")

    async def login(self, email: str, password: str) -> LoginGrant:
        raise UnsupportedOperationError(self.name, "login")

    async def login_with_federated_provider(self, credential: str | None = None) -> LoginGrant:
        raise UnsupportedOperationError(self.name, "login_with_federated_provider")

    async def logout(self) -> None:
        raise UnsupportedOperationError(self.name, "logout")

    async def get_current_user(self) -> Identity:
        """Raises `IdentityProviderError` when nobody is signed in."""
        raise UnsupportedOperationError(self.name, "get_current_user")

    def on_auth_state_change(self, callback: AuthStateCallback) -> Unsubscribe:
        """
        Live auth-state stream. Implementations invoke `callback` with the current state
        once on subscribe and again on every change.
        """
        raise UnsupportedOperationError(self.name, "on_auth_state_change")

    async def request_password_reset(self, email: str) -> str:
        raise UnsupportedOperationError(self.name, "request_password_reset")

    async def reset_password(self, token: str, new_password: str) -> str:
        raise UnsupportedOperationError(self.name, "reset_password")

    async def verify_email(self, token: str) -> str:
        raise UnsupportedOperationError(self.name, "verify_email")

    async def change_password(self, old_password: str, new_password: str) -> str:
        raise UnsupportedOperationError(self.name, "change_password")


# --- Module Notes -----------------------------------------------------------
# The controller probes `on_auth_state_change` once at start and falls back to a one-shot
# `get_current_user` when it is unsupported.
