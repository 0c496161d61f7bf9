"""
shopledger.auth.credentials

Credential holder.

Responsibilities:
- Store the access and refresh tokens with a holder lifetime (cookie semantics).
- Store the cached identity snapshot used to restore a session offline.
- Clear everything in one idempotent call.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from shopledger.auth.models import Identity
from shopledger.storage.keys import ACCESS_TOKEN_KEY, IDENTITY_SNAPSHOT_KEY, REFRESH_TOKEN_KEY
from shopledger.storage.kv import KeyValueStore

DEFAULT_ACCESS_TTL = timedelta(days=1)
DEFAULT_REFRESH_TTL = timedelta(days=7)


class CredentialHolder:
    def __init__(self, kv: KeyValueStore, *, clock: Callable[[], float] = time.time) -> None:
        self._kv = kv
        self._clock = clock

    def get_access_token(self) -> str | None:
        return self._get_token(ACCESS_TOKEN_KEY)

    def set_access_token(self, token: str, ttl: timedelta = DEFAULT_ACCESS_TTL) -> None:
        self._set_token(ACCESS_TOKEN_KEY, token, ttl)

    def get_refresh_token(self) -> str | None:
        return self._get_token(REFRESH_TOKEN_KEY)

    def set_refresh_token(self, token: str, ttl: timedelta = DEFAULT_REFRESH_TTL) -> None:
        self._set_token(REFRESH_TOKEN_KEY, token, ttl)

    def get_identity_snapshot(self) -> Identity | None:
        raw = self._kv.get(IDENTITY_SNAPSHOT_KEY, None)
        if not isinstance(raw, dict):
            return None
        try:
            return Identity.from_mapping(raw)
        except ValueError:
            return None

    def set_identity_snapshot(self, identity: Identity) -> None:
        self._kv.set(IDENTITY_SNAPSHOT_KEY, identity.to_dict())

    def clear_all(self) -> None:
        self._kv.remove(ACCESS_TOKEN_KEY)
        self._kv.remove(REFRESH_TOKEN_KEY)
        self._kv.remove(IDENTITY_SNAPSHOT_KEY)

    def _get_token(self, key: str) -> str | None:
        entry: Any = self._kv.get(key, None)
        if not isinstance(entry, dict):
            return None
        token = entry.get("value")
        expires_at = entry.get("expires_at")
        if not isinstance(token, str) or not isinstance(expires_at, (int, float)):
            return None
        if expires_at <= self._clock():
            # Holder lifetime elapsed; behave like an expired cookie.
            self._kv.remove(key)
            return None
        return token

    def _set_token(self, key: str, token: str, ttl: timedelta) -> None:
        self._kv.set(key, {"value": token, "expires_at": self._clock() + ttl.total_seconds()})


# --- Module Notes -----------------------------------------------------------
# Holder lifetime is independent of the token's own `exp` claim; the controller checks both
# (presence here, freshness via `auth.jwt.is_token_valid`).
