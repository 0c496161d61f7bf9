"""
shopledger.storage.scoped

Keyed store mapping a scope name to one persisted collection.

Responsibilities:
- Centralize the scope -> storage key derivation for carts.
- Derive the scope for an identity (`guest` when anonymous).
"""

from __future__ import annotations

from typing import Any

from shopledger.auth.models import Identity
from shopledger.storage.kv import KeyValueStore

GUEST_SCOPE = "guest"


def scope_for(identity: Identity | None) -> str:
    if identity is None:
        return GUEST_SCOPE
    return f"user:{identity.id}"


class ScopedCollectionStore:
    def __init__(self, kv: KeyValueStore, *, prefix: str) -> None:
        self._kv = kv
        self._prefix = prefix

    def key_for(self, scope: str) -> str:
        return f"{self._prefix}:{scope}"

    def load(self, scope: str) -> list[Any]:
        value = self._kv.get(self.key_for(scope), [])
        # A foreign value under our key reads as an empty collection.
        return list(value) if isinstance(value, list) else []

    def save(self, scope: str, items: list[Any]) -> None:
        self._kv.set(self.key_for(scope), items)

    def clear(self, scope: str) -> None:
        self._kv.remove(self.key_for(scope))


# --- Module Notes -----------------------------------------------------------
# Scopes are disjoint: nothing here merges one scope's collection into another.
