"""
shopledger.db.repositories.kv

Repository for `KeyValueEntry` rows.

Responsibilities:
- Read, upsert and delete raw JSON text by key.
"""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from shopledger.db.models import KeyValueEntry


class KeyValueRepo:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_raw(self, key: str) -> str | None:
        stmt = select(KeyValueEntry.value).where(KeyValueEntry.key == key)
        return self._session.execute(stmt).scalar_one_or_none()

    def put_raw(self, key: str, value: str) -> None:
        entry = self._session.get(KeyValueEntry, key)
        if entry is None:
            self._session.add(KeyValueEntry(key=key, value=value))
        else:
            entry.value = value
        self._session.flush()

    def delete(self, key: str) -> None:
        self._session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))

    def keys(self, *, prefix: str = "") -> list[str]:
        stmt = select(KeyValueEntry.key).order_by(KeyValueEntry.key)
        if prefix:
            stmt = stmt.where(KeyValueEntry.key.startswith(prefix))
        return list(self._session.execute(stmt).scalars().all())


# --- Module Notes -----------------------------------------------------------
# Commit is owned by the caller (`storage.kv.SqlKeyValueStore`).
