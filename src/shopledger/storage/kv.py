"""
shopledger.storage.kv

Persistent key-value store with JSON (de)serialization.

Responsibilities:
- `get` returns the fallback on a missing key or malformed stored JSON.
- `set`/`remove` swallow serialization and backend failures (best-effort persistence).

The in-memory controller state stays authoritative for the running process; this store
only has to be good enough to restore it on the next start.
"""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from shopledger.db.init_db import init_db
from shopledger.db.repositories.kv import KeyValueRepo
from shopledger.db.session import create_engine, create_sessionmaker
from shopledger.observability.logging import get_logger
from shopledger.settings import Settings

log = get_logger(__name__)


class KeyValueStore:
    """
    Template for concrete stores: subclasses provide raw text access, this class owns the
    JSON handling and the never-raise contract.
    """

    def get(self, key: str, fallback: Any = None) -> Any:
        try:
            raw = self._read(key)
        except Exception as e:  # noqa: BLE001  # backend failures degrade to the fallback
            log.warning("kv_read_failed", key=key, error=str(e))
            return fallback
        if raw is None:
            return fallback
        try:
            return json.loads(raw)
        except ValueError:
            log.warning("kv_malformed_value", key=key)
            return fallback

    def set(self, key: str, value: Any) -> None:
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as e:
            log.warning("kv_serialize_failed", key=key, error=str(e))
            return
        try:
            self._write(key, raw)
        except Exception as e:  # noqa: BLE001
            log.warning("kv_write_failed", key=key, error=str(e))

    def remove(self, key: str) -> None:
        try:
            self._delete(key)
        except Exception as e:  # noqa: BLE001
            log.warning("kv_remove_failed", key=key, error=str(e))

    def _read(self, key: str) -> str | None:
        raise NotImplementedError

    def _write(self, key: str, raw: str) -> None:
        raise NotImplementedError

    def _delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store; used by tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def raw(self, key: str) -> str | None:
        return self._data.get(key)

    def keys(self, *, prefix: str = "") -> list[str]:
        return sorted(k for k in self._data if k.startswith(prefix))

    def _read(self, key: str) -> str | None:
        return self._data.get(key)

    def _write(self, key: str, raw: str) -> None:
        self._data[key] = raw

    def _delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqlKeyValueStore(KeyValueStore):
    """SQLAlchemy-backed store (SQLite file by default)."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @classmethod
    def from_settings(cls, settings: Settings) -> SqlKeyValueStore:
        engine = create_engine(settings)
        if settings.env in ("dev", "test"):
            init_db(engine)
        return cls(create_sessionmaker(engine))

    def keys(self, *, prefix: str = "") -> list[str]:
        with self._session_factory() as session:
            return KeyValueRepo(session).keys(prefix=prefix)

    def _read(self, key: str) -> str | None:
        with self._session_factory() as session:
            return KeyValueRepo(session).get_raw(key)

    def _write(self, key: str, raw: str) -> None:
        with self._session_factory() as session:
            try:
                KeyValueRepo(session).put_raw(key, raw)
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                raise

    def _delete(self, key: str) -> None:
        with self._session_factory() as session:
            KeyValueRepo(session).delete(key)
            session.commit()


# --- Module Notes -----------------------------------------------------------
# Quota-style failures (disk full, locked database) surface as SQLAlchemyError and are
# swallowed by `set`; callers never need a try/except around persistence.
