"""
shopledger.db.models

Persistence schema for the local store.

Responsibilities:
- Define `KeyValueEntry`: one serialized JSON value per storage key, the on-disk
  equivalent of a browser local-storage slot.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from shopledger.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(tz=UTC).replace(tzinfo=None)


class KeyValueEntry(Base):
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    # Raw JSON text; decoding happens in the store so malformed rows degrade to fallbacks.
    value: Mapped[str] = mapped_column(Text, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


# --- Module Notes -----------------------------------------------------------
# Values are stored as text rather than a JSON column so a corrupted row can still be read
# and rejected by the store instead of failing inside the driver.
