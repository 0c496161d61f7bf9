"""
shopledger.db.init_db

Schema bootstrap helpers (dev/test convenience).
"""

from __future__ import annotations

from sqlalchemy import Engine

from shopledger.db import models  # noqa: F401  # register tables on Base.metadata
from shopledger.db.base import Base


def init_db(engine: Engine) -> None:
    """
    Create tables if they don't exist.
    Deployed stores should rely on Alembic migrations (`alembic/env.py`).
    """

    Base.metadata.create_all(engine)


# --- Module Notes -----------------------------------------------------------
# `storage.kv.SqlKeyValueStore.from_settings` calls this for dev/test environments.
