"""
shopledger.db.session

SQLAlchemy engine + session factory helpers.

Responsibilities:
- Create the engine for the local store from settings.
- Create the sessionmaker with safe defaults.
"""

from __future__ import annotations

from sqlalchemy import Engine, create_engine as sa_create_engine
from sqlalchemy.orm import Session, sessionmaker

from shopledger.settings import Settings


def create_engine(settings: Settings | None = None, *, url: str | None = None) -> Engine:
    storage_url = url or (settings.storage_url if settings is not None else "sqlite://")
    connect_args: dict[str, object] = {}
    if storage_url.startswith("sqlite"):
        # The controller may be driven from an event loop thread other than the creator's.
        connect_args["check_same_thread"] = False
    return sa_create_engine(storage_url, pool_pre_ping=True, connect_args=connect_args)


def create_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    # expire_on_commit=False avoids surprising lazy loads after commits.
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )


# --- Module Notes -----------------------------------------------------------
# The local store is synchronous on purpose: reads happen while building state and must
# not introduce suspension points between controller mutations.
