"""
alembic.env

Alembic migration environment for the local key-value store.

Responsibilities:
- Expose `shopledger.db.models` metadata for autogeneration.
- Configure offline/online migration execution.

Notes:
- This module is executed by Alembic, not imported by the runtime.
"""

from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from shopledger.db import models  # noqa: F401  # registers tables on Base.metadata
from shopledger.db.base import Base
from shopledger.settings import Settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _get_storage_url() -> str:
    if "SHOPLEDGER_STORAGE_URL" in os.environ:
        return os.environ["SHOPLEDGER_STORAGE_URL"]
    return Settings().storage_url


def run_migrations_offline() -> None:
    context.configure(
        url=_get_storage_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = _get_storage_url()
    connectable = engine_from_config(configuration, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        # SQLite cannot ALTER most columns in place; batch mode rebuilds the table.
        context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()


# --- Module Notes -----------------------------------------------------------
# Keep this file aligned with `shopledger.db.models`; SQLite needs batch mode for ALTERs.
