"""
shopledger.db.base

Declarative base shared by the local-store tables.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
