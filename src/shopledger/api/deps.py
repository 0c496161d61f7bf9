"""
shopledger.api.deps

FastAPI dependency wiring for the relay.

Responsibilities:
- Expose settings and the mailer created during app lifespan.
"""

from __future__ import annotations

from fastapi import Request

from shopledger.notifications.mailers import Mailer
from shopledger.settings import Settings


def settings_dep(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[no-any-return]


def mailer_dep(request: Request) -> Mailer:
    # Created on startup in `shopledger.api.app.create_app`.
    return request.app.state.mailer  # type: ignore[no-any-return]
