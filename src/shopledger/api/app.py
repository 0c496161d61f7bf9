"""
shopledger.api.app

FastAPI app factory for the email relay service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Own the shared outbound HTTP client and the configured mailer.
- Allow browser origins (the storefront calls the relay directly).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopledger.api.routers.email import router as email_router
from shopledger.api.routers.health import router as health_router
from shopledger.notifications.mailers import Mailer, mailer_from_settings
from shopledger.observability.logging import configure_logging, get_logger
from shopledger.observability.middleware import RequestContextMiddleware
from shopledger.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, mailer: Mailer | None = None) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        http = httpx.AsyncClient(timeout=settings.request_timeout_seconds)
        app.state.settings = settings
        app.state.http = http
        app.state.mailer = mailer or mailer_from_settings(settings, http=http)
        log.info("mailer_selected", mailer=app.state.mailer.name)
        try:
            yield
        finally:
            await http.aclose()
            log.info("shutdown")

    app = FastAPI(
        title="Shopledger Email Relay",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(health_router, tags=["health"])
    app.include_router(email_router, tags=["email"])

    return app


# --- Module Notes -----------------------------------------------------------
# `mailer` is injectable so tests can capture deliveries without touching a provider.
