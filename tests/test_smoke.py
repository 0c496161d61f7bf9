"""
tests.test_smoke

Minimal smoke tests to validate the relay can boot and serve its health endpoint.
"""

from __future__ import annotations

import httpx
import pytest

from shopledger.api.app import create_app
from shopledger.settings import Settings


@pytest.mark.asyncio
async def test_health_endpoint() -> None:
    app = create_app(settings=Settings(env="test"))

    # httpx ASGITransport does not manage lifespan; run it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.get("/api/health")
            assert r.status_code == 200
            body = r.json()
            assert body["ok"] is True
            assert body["service"] == "email"
            assert body["timestamp"].endswith("Z")
            assert r.headers["x-request-id"]


# --- Module Notes -----------------------------------------------------------
# With no SendGrid key or SMTP host configured the relay boots on the console mailer.
