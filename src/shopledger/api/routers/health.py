"""
shopledger.api.routers.health

Liveness endpoint for the relay.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

router = APIRouter()


@router.get("/api/health")
async def health() -> dict[str, Any]:
    return {
        "ok": True,
        "service": "email",
        "timestamp": datetime.now(tz=UTC).isoformat().replace("+00:00", "Z"),
    }
