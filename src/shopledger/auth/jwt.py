"""
shopledger.auth.jwt

JWT helpers.

Responsibilities:
- Read the `exp` claim of an opaque access token without verifying its signature
  (the identity provider owns verification; the client only needs freshness).
- Issue short-lived HS256 tokens for dev/test identity backends.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt.utils import base64url_decode


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    secret: str


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    claims: dict[str, Any] | None = None,
    ttl: timedelta = timedelta(hours=1),
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        **(claims or {}),
        "iss": cfg.issuer,
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def unverified_claims(token: str) -> dict[str, Any] | None:
    """
    Decode only the payload segment. Header and signature stay opaque: some providers
    issue tokens whose other segments are not JSON or not base64url.
    """

    parts = token.split(".")
    if len(parts) != 3:
        return None
    try:
        claims = json.loads(base64url_decode(parts[1]))
    except (ValueError, TypeError):
        return None
    return claims if isinstance(claims, dict) else None


def is_token_valid(token: str | None, *, now: float | None = None) -> bool:
    """
    True when `token` decodes and its `exp` (seconds since epoch) is still in the future.
    Never raises.
    """

    if not token or not isinstance(token, str):
        return False
    claims = unverified_claims(token)
    if claims is None:
        return False
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return False
    current = time.time() if now is None else now
    return exp > current


# --- Module Notes -----------------------------------------------------------
# `is_token_valid` is used by the controller at startup and when an auth-state push
# reports "no identity" (fallback to the cached session).
