"""
shopledger.notifications.client

Client for the email relay service.

Responsibilities:
- POST messages to `/api/email/send` on the relay.
- Surface relay and transport failures as `EmailRelayError`.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from shopledger.notifications.templates import EmailMessage
from shopledger.observability.logging import get_logger

log = get_logger(__name__)


class EmailRelayError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class RelayReceipt:
    message_id: str | None
    fallback: bool = False


class EmailRelayClient:
    """`http` must carry the relay base url (see `Settings.email_relay_base_url`)."""

    def __init__(self, *, http: httpx.AsyncClient) -> None:
        self._http = http

    async def send(self, message: EmailMessage) -> RelayReceipt:
        try:
            r = await self._http.post("/api/email/send", json=message.to_payload())
        except httpx.HTTPError as e:
            log.warning("email_relay_unreachable", error=str(e))
            raise EmailRelayError("Email service is unreachable") from e

        try:
            body = r.json()
        except ValueError:
            body = {}
        if r.is_error or not isinstance(body, dict) or not body.get("success"):
            error = body.get("error") if isinstance(body, dict) else None
            log.warning("email_relay_rejected", status_code=r.status_code, error=error)
            raise EmailRelayError(str(error or f"Email relay failed with status {r.status_code}"))

        log.info("email_relayed", kind=message.kind, fallback=bool(body.get("fallback")))
        message_id = body.get("messageId")
        return RelayReceipt(
            message_id=str(message_id) if message_id is not None else None,
            fallback=bool(body.get("fallback", False)),
        )
