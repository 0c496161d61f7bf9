"""
shopledger.api.routers.email

Transactional email endpoints.

Responsibilities:
- `POST /api/email/send`: validate the request, hand it to the configured mailer.
- `GET /api/email/verify-smtp`: SMTP connectivity diagnostics.
"""

from __future__ import annotations

import smtplib
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shopledger.api.deps import mailer_dep, settings_dep
from shopledger.notifications.mailers import Mailer, MailDeliveryError, smtp_mailer
from shopledger.notifications.templates import EmailMessage
from shopledger.observability.logging import get_logger
from shopledger.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/api/email")


class SendEmailRequest(BaseModel):
    to: str | None = None
    subject: str | None = None
    html: str | None = None
    text: str | None = None
    kind: str = "transactional"


@router.post("/send", response_model=None)
async def send_email(
    body: SendEmailRequest | None = None,
    mailer: Mailer = Depends(mailer_dep),
) -> dict[str, Any] | JSONResponse:
    if body is None or not body.to or not body.subject or not body.html:
        return JSONResponse(status_code=400, content={"error": "Missing required fields: to, subject, html"})

    message = EmailMessage(
        to=body.to,
        subject=body.subject,
        html=body.html,
        text=body.text or "",
        kind=body.kind or "transactional",
    )
    try:
        delivery = await mailer.send(message)
    except MailDeliveryError as e:
        log.error("email_send_failed", mailer=mailer.name, details=e.details)
        content: dict[str, Any] = {"error": "Failed to send email"}
        if e.details is not None:
            content["details"] = e.details
        return JSONResponse(status_code=500, content=content)

    log.info("email_sent", mailer=mailer.name, kind=message.kind, message_id=delivery.message_id)
    result: dict[str, Any] = {"success": True, "messageId": delivery.message_id}
    if delivery.fallback:
        result["fallback"] = True
    return result


@router.get("/verify-smtp")
async def verify_smtp(settings: Settings = Depends(settings_dep)) -> dict[str, Any]:
    if not settings.smtp_host:
        return {"ok": False, "configured": False, "host": None, "port": settings.smtp_port}

    mailer = smtp_mailer(settings)
    try:
        await mailer.verify()
    except (smtplib.SMTPException, OSError) as e:
        log.warning("smtp_verify_failed", host=mailer.host, port=mailer.port, error=str(e))
        return {"ok": False, "configured": True, "host": mailer.host, "port": mailer.port, "error": str(e)}
    return {"ok": True, "configured": True, "host": mailer.host, "port": mailer.port}


# --- Module Notes -----------------------------------------------------------
# Missing fields answer 400 with the relay's own error body rather than FastAPI's 422 shape,
# since existing callers read `error`.
