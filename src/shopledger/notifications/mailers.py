"""
shopledger.notifications.mailers

Mail transports used by the relay endpoint.

Responsibilities:
- SendGrid v3 (`/v3/mail/send`) over httpx.
- SMTP through `smtplib`, run in a worker thread so the event loop never blocks.
- Console fallback for dev hosts with no provider configured.
- `mailer_from_settings` picks the transport: SendGrid, then SMTP, then console.
"""

from __future__ import annotations

import asyncio
import smtplib
import time
import uuid
from dataclasses import dataclass
from email.message import EmailMessage as MimeMessage
from typing import Any

import httpx

from shopledger.notifications.templates import EmailMessage
from shopledger.observability.logging import get_logger
from shopledger.settings import Settings

log = get_logger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"


class MailDeliveryError(RuntimeError):
    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.details = details


@dataclass(frozen=True, slots=True)
class Delivery:
    message_id: str
    fallback: bool = False


class Mailer:
    name = "mailer"

    async def send(self, message: EmailMessage) -> Delivery:
        raise NotImplementedError


class ConsoleMailer(Mailer):
    name = "console"

    async def send(self, message: EmailMessage) -> Delivery:
        log.warning("email_provider_not_configured")
        log.info("email_console_delivery", to=message.to, subject=message.subject, html=message.html)
        return Delivery(message_id=f"dev-{int(time.time() * 1000)}", fallback=True)


class SendGridMailer(Mailer):
    name = "sendgrid"

    def __init__(self, *, http: httpx.AsyncClient, api_key: str, from_email: str) -> None:
        self._http = http
        self._api_key = api_key
        self._from_email = from_email

    def _payload(self, message: EmailMessage) -> dict[str, Any]:
        domain = self._from_email.split("@", 1)[1] if "@" in self._from_email else "example.com"
        content = [{"type": "text/html", "value": message.html}]
        if message.text:
            content.insert(0, {"type": "text/plain", "value": message.text})
        return {
            "personalizations": [{"to": [{"email": message.to}]}],
            "from": {"email": self._from_email},
            "subject": message.subject,
            "content": content,
            "headers": {"List-Unsubscribe": f"<mailto:noreply@{domain}>"},
            "mail_settings": {"sandbox_mode": {"enable": False}},
            "categories": [message.kind],
        }

    async def send(self, message: EmailMessage) -> Delivery:
        try:
            r = await self._http.post(
                SENDGRID_SEND_URL,
                json=self._payload(message),
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as e:
            raise MailDeliveryError("Failed to send email", details=str(e)) from e
        if r.is_error:
            try:
                details: Any = r.json()
            except ValueError:
                details = r.text
            log.error("sendgrid_error", status_code=r.status_code, details=details)
            raise MailDeliveryError("Failed to send email", details=details)
        return Delivery(message_id=r.headers.get("x-message-id") or uuid.uuid4().hex)


class SmtpMailer(Mailer):
    name = "smtp"

    def __init__(
        self,
        *,
        host: str,
        port: int,
        from_email: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self._from_email = from_email or username
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        server = smtplib.SMTP(self.host, self.port, timeout=self._timeout)
        if self._use_tls:
            server.starttls()
        if self._username:
            server.login(self._username, self._password)
        return server

    def _send_blocking(self, message: EmailMessage) -> str:
        mime = MimeMessage()
        mime["Subject"] = message.subject
        mime["From"] = self._from_email
        mime["To"] = message.to
        message_id = f"<{uuid.uuid4().hex}@{self.host}>"
        mime["Message-ID"] = message_id
        mime.set_content(message.text or "")
        mime.add_alternative(message.html, subtype="html")
        with self._connect() as server:
            server.send_message(mime)
        return message_id

    async def send(self, message: EmailMessage) -> Delivery:
        try:
            message_id = await asyncio.to_thread(self._send_blocking, message)
        except (smtplib.SMTPException, OSError) as e:
            log.error("smtp_error", host=self.host, port=self.port, error=str(e))
            raise MailDeliveryError("Failed to send email", details=str(e)) from e
        return Delivery(message_id=message_id)

    async def verify(self) -> None:
        """Connect, negotiate TLS and authenticate without sending anything."""

        def _probe() -> None:
            with self._connect() as server:
                server.noop()

        await asyncio.to_thread(_probe)


def mailer_from_settings(settings: Settings, *, http: httpx.AsyncClient) -> Mailer:
    if settings.sendgrid_api_key and settings.from_email:
        return SendGridMailer(http=http, api_key=settings.sendgrid_api_key, from_email=settings.from_email)
    if settings.smtp_host:
        return smtp_mailer(settings)
    return ConsoleMailer()


def smtp_mailer(settings: Settings) -> SmtpMailer:
    return SmtpMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        from_email=settings.from_email,
        username=settings.smtp_username,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        timeout=settings.request_timeout_seconds,
    )


# --- Module Notes -----------------------------------------------------------
# SendGrid answers 202 with the id in `X-Message-Id`; a missing header gets a local id so
# callers always receive one.
