"""
shopledger.notifications.templates

HTML bodies for account emails.

Responsibilities:
- Build verification and password-reset messages with the links the auth page handles
  (`/auth?verify=<token>`, `/auth?reset=true&token=<token>`).
- Escape user-supplied values before they reach HTML.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from urllib.parse import quote

VERIFICATION_SUBJECT = "Verify Your Email Address"
PASSWORD_RESET_SUBJECT = "Reset Your Password"


@dataclass(frozen=True, slots=True)
class EmailMessage:
    to: str
    subject: str
    html: str
    text: str = ""
    kind: str = "transactional"

    def to_payload(self) -> dict[str, str]:
        return {
            "to": self.to,
            "subject": self.subject,
            "html": self.html,
            "text": self.text,
            "kind": self.kind,
        }


def verification_link(origin: str, token: str) -> str:
    return f"{origin.rstrip('/')}/auth?verify={quote(token, safe='')}"


def password_reset_link(origin: str, token: str) -> str:
    return f"{origin.rstrip('/')}/auth?reset=true&token={quote(token, safe='')}"


def _button_email(*, heading: str, intro: str, url: str, label: str, color: str, expiry: str, footer: str) -> str:
    safe_url = html.escape(url, quote=True)
    return f"""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2>{heading}</h2>
  {intro}
  <div style="text-align: center; margin: 30px 0;">
    <a href="{safe_url}"
       style="background-color: {color}; color: white; padding: 12px 24px;
              text-decoration: none; border-radius: 6px; display: inline-block;">
      {label}
    </a>
  </div>
  <p>Or copy and paste this link in your browser:</p>
  <p style="word-break: break-all; color: #666;">{safe_url}</p>
  <p>{expiry}</p>
  <hr style="margin: 30px 0; border: none; border-top: 1px solid #eee;">
  <p style="color: #666; font-size: 12px;">{footer}</p>
</div>
"""


def verification_email(*, to: str, user_name: str, token: str, origin: str) -> EmailMessage:
    url = verification_link(origin, token)
    body = _button_email(
        heading=f"Welcome {html.escape(user_name)}!",
        intro="<p>Thank you for registering. Please verify your email address by clicking the button below:</p>",
        url=url,
        label="Verify Email Address",
        color="#4F46E5",
        expiry="This link will expire in 24 hours.",
        footer="If you didn't create an account, please ignore this email.",
    )
    text = f"Welcome {user_name}! Verify your email address: {url}"
    return EmailMessage(to=to, subject=VERIFICATION_SUBJECT, html=body, text=text, kind="verification")


def password_reset_email(*, to: str, user_name: str, token: str, origin: str) -> EmailMessage:
    url = password_reset_link(origin, token)
    body = _button_email(
        heading="Password Reset Request",
        intro=(
            f"<p>Hi {html.escape(user_name)},</p>\n"
            "  <p>You requested to reset your password. Click the button below to set a new password:</p>"
        ),
        url=url,
        label="Reset Password",
        color="#DC2626",
        expiry="This link will expire in 1 hour.",
        footer="If you didn't request this, please ignore this email.",
    )
    text = f"Hi {user_name}, reset your password here: {url}"
    return EmailMessage(to=to, subject=PASSWORD_RESET_SUBJECT, html=body, text=text, kind="password_reset")
