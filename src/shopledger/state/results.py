"""
shopledger.state.results

Discriminated results returned by every asynchronous controller operation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from shopledger.auth.models import Identity

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."
SUPERSEDED_MESSAGE = "This request was superseded by a newer sign-in or sign-out."
UNEXPECTED_ERROR_MESSAGE = "Something went wrong. Please try again."


@dataclass(frozen=True, slots=True)
class OperationResult:
    success: bool
    error: str | None = None
    message: str | None = None
    user: Identity | None = None

    @classmethod
    def ok(cls, *, message: str | None = None, user: Identity | None = None) -> OperationResult:
        return cls(success=True, message=message, user=user)

    @classmethod
    def failure(cls, error: str) -> OperationResult:
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        out: dict[str, Any] = {"success": True}
        if self.message is not None:
            out["message"] = self.message
        if self.user is not None:
            out["user"] = self.user.to_dict()
        return out


def validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    msg = str(errors[0].get("msg", "Invalid input"))
    return msg.removeprefix("Value error, ")
