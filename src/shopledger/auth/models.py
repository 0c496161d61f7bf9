"""
shopledger.auth.models

Auth domain models.

Responsibilities:
- Define the cached `Identity` and normalize provider records into it.
- Define the login grant returned by identity providers.
- Define the registration profile (validated before any provider call).
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, field_validator

from shopledger.auth.validation import validate_email, validate_password


class Role(enum.StrEnum):
    user = "user"
    admin = "admin"


class AccountStatus(enum.StrEnum):
    active = "active"
    inactive = "inactive"


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Read-only copy of the authenticated user's profile record.
    """

    id: str
    name: str
    email: str
    role: Role = Role.user
    status: AccountStatus = AccountStatus.active
    email_verified: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> Identity:
        # Provider records disagree on field names (id/uid/localId, name/displayName).
        ident = raw.get("id") or raw.get("uid") or raw.get("localId")
        if not ident:
            raise ValueError("identity record has no id")
        role = str(raw.get("role") or Role.user)
        status = str(raw.get("status") or AccountStatus.active)
        return cls(
            id=str(ident),
            name=str(raw.get("name") or raw.get("displayName") or ""),
            email=str(raw.get("email") or ""),
            role=Role(role) if role in Role.__members__ else Role.user,
            status=AccountStatus(status) if status in AccountStatus.__members__ else AccountStatus.active,
            email_verified=bool(raw.get("email_verified", raw.get("isEmailVerified", False))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": str(self.role),
            "status": str(self.status),
            "email_verified": self.email_verified,
        }


@dataclass(frozen=True, slots=True)
class LoginGrant:
    user: Identity
    access_token: str
    refresh_token: str | None = None


class RegistrationProfile(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: str
    password: str = Field(repr=False)
    role: Role = Role.user

    @field_validator("email")
    @classmethod
    def _email_shape(cls, v: str) -> str:
        v = v.strip()
        if not validate_email(v):
            raise ValueError("Please enter a valid email address")
        return v

    @field_validator("password")
    @classmethod
    def _password_strength(cls, v: str) -> str:
        problems = validate_password(v)
        if problems:
            raise ValueError("; ".join(problems))
        return v


# --- Module Notes -----------------------------------------------------------
# Identity snapshots are persisted with `to_dict()` and restored with `from_mapping()`.
