"""
shopledger.admin.users

User directory for the admin console.

Responsibilities:
- List users with search, role/status filters and sorting.
- Change a user's role/status, delete users.
- Read/write the session idle timeout applied by every controller at start.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from shopledger.auth.models import AccountStatus, Identity, Role
from shopledger.observability.logging import get_logger
from shopledger.providers.documents import (
    SECURITY_SETTINGS_DOC,
    SETTINGS_COLLECTION,
    USERS_COLLECTION,
    DocumentStore,
)

log = get_logger(__name__)

SortField = Literal["name", "email", "role", "status", "createdAt"]

MIN_SESSION_TIMEOUT_MINUTES = 1
MAX_SESSION_TIMEOUT_MINUTES = 24 * 60


@dataclass(frozen=True, slots=True)
class DirectoryStats:
    total: int
    active: int
    inactive: int
    admins: int


class UserDirectory:
    """
    Every call is attributed to `actor`; non-admin actors are rejected up front.
    """

    def __init__(self, *, documents: DocumentStore, actor: Identity) -> None:
        if not actor.is_admin:
            raise PermissionError("Admin role required")
        self._documents = documents
        self._actor = actor

    async def list_users(
        self,
        *,
        search: str = "",
        role: Role | Literal["all"] = "all",
        status: AccountStatus | Literal["all"] = "all",
        sort_by: SortField = "name",
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        users = [_with_defaults(u) for u in await self._documents.list_documents(USERS_COLLECTION)]

        term = search.strip().lower()
        if term:
            users = [
                u
                for u in users
                if any(term in str(u.get(f, "")).lower() for f in ("name", "email", "role", "status"))
            ]
        if role != "all":
            users = [u for u in users if u["role"] == str(role)]
        if status != "all":
            users = [u for u in users if u["status"] == str(status)]

        users.sort(key=lambda u: str(u.get(sort_by) or "").lower(), reverse=descending)
        return users

    async def update_user(
        self,
        user_id: str,
        *,
        role: Role | str | None = None,
        status: AccountStatus | str | None = None,
    ) -> None:
        fields: dict[str, Any] = {}
        if role is not None:
            fields["role"] = str(Role(role))
        if status is not None:
            fields["status"] = str(AccountStatus(status))
        if not fields:
            return
        if user_id == self._actor.id and fields.get("role") == Role.user:
            # An admin demoting themselves would lock the console mid-session.
            raise ValueError("Admins cannot remove their own admin role")
        await self._documents.update_document(USERS_COLLECTION, user_id, fields)
        log.info("admin_user_updated", actor=self._actor.id, target=user_id, **fields)

    async def delete_user(self, user_id: str) -> None:
        if user_id == self._actor.id:
            raise ValueError("Admins cannot delete their own account")
        await self._documents.delete_document(USERS_COLLECTION, user_id)
        log.info("admin_user_deleted", actor=self._actor.id, target=user_id)

    async def stats(self) -> DirectoryStats:
        users = [_with_defaults(u) for u in await self._documents.list_documents(USERS_COLLECTION)]
        active = sum(1 for u in users if u["status"] == AccountStatus.active)
        return DirectoryStats(
            total=len(users),
            active=active,
            inactive=len(users) - active,
            admins=sum(1 for u in users if u["role"] == Role.admin),
        )

    async def get_session_timeout_minutes(self) -> int | None:
        doc = await self._documents.get_document(SETTINGS_COLLECTION, SECURITY_SETTINGS_DOC)
        minutes = (doc or {}).get("sessionTimeoutMinutes")
        return int(minutes) if isinstance(minutes, (int, float)) and not isinstance(minutes, bool) else None

    async def set_session_timeout_minutes(self, minutes: int) -> None:
        if not MIN_SESSION_TIMEOUT_MINUTES <= minutes <= MAX_SESSION_TIMEOUT_MINUTES:
            raise ValueError(
                f"Session timeout must be between {MIN_SESSION_TIMEOUT_MINUTES} "
                f"and {MAX_SESSION_TIMEOUT_MINUTES} minutes"
            )
        await self._documents.upsert_merge(
            SETTINGS_COLLECTION, SECURITY_SETTINGS_DOC, {"sessionTimeoutMinutes": int(minutes)}
        )
        log.info("admin_session_timeout_set", actor=self._actor.id, minutes=minutes)


def _with_defaults(raw: dict[str, Any]) -> dict[str, Any]:
    return {**raw, "role": raw.get("role") or "user", "status": raw.get("status") or "active"}


# --- Module Notes -----------------------------------------------------------
# Timeout changes apply to sessions started afterwards; running controllers keep theirs.
