"""
tests.test_admin_users

Admin user directory over the in-memory document store.
"""

from __future__ import annotations

import pytest

from conftest import ADMIN, ALICE
from shopledger.admin.users import UserDirectory
from shopledger.providers.documents import InMemoryDocumentStore
from shopledger.providers.errors import DocumentStoreError


@pytest.fixture()
def documents() -> InMemoryDocumentStore:
    store = InMemoryDocumentStore()
    store.put("users", "u-admin", {"name": "Root", "email": "root@example.com", "role": "admin"})
    store.put("users", "u-alice", {"name": "alice", "email": "alice@example.com", "role": "user"})
    store.put(
        "users",
        "u-bob",
        {"name": "Bob", "email": "bob@shop.test", "role": "user", "status": "inactive"},
    )
    return store


def test_non_admin_is_rejected(documents) -> None:
    with pytest.raises(PermissionError):
        UserDirectory(documents=documents, actor=ALICE)


@pytest.mark.asyncio
async def test_list_filters_search_and_sort(documents) -> None:
    directory = UserDirectory(documents=documents, actor=ADMIN)

    names = [u["name"] for u in await directory.list_users()]
    assert names == ["alice", "Bob", "Root"]

    assert [u["id"] for u in await directory.list_users(search="SHOP")] == ["u-bob"]
    assert [u["id"] for u in await directory.list_users(role="admin")] == ["u-admin"]
    assert [u["id"] for u in await directory.list_users(status="inactive")] == ["u-bob"]
    desc = await directory.list_users(sort_by="email", descending=True)
    assert [u["id"] for u in desc] == ["u-admin", "u-bob", "u-alice"]


@pytest.mark.asyncio
async def test_update_delete_and_stats(documents) -> None:
    directory = UserDirectory(documents=documents, actor=ADMIN)

    await directory.update_user("u-bob", status="active", role="admin")
    stats = await directory.stats()
    assert (stats.total, stats.active, stats.inactive, stats.admins) == (3, 3, 0, 2)

    await directory.delete_user("u-alice")
    assert documents.peek("users", "u-alice") is None

    with pytest.raises(DocumentStoreError):
        await directory.update_user("u-ghost", status="inactive")
    with pytest.raises(ValueError):
        await directory.update_user("u-bob", role="superuser")


@pytest.mark.asyncio
async def test_admin_cannot_lock_themselves_out(documents) -> None:
    directory = UserDirectory(documents=documents, actor=ADMIN)
    with pytest.raises(ValueError):
        await directory.update_user(ADMIN.id, role="user")
    with pytest.raises(ValueError):
        await directory.delete_user(ADMIN.id)


@pytest.mark.asyncio
async def test_session_timeout_setting(documents) -> None:
    directory = UserDirectory(documents=documents, actor=ADMIN)
    assert await directory.get_session_timeout_minutes() is None

    await directory.set_session_timeout_minutes(45)
    assert await directory.get_session_timeout_minutes() == 45
    assert documents.peek("settings", "security") == {"sessionTimeoutMinutes": 45}

    for bad in (0, 1441):
        with pytest.raises(ValueError):
            await directory.set_session_timeout_minutes(bad)


# --- Module Notes -----------------------------------------------------------
# Sorting is case-insensitive, so "alice" sorts before "Bob".
