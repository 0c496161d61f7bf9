"""
tests.test_firestore_store

Firestore adapter against an in-process stand-in for the client object.
"""

from __future__ import annotations

import asyncio
import threading

import pytest
from google.api_core.exceptions import NotFound

from shopledger.providers.errors import DocumentStoreError
from shopledger.providers.firestore import FirestoreDocumentStore


class _Snap:
    def __init__(self, doc_id: str, data: dict | None) -> None:
        self.id = doc_id
        self._data = data
        self.exists = data is not None

    def to_dict(self) -> dict | None:
        return dict(self._data) if self._data is not None else None


class _Watch:
    def __init__(self) -> None:
        self.active = True

    def unsubscribe(self) -> None:
        self.active = False


class _DocRef:
    def __init__(self, store: dict, doc_id: str) -> None:
        self._store = store
        self._id = doc_id

    def get(self) -> _Snap:
        return _Snap(self._id, self._store.get(self._id))

    def set(self, data: dict, merge: bool = False) -> None:
        base = dict(self._store.get(self._id, {})) if merge else {}
        base.update(data)
        self._store[self._id] = base

    def update(self, fields: dict) -> None:
        if self._id not in self._store:
            raise NotFound("no document")
        self._store[self._id].update(fields)

    def delete(self) -> None:
        self._store.pop(self._id, None)

    def on_snapshot(self, callback) -> _Watch:
        # Real watch callbacks arrive on a background thread.
        snap = self.get()
        thread = threading.Thread(target=callback, args=([snap], None, None))
        thread.start()
        thread.join()
        return _Watch()


class _Collection:
    def __init__(self, store: dict) -> None:
        self._store = store

    def document(self, doc_id: str) -> _DocRef:
        return _DocRef(self._store, doc_id)

    def stream(self):
        return [_Snap(doc_id, data) for doc_id, data in self._store.items()]


class FakeFirestoreClient:
    def __init__(self) -> None:
        self.data: dict[str, dict] = {}

    def collection(self, name: str) -> _Collection:
        return _Collection(self.data.setdefault(name, {}))


@pytest.mark.asyncio
async def test_reads_writes_and_lists() -> None:
    client = FakeFirestoreClient()
    store = FirestoreDocumentStore(client)  # type: ignore[arg-type]

    assert await store.get_document("carts", "u1") is None
    await store.upsert_merge("carts", "u1", {"items": []})
    await store.upsert_merge("carts", "u1", {"updatedAt": "now"})
    assert await store.get_document("carts", "u1") == {"items": [], "updatedAt": "now"}
    assert await store.list_documents("carts") == [{"items": [], "updatedAt": "now", "id": "u1"}]

    await store.delete_document("carts", "u1")
    assert await store.list_documents("carts") == []


@pytest.mark.asyncio
async def test_update_missing_document_raises() -> None:
    store = FirestoreDocumentStore(FakeFirestoreClient())  # type: ignore[arg-type]
    with pytest.raises(DocumentStoreError):
        await store.update_document("users", "ghost", {"role": "admin"})


@pytest.mark.asyncio
async def test_snapshots_are_delivered_on_the_loop() -> None:
    client = FakeFirestoreClient()
    client.collection("carts").document("u1").set({"items": [1]})
    store = FirestoreDocumentStore(client)  # type: ignore[arg-type]

    received: list[tuple[dict | None, bool]] = []
    loop_thread = threading.get_ident()

    unsubscribe = store.subscribe(
        "carts", "u1", lambda doc: received.append((doc, threading.get_ident() == loop_thread))
    )
    await asyncio.sleep(0)
    unsubscribe()

    assert received == [({"items": [1]}, True)]


# --- Module Notes -----------------------------------------------------------
# FakeFirestoreClient mimics only the calls FirestoreDocumentStore makes.
