"""
shopledger.providers.firestore

Document store backed by Google Cloud Firestore.

Responsibilities:
- Run the blocking Firestore client calls off the event loop (`asyncio.to_thread`).
- Bridge `on_snapshot` watch callbacks (delivered on a Firestore thread) back onto the
  subscriber's event loop.
"""

from __future__ import annotations

import asyncio
from typing import Any

from google.api_core.exceptions import NotFound
from google.cloud import firestore

from shopledger.observability.logging import get_logger
from shopledger.providers.documents import Document, DocumentStore, SnapshotCallback, Unsubscribe
from shopledger.providers.errors import DocumentStoreError
from shopledger.settings import Settings

log = get_logger(__name__)


class FirestoreDocumentStore(DocumentStore):
    name = "firestore"

    def __init__(self, client: firestore.Client) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> FirestoreDocumentStore:
        # Credentials come from Application Default Credentials (GOOGLE_APPLICATION_CREDENTIALS).
        project = settings.firebase_project_id or None
        return cls(firestore.Client(project=project))

    def _doc(self, collection: str, doc_id: str) -> Any:
        return self._client.collection(collection).document(doc_id)

    async def get_document(self, collection: str, doc_id: str) -> Document | None:
        snap = await asyncio.to_thread(self._doc(collection, doc_id).get)
        return snap.to_dict() if snap.exists else None

    def subscribe(self, collection: str, doc_id: str, callback: SnapshotCallback) -> Unsubscribe:
        loop = asyncio.get_running_loop()

        def _on_snapshot(docs: list[Any], _changes: Any, _read_time: Any) -> None:
            snap = docs[0] if docs else None
            data = snap.to_dict() if snap is not None and snap.exists else None
            try:
                loop.call_soon_threadsafe(callback, data)
            except RuntimeError:
                # Loop already closed; the subscriber is gone.
                log.debug("firestore_snapshot_dropped", collection=collection, doc_id=doc_id)

        watch = self._doc(collection, doc_id).on_snapshot(_on_snapshot)
        return watch.unsubscribe

    async def upsert_merge(self, collection: str, doc_id: str, partial: Document) -> None:
        await asyncio.to_thread(self._doc(collection, doc_id).set, partial, merge=True)

    async def list_documents(self, collection: str) -> list[Document]:
        def _collect() -> list[Document]:
            return [
                {**(snap.to_dict() or {}), "id": snap.id}
                for snap in self._client.collection(collection).stream()
            ]

        return await asyncio.to_thread(_collect)

    async def update_document(self, collection: str, doc_id: str, fields: Document) -> None:
        try:
            await asyncio.to_thread(self._doc(collection, doc_id).update, fields)
        except NotFound as e:
            raise DocumentStoreError(f"{collection}/{doc_id} not found") from e

    async def delete_document(self, collection: str, doc_id: str) -> None:
        await asyncio.to_thread(self._doc(collection, doc_id).delete)


# --- Module Notes -----------------------------------------------------------
# Watch streams are owned by the Firestore client; callers must invoke the returned
# unsubscribe on scope change or teardown to release them.
