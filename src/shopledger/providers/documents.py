"""
shopledger.providers.documents

Remote document store interface.

Responsibilities:
- Declare point reads, live subscriptions and merge-writes (cart sync) plus the
  collection-level calls the admin console needs.
- Provide `InMemoryDocumentStore` for dev hosts and tests.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Any

from shopledger.providers.errors import DocumentStoreError, UnsupportedOperationError

Document = dict[str, Any]

USERS_COLLECTION = "users"
CARTS_COLLECTION = "carts"
SETTINGS_COLLECTION = "settings"
SECURITY_SETTINGS_DOC = "security"

SnapshotCallback = Callable[[Document | None], None]
Unsubscribe = Callable[[], None]


class DocumentStore:
    name = "document-store"

    async def get_document(self, collection: str, doc_id: str) -> Document | None:
        raise UnsupportedOperationError(self.name, "get_document")

    def subscribe(self, collection: str, doc_id: str, callback: SnapshotCallback) -> Unsubscribe:
        """
        Deliver the current snapshot (or None) and every later change to `callback`
        on the caller's event loop.
        """
        raise UnsupportedOperationError(self.name, "subscribe")

    async def upsert_merge(self, collection: str, doc_id: str, partial: Document) -> None:
        raise UnsupportedOperationError(self.name, "upsert_merge")

    async def list_documents(self, collection: str) -> list[Document]:
        """Each document is returned with its id under `"id"`."""
        raise UnsupportedOperationError(self.name, "list_documents")

    async def update_document(self, collection: str, doc_id: str, fields: Document) -> None:
        """Raises `DocumentStoreError` when the document does not exist."""
        raise UnsupportedOperationError(self.name, "update_document")

    async def delete_document(self, collection: str, doc_id: str) -> None:
        raise UnsupportedOperationError(self.name, "delete_document")


class InMemoryDocumentStore(DocumentStore):
    """
    Process-local store. Subscribers are notified synchronously after each write, which
    matches the ordering a single-tab client observes from a real backend.
    """

    name = "in-memory-documents"

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = {}
        self._subscribers: dict[tuple[str, str], list[SnapshotCallback]] = {}

    def put(self, collection: str, doc_id: str, document: Document) -> None:
        """Seed or overwrite a document (notifies subscribers)."""
        self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(document)
        self._notify(collection, doc_id)

    def peek(self, collection: str, doc_id: str) -> Document | None:
        doc = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def get_document(self, collection: str, doc_id: str) -> Document | None:
        return self.peek(collection, doc_id)

    def subscribe(self, collection: str, doc_id: str, callback: SnapshotCallback) -> Unsubscribe:
        key = (collection, doc_id)
        self._subscribers.setdefault(key, []).append(callback)
        callback(self.peek(collection, doc_id))

        def _unsubscribe() -> None:
            callbacks = self._subscribers.get(key, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return _unsubscribe

    async def upsert_merge(self, collection: str, doc_id: str, partial: Document) -> None:
        docs = self._collections.setdefault(collection, {})
        merged = dict(docs.get(doc_id, {}))
        merged.update(copy.deepcopy(partial))
        docs[doc_id] = merged
        self._notify(collection, doc_id)

    async def list_documents(self, collection: str) -> list[Document]:
        return [
            {**copy.deepcopy(doc), "id": doc_id}
            for doc_id, doc in self._collections.get(collection, {}).items()
        ]

    async def update_document(self, collection: str, doc_id: str, fields: Document) -> None:
        docs = self._collections.get(collection, {})
        if doc_id not in docs:
            raise DocumentStoreError(f"{collection}/{doc_id} not found")
        docs[doc_id] = {**docs[doc_id], **copy.deepcopy(fields)}
        self._notify(collection, doc_id)

    async def delete_document(self, collection: str, doc_id: str) -> None:
        self._collections.get(collection, {}).pop(doc_id, None)
        self._notify(collection, doc_id)

    def subscriber_count(self, collection: str, doc_id: str) -> int:
        return len(self._subscribers.get((collection, doc_id), []))

    def _notify(self, collection: str, doc_id: str) -> None:
        for callback in list(self._subscribers.get((collection, doc_id), [])):
            callback(self.peek(collection, doc_id))


# --- Module Notes -----------------------------------------------------------
# Merge-writes are last-writer-wins with no version check; concurrent tabs can clobber each
# other's carts. That matches the Firestore adapter.
