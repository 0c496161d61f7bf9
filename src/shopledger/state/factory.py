"""
shopledger.state.factory

Composition root for hosts embedding the session controller.

Responsibilities:
- Pick the identity provider from settings: Firebase (with Firestore profiles and cart
  mirroring) when an API key is configured, the REST `/auth/*` API otherwise.
- Default local persistence to the SQL-backed key-value store.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx

from shopledger.auth.credentials import CredentialHolder
from shopledger.observability.logging import get_logger
from shopledger.providers.documents import DocumentStore
from shopledger.providers.firebase_identity import FirebaseIdentityProvider
from shopledger.providers.firestore import FirestoreDocumentStore
from shopledger.providers.http_identity import HttpIdentityProvider
from shopledger.providers.identity import IdentityProvider
from shopledger.session.activity import ActivitySource
from shopledger.settings import Settings, get_settings
from shopledger.state.controller import SessionController
from shopledger.storage.kv import KeyValueStore, SqlKeyValueStore

log = get_logger(__name__)


def identity_http_client(settings: Settings) -> httpx.AsyncClient:
    """Client for the REST identity API; the caller closes it."""
    return httpx.AsyncClient(
        base_url=settings.identity_api_base_url,
        timeout=settings.request_timeout_seconds,
    )


def create_session_controller(
    *,
    http: httpx.AsyncClient,
    settings: Settings | None = None,
    kv: KeyValueStore | None = None,
    document_store: DocumentStore | None = None,
    activity_source: ActivitySource | None = None,
    platform_reduced_motion: Callable[[], bool] | None = None,
) -> SessionController:
    settings = settings or get_settings()
    kv = kv or SqlKeyValueStore.from_settings(settings)

    provider: IdentityProvider
    if settings.firebase_api_key:
        document_store = document_store or FirestoreDocumentStore.from_settings(settings)
        provider = FirebaseIdentityProvider(
            http=http,
            api_key=settings.firebase_api_key,
            documents=document_store,
        )
    else:
        provider = HttpIdentityProvider(http=http, credentials=CredentialHolder(kv))

    log.info(
        "session_controller_created",
        identity_provider=provider.name,
        document_store=document_store.name if document_store is not None else None,
    )
    return SessionController(
        kv,
        provider,
        document_store=document_store,
        activity_source=activity_source,
        settings=settings,
        platform_reduced_motion=platform_reduced_motion,
    )
