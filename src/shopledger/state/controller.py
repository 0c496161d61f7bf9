"""
shopledger.state.controller

Session/state controller (the app context).

Responsibilities:
- Merge asynchronous auth state (manual operations + live provider pushes) into one
  `{identity, is_authenticated}` pair, with a sliding session timeout.
- Own the transaction ledger and the per-scope shopping cart, persisting locally and
  mirroring carts to the remote document store.
- Expose derived read-only projections (cart totals, ledger summary, reduced motion).

Concurrency model:
- Everything runs on one event loop. State changes between awaits are atomic with respect
  to other callbacks; provider pushes are applied as they arrive (last write wins).
- Sign-in results are fenced by an auth epoch: a login that resolves after a newer
  login/logout/timeout started is discarded instead of resurrecting the session.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable, Coroutine, Mapping
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from shopledger.auth.credentials import CredentialHolder
from shopledger.auth.jwt import is_token_valid
from shopledger.auth.models import Identity, LoginGrant, RegistrationProfile
from shopledger.commerce import cart as cart_ops
from shopledger.commerce import ledger as ledger_ops
from shopledger.commerce.cart import LineItem, Product
from shopledger.commerce.ledger import LedgerSummary, NewTransaction, Transaction
from shopledger.observability.logging import bind_identity, get_logger
from shopledger.providers.documents import (
    CARTS_COLLECTION,
    SECURITY_SETTINGS_DOC,
    SETTINGS_COLLECTION,
    DocumentStore,
)
from shopledger.providers.errors import IdentityProviderError, UnsupportedOperationError
from shopledger.providers.identity import IdentityProvider, Unsubscribe
from shopledger.session.activity import SESSION_ACTIVITY_KINDS, ActivityKind, ActivitySource
from shopledger.session.timer import SessionTimer
from shopledger.settings import Settings, get_settings
from shopledger.state.preferences import (
    DEFAULT_LOCALE,
    ReducedMotion,
    Theme,
    effective_reduced_motion,
    parse_reduced_motion,
    parse_theme,
)
from shopledger.state.results import (
    SESSION_EXPIRED_MESSAGE,
    SUPERSEDED_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    OperationResult,
    validation_message,
)
from shopledger.storage.keys import CART_KEY_PREFIX, LEDGER_KEY, LOCALE_KEY, REDUCED_MOTION_KEY, THEME_KEY
from shopledger.storage.kv import KeyValueStore
from shopledger.storage.scoped import GUEST_SCOPE, ScopedCollectionStore, scope_for

log = get_logger(__name__)

OWN_CART_STAMPS_KEPT = 32


class SessionController:
    def __init__(
        self,
        kv: KeyValueStore,
        identity_provider: IdentityProvider,
        *,
        document_store: DocumentStore | None = None,
        activity_source: ActivitySource | None = None,
        settings: Settings | None = None,
        platform_reduced_motion: Callable[[], bool] | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._kv = kv
        self._identity_provider = identity_provider
        self._documents = document_store
        self._activity = activity_source
        self._platform_reduced_motion = platform_reduced_motion or (lambda: False)

        self.credentials = CredentialHolder(kv)
        self._carts = ScopedCollectionStore(kv, prefix=CART_KEY_PREFIX)
        self._timer = SessionTimer(self._settings.session_timeout_seconds)

        # Auth state
        self._identity: Identity | None = None
        self._authenticated = False
        self._loading = False
        self._error: str | None = None
        self._initialized = asyncio.Event()
        self._auth_epoch = 0
        self._signing_out = False
        self._sign_ins_in_flight = 0

        # Preferences
        self._theme = parse_theme(kv.get(THEME_KEY, Theme.light.value))
        self._locale = str(kv.get(LOCALE_KEY, DEFAULT_LOCALE) or DEFAULT_LOCALE)
        self._reduced_motion = parse_reduced_motion(kv.get(REDUCED_MOTION_KEY, ReducedMotion.auto.value))

        # Collections
        stored_ledger = kv.get(LEDGER_KEY, [])
        self._transactions: list[Transaction] = ledger_ops.load_ledger(
            stored_ledger if isinstance(stored_ledger, list) else []
        )
        self._cart_scope = GUEST_SCOPE
        self._cart: list[LineItem] = cart_ops.load_items(self._carts.load(GUEST_SCOPE))

        # Scoped resources (released on every exit path)
        self._unsubscribe_auth: Unsubscribe | None = None
        self._unsubscribe_cart: Unsubscribe | None = None
        self._unsubscribe_activity: Unsubscribe | None = None
        self._pending: set[asyncio.Task[Any]] = set()
        # `updatedAt` stamps of our own cart writes; snapshots carrying one are echoes.
        self._own_cart_stamps: deque[str] = deque(maxlen=OWN_CART_STAMPS_KEPT)

    # ------------------------------------------------------------------ lifecycle

    async def __aenter__(self) -> SessionController:
        await self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def start(self) -> None:
        await self._load_security_settings()
        try:
            self._unsubscribe_auth = self._identity_provider.on_auth_state_change(self._on_auth_state)
            return
        except UnsupportedOperationError:
            self._unsubscribe_auth = None

        await self._restore_once()
        self._mark_initialized()

    async def wait_initialized(self) -> None:
        await self._initialized.wait()

    async def close(self) -> None:
        self._timer.clear()
        self._remove_activity_listener()
        if self._unsubscribe_auth is not None:
            self._unsubscribe_auth()
            self._unsubscribe_auth = None
        if self._unsubscribe_cart is not None:
            self._unsubscribe_cart()
            self._unsubscribe_cart = None
        await self.wait_for_sync()
        log.info("session_controller_closed")

    async def wait_for_sync(self) -> None:
        """Wait for background work (cart mirror writes, expiry handling) to finish."""

        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ------------------------------------------------------------------ read-only state

    @property
    def identity_provider(self) -> IdentityProvider:
        return self._identity_provider

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._authenticated

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def is_initialized(self) -> bool:
        return self._initialized.is_set()

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def session_timer_active(self) -> bool:
        return self._timer.active

    @property
    def session_timeout_seconds(self) -> float:
        return self._timer.timeout_seconds

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def reduced_motion_override(self) -> ReducedMotion:
        return self._reduced_motion

    @property
    def effective_reduced_motion(self) -> bool:
        return effective_reduced_motion(self._reduced_motion, bool(self._platform_reduced_motion()))

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    @property
    def ledger_summary(self) -> LedgerSummary:
        return ledger_ops.summarize(self._transactions)

    @property
    def cart(self) -> list[LineItem]:
        return list(self._cart)

    @property
    def cart_scope(self) -> str:
        return self._cart_scope

    @property
    def cart_total(self) -> Decimal:
        return cart_ops.cart_total(self._cart)

    @property
    def cart_item_count(self) -> int:
        return cart_ops.cart_item_count(self._cart)

    # ------------------------------------------------------------------ authentication

    async def login(self, email: str, password: str) -> OperationResult:
        return await self._sign_in("login", lambda: self._identity_provider.login(email, password))

    async def login_with_federated_provider(self, credential: str | None = None) -> OperationResult:
        return await self._sign_in(
            "login_with_federated_provider",
            lambda: self._identity_provider.login_with_federated_provider(credential),
        )

    async def register(self, profile: RegistrationProfile | Mapping[str, Any]) -> OperationResult:
        self._error = None
        try:
            validated = (
                profile
                if isinstance(profile, RegistrationProfile)
                else RegistrationProfile.model_validate(dict(profile))
            )
        except ValidationError as e:
            self._error = validation_message(e)
            return OperationResult.failure(self._error)
        return await self._run("register", lambda: self._identity_provider.register(validated))

    async def logout(self) -> OperationResult:
        self._auth_epoch += 1
        self._signing_out = True
        try:
            await self._identity_provider.logout()
        except Exception as e:  # noqa: BLE001  # local cleanup must happen regardless
            log.warning("remote_logout_failed", error=str(e))
        finally:
            self._signing_out = False

        self._clear_session()
        self._error = None
        self._loading = False
        log.info("logged_out")
        return OperationResult.ok()

    async def request_password_reset(self, email: str) -> OperationResult:
        return await self._run(
            "request_password_reset", lambda: self._identity_provider.request_password_reset(email)
        )

    async def reset_password(self, token: str, new_password: str) -> OperationResult:
        return await self._run(
            "reset_password", lambda: self._identity_provider.reset_password(token, new_password)
        )

    async def verify_email(self, token: str) -> OperationResult:
        return await self._run("verify_email", lambda: self._identity_provider.verify_email(token))

    async def change_password(self, old_password: str, new_password: str) -> OperationResult:
        return await self._run(
            "change_password",
            lambda: self._identity_provider.change_password(old_password, new_password),
        )

    def notify_activity(self, kind: ActivityKind | str) -> None:
        """Feed a user interaction directly (hosts without an ActivitySource)."""

        self._on_activity(ActivityKind(kind))

    async def _sign_in(
        self, operation: str, call: Callable[[], Coroutine[Any, Any, LoginGrant]]
    ) -> OperationResult:
        self._auth_epoch += 1
        epoch = self._auth_epoch
        self._error = None
        self._loading = True
        self._sign_ins_in_flight += 1
        try:
            grant = await call()
        except Exception as e:  # noqa: BLE001  # no exception crosses the controller boundary
            if epoch != self._auth_epoch:
                return OperationResult.failure(SUPERSEDED_MESSAGE)
            self._loading = False
            self._error = _user_message(e)
            log.warning("auth_operation_failed", operation=operation, error=self._error)
            return OperationResult.failure(self._error)
        finally:
            self._sign_ins_in_flight -= 1

        if epoch != self._auth_epoch:
            log.info("auth_result_discarded", operation=operation, user_id=grant.user.id)
            return OperationResult.failure(SUPERSEDED_MESSAGE)

        self._loading = False
        self.credentials.set_access_token(
            grant.access_token, timedelta(days=self._settings.access_token_ttl_days)
        )
        if grant.refresh_token:
            self.credentials.set_refresh_token(
                grant.refresh_token, timedelta(days=self._settings.refresh_token_ttl_days)
            )
        self._adopt(grant.user)
        log.info("login_succeeded", operation=operation, user_id=grant.user.id)
        return OperationResult.ok(user=grant.user)

    async def _run(self, operation: str, call: Callable[[], Coroutine[Any, Any, Any]]) -> OperationResult:
        self._error = None
        self._loading = True
        try:
            value = await call()
        except Exception as e:  # noqa: BLE001
            self._error = _user_message(e)
            log.warning("auth_operation_failed", operation=operation, error=self._error)
            return OperationResult.failure(self._error)
        finally:
            self._loading = False
        return OperationResult.ok(message=value if isinstance(value, str) else None)

    def _on_auth_state(self, user: Identity | None) -> None:
        # Provider pushes are applied immediately, except a sign-in echo: while a login call
        # is resolving, `_sign_in` adopts (or discards) that user together with its tokens.
        if user is not None and self._sign_ins_in_flight:
            log.debug("auth_push_deferred_to_sign_in", user_id=user.id)
        elif user is not None:
            self._adopt(user)
        elif self._signing_out or not self._restore_cached_session():
            self._clear_session()
        self._mark_initialized()

    async def _restore_once(self) -> None:
        token = self.credentials.get_access_token()
        if not is_token_valid(token):
            if token is not None or self.credentials.get_identity_snapshot() is not None:
                log.info("cached_session_invalid")
            self.credentials.clear_all()
            return
        try:
            user = await self._identity_provider.get_current_user()
        except Exception as e:  # noqa: BLE001
            log.info("current_user_fetch_failed", error=str(e))
            self.credentials.clear_all()
            return
        self._adopt(user)

    def _restore_cached_session(self) -> bool:
        token = self.credentials.get_access_token()
        snapshot = self.credentials.get_identity_snapshot()
        if snapshot is None or not is_token_valid(token):
            return False
        self._adopt(snapshot)
        return True

    def _adopt(self, user: Identity) -> None:
        self._identity = user
        self._authenticated = True
        self.credentials.set_identity_snapshot(user)
        bind_identity(user.id)
        self._timer.start(self._on_session_timeout)
        self._install_activity_listener()
        self._activate_cart_scope(scope_for(user))

    def _clear_session(self) -> None:
        was_authenticated = self._authenticated
        self.credentials.clear_all()
        self._identity = None
        self._authenticated = False
        self._timer.clear()
        self._remove_activity_listener()
        bind_identity(None)
        self._activate_cart_scope(GUEST_SCOPE)
        if was_authenticated:
            log.info("session_cleared")

    def _mark_initialized(self) -> None:
        if not self._initialized.is_set():
            self._initialized.set()
            log.info("session_initialized", authenticated=self._authenticated)

    def _on_session_timeout(self) -> None:
        self._spawn(self._expire_session())

    async def _expire_session(self) -> None:
        if not self._authenticated:
            return
        await self.logout()
        self._error = SESSION_EXPIRED_MESSAGE
        log.info("session_expired")

    def _on_activity(self, _kind: ActivityKind) -> None:
        if self._authenticated:
            self._timer.reset(self._on_session_timeout)

    def _install_activity_listener(self) -> None:
        if self._activity is None or self._unsubscribe_activity is not None:
            return
        self._unsubscribe_activity = self._activity.subscribe(SESSION_ACTIVITY_KINDS, self._on_activity)

    def _remove_activity_listener(self) -> None:
        if self._unsubscribe_activity is not None:
            self._unsubscribe_activity()
            self._unsubscribe_activity = None

    async def _load_security_settings(self) -> None:
        if self._documents is None:
            return
        try:
            doc = await self._documents.get_document(SETTINGS_COLLECTION, SECURITY_SETTINGS_DOC)
        except Exception as e:  # noqa: BLE001  # the configured default still applies
            log.warning("security_settings_unavailable", error=str(e))
            return
        minutes = (doc or {}).get("sessionTimeoutMinutes")
        if isinstance(minutes, (int, float)) and not isinstance(minutes, bool) and minutes > 0:
            self._timer.timeout_seconds = float(minutes) * 60

    # ------------------------------------------------------------------ ledger

    def add_transaction(self, fields: NewTransaction | Mapping[str, Any]) -> Transaction:
        tx = ledger_ops.new_transaction(fields)
        existing = {t.id for t in self._transactions}
        while tx.id in existing:
            tx = ledger_ops.new_transaction(fields)
        self._set_ledger(ledger_ops.prepend(self._transactions, tx))
        return tx

    def delete_transaction(self, tx_id: str) -> None:
        if any(t.id == tx_id for t in self._transactions):
            self._set_ledger(ledger_ops.without(self._transactions, tx_id))

    def clear_ledger(self) -> None:
        self._set_ledger([])

    def _set_ledger(self, ledger: list[Transaction]) -> None:
        self._transactions = ledger
        self._kv.set(LEDGER_KEY, ledger_ops.dump_ledger(ledger))

    # ------------------------------------------------------------------ cart

    def add_to_cart(self, product: Product | Mapping[str, Any]) -> None:
        self._set_cart(cart_ops.add_item(self._cart, cart_ops.as_product(product)))

    def remove_from_cart(self, product_ref: str) -> None:
        self._set_cart(cart_ops.remove_item(self._cart, str(product_ref)))

    def update_quantity(self, product_ref: str, quantity: int) -> None:
        self._set_cart(cart_ops.set_quantity(self._cart, str(product_ref), quantity))

    def clear_cart(self) -> None:
        self._set_cart([])

    def _set_cart(self, items: list[LineItem]) -> None:
        self._cart = items
        payload = cart_ops.dump_items(items)
        self._carts.save(self._cart_scope, payload)
        if self._authenticated and self._identity is not None and self._documents is not None:
            stamp = datetime.now(tz=UTC).isoformat()
            self._own_cart_stamps.append(stamp)
            self._spawn(self._mirror_cart(self._documents, self._identity.id, payload, stamp))

    async def _mirror_cart(
        self, store: DocumentStore, user_id: str, payload: list[dict[str, Any]], stamp: str
    ) -> None:
        try:
            await store.upsert_merge(CARTS_COLLECTION, user_id, {"items": payload, "updatedAt": stamp})
        except Exception as e:  # noqa: BLE001  # the local copy stays the durable fallback
            log.warning("cart_mirror_failed", user_id=user_id, error=str(e))

    def _activate_cart_scope(self, scope: str) -> None:
        if scope == self._cart_scope:
            return
        if self._unsubscribe_cart is not None:
            self._unsubscribe_cart()
            self._unsubscribe_cart = None

        self._cart_scope = scope
        self._cart = cart_ops.load_items(self._carts.load(scope))
        log.info("cart_scope_activated", scope=scope, items=len(self._cart))

        if scope == GUEST_SCOPE or self._documents is None or self._identity is None:
            return
        user_id = self._identity.id
        try:
            self._unsubscribe_cart = self._documents.subscribe(
                CARTS_COLLECTION, user_id, lambda doc: self._on_remote_cart(scope, doc)
            )
        except UnsupportedOperationError:
            log.info("cart_subscription_unsupported", store=self._documents.name)

    def _on_remote_cart(self, scope: str, doc: dict[str, Any] | None) -> None:
        if scope != self._cart_scope or doc is None:
            return
        # Echo of one of our writes, possibly delivered after a newer one.
        if doc.get("updatedAt") in self._own_cart_stamps:
            return
        raw = doc.get("items")
        if not isinstance(raw, list):
            return
        items = cart_ops.load_items(raw)
        payload = cart_ops.dump_items(items)
        if payload == cart_ops.dump_items(self._cart):
            return
        self._cart = items
        self._carts.save(scope, payload)
        log.info("cart_remote_applied", scope=scope, items=len(items))

    # ------------------------------------------------------------------ preferences

    def set_theme(self, theme: Theme | str) -> None:
        self._theme = Theme(theme)
        self._kv.set(THEME_KEY, self._theme.value)

    def toggle_theme(self) -> Theme:
        self.set_theme(Theme.dark if self._theme == Theme.light else Theme.light)
        return self._theme

    def set_locale(self, locale: str) -> None:
        if not locale or not locale.strip():
            raise ValueError("locale must be a non-empty language code")
        self._locale = locale.strip()
        self._kv.set(LOCALE_KEY, self._locale)

    def set_reduced_motion_override(self, value: ReducedMotion | str) -> None:
        self._reduced_motion = ReducedMotion(value)
        self._kv.set(REDUCED_MOTION_KEY, self._reduced_motion.value)

    # ------------------------------------------------------------------ internals

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        try:
            task = asyncio.get_running_loop().create_task(coro)
        except RuntimeError:
            # Called outside an event loop (sync host code); background work cannot run.
            coro.close()
            log.warning("background_task_skipped")
            return
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


def _user_message(exc: Exception) -> str:
    if isinstance(exc, IdentityProviderError | UnsupportedOperationError):
        return str(exc)
    if isinstance(exc, ValidationError):
        return validation_message(exc)
    log.exception("unexpected_provider_error", exc_info=exc)
    return UNEXPECTED_ERROR_MESSAGE


# --- Module Notes -----------------------------------------------------------
# The routing layer watches `is_authenticated`; a timeout flips it to False and leaves
# SESSION_EXPIRED_MESSAGE in `error` for the login screen.
