"""
tests.test_storage_kv

Local persistence: JSON fallbacks, SQL backing and scoped collections.
"""

from __future__ import annotations

from shopledger.auth.models import Identity
from shopledger.db.init_db import init_db
from shopledger.db.session import create_engine, create_sessionmaker
from shopledger.storage.kv import MemoryKeyValueStore, SqlKeyValueStore
from shopledger.storage.scoped import GUEST_SCOPE, ScopedCollectionStore, scope_for


def test_get_returns_fallback_for_missing_and_malformed_values() -> None:
    kv = MemoryKeyValueStore({"broken": "{not json"})
    assert kv.get("missing", "dflt") == "dflt"
    assert kv.get("broken", []) == []


def test_set_ignores_unserializable_values() -> None:
    kv = MemoryKeyValueStore()
    kv.set("k", {"ok": 1})
    kv.set("k", {"bad": object()})
    assert kv.get("k") == {"ok": 1}


def test_remove_is_idempotent() -> None:
    kv = MemoryKeyValueStore()
    kv.set("k", 1)
    kv.remove("k")
    kv.remove("k")
    assert kv.get("k", None) is None


def test_sql_store_roundtrip_and_overwrite() -> None:
    engine = create_engine(url="sqlite://")
    init_db(engine)
    kv = SqlKeyValueStore(create_sessionmaker(engine))

    kv.set("pf_theme", "dark")
    kv.set("pf_theme", "light")
    kv.set("pf_tx", [{"id": "a"}])

    assert kv.get("pf_theme") == "light"
    assert kv.get("pf_tx") == [{"id": "a"}]
    kv.set("pf_cart:guest", [])
    assert kv.keys(prefix="pf_cart") == ["pf_cart:guest"]
    kv.remove("pf_theme")
    assert kv.get("pf_theme", "fallback") == "fallback"


def test_sql_store_degrades_when_table_missing() -> None:
    # No init_db: every read fails inside the driver.
    kv = SqlKeyValueStore(create_sessionmaker(create_engine(url="sqlite://")))
    assert kv.get("anything", 42) == 42
    kv.set("anything", 1)


def test_scoped_store_keys_and_isolation() -> None:
    kv = MemoryKeyValueStore()
    carts = ScopedCollectionStore(kv, prefix="pf_cart")
    user_scope = scope_for(Identity(id="42", name="", email=""))

    carts.save(GUEST_SCOPE, [{"product_ref": "p1"}])
    assert user_scope == "user:42"
    assert carts.load(user_scope) == []
    assert kv.get("pf_cart:guest") == [{"product_ref": "p1"}]

    kv.set(carts.key_for(user_scope), {"not": "a list"})
    assert carts.load(user_scope) == []


# --- Module Notes -----------------------------------------------------------
# `sqlite://` keeps the SQL store in memory for the test process.
