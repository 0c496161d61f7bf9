"""
tests.test_credentials_tokens

Token freshness checks and the credential holder.
"""

from __future__ import annotations

import json
import time
from datetime import timedelta

import jwt
from jwt.utils import base64url_encode

from conftest import ALICE, make_token
from shopledger.auth.credentials import CredentialHolder
from shopledger.auth.jwt import is_token_valid, unverified_claims
from shopledger.storage.keys import ACCESS_TOKEN_KEY, IDENTITY_SNAPSHOT_KEY
from shopledger.storage.kv import MemoryKeyValueStore


def test_token_with_past_exp_is_invalid() -> None:
    assert is_token_valid(make_token(ttl=timedelta(seconds=-5))) is False


def test_token_with_future_exp_is_valid() -> None:
    assert is_token_valid(make_token(ttl=timedelta(seconds=30))) is True


def test_malformed_tokens_are_invalid_without_raising() -> None:
    for token in ("", "abc", "a.b.c", "not-a.jwt", None):
        assert is_token_valid(token) is False


def test_token_without_numeric_exp_is_invalid() -> None:
    no_exp = jwt.encode({"sub": "x"}, "s", algorithm="HS256")
    text_exp = jwt.encode({"sub": "x", "exp": "tomorrow"}, "s", algorithm="HS256")
    assert is_token_valid(no_exp) is False
    assert unverified_claims(text_exp) is None or is_token_valid(text_exp) is False


def test_only_the_payload_segment_is_decoded() -> None:
    payload = base64url_encode(json.dumps({"exp": int(time.time()) + 3600}).encode()).decode()
    assert is_token_valid(f"opaque.{payload}.sig!") is True
    assert is_token_valid(f"opaque.{payload}") is False
    assert is_token_valid("opaque.%%%.sig") is False
    list_payload = base64url_encode(b"[1, 2]").decode()
    assert is_token_valid(f"h.{list_payload}.s") is False


def test_is_token_valid_uses_supplied_clock() -> None:
    token = jwt.encode({"exp": 1_000}, "s", algorithm="HS256")
    assert is_token_valid(token, now=999) is True
    assert is_token_valid(token, now=1_000) is False


def test_holder_expires_tokens_after_their_lifetime() -> None:
    now = [time.time()]
    kv = MemoryKeyValueStore()
    holder = CredentialHolder(kv, clock=lambda: now[0])

    holder.set_access_token("tok", timedelta(days=1))
    holder.set_refresh_token("ref")
    assert holder.get_access_token() == "tok"

    now[0] += timedelta(days=1).total_seconds() + 1
    assert holder.get_access_token() is None
    assert kv.raw(ACCESS_TOKEN_KEY) is None
    assert holder.get_refresh_token() == "ref"


def test_holder_snapshot_and_clear_all() -> None:
    kv = MemoryKeyValueStore()
    holder = CredentialHolder(kv)
    holder.set_access_token("tok")
    holder.set_identity_snapshot(ALICE)

    assert holder.get_identity_snapshot() == ALICE

    holder.clear_all()
    holder.clear_all()
    assert holder.get_access_token() is None
    assert holder.get_identity_snapshot() is None
    assert kv.keys() == []


def test_corrupt_snapshot_reads_as_none() -> None:
    kv = MemoryKeyValueStore()
    kv.set(IDENTITY_SNAPSHOT_KEY, {"name": "no id"})
    assert CredentialHolder(kv).get_identity_snapshot() is None


# --- Module Notes -----------------------------------------------------------
# Token helpers come from conftest (HS256 with a test secret).
