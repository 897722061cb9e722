"""In-process store doubles honour the same contracts as the real adapters."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from authcore.services._shared.errors import (
    ExpiredTokenError,
    RevokedTokenError,
    UnknownTokenError,
)
from authcore.services._shared.ports import InMemoryRefreshTokenStore, InMemoryRevocationStore

KEY = "in-memory-test-key-with-32-plus-bytes"


class _Ticker:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now


# ----------------------------- Revocation list ----------------------------- #
def test_revocation_entry_expires_after_ttl():
    clock = _Ticker(1000.0)
    store = InMemoryRevocationStore(clock=clock)
    store.add("jti-1", 60)

    clock.now += 59
    assert store.contains("jti-1") is True
    clock.now += 1
    assert store.contains("jti-1") is False


def test_revocation_add_and_remove_are_idempotent():
    store = InMemoryRevocationStore()
    store.add("jti-1", 60)
    store.add("jti-1", 60)
    assert store.contains("jti-1") is True
    store.remove("jti-1")
    store.remove("jti-1")
    assert store.contains("jti-1") is False
    assert store.ping() is True


# ------------------------------ Refresh tokens ----------------------------- #
@pytest.fixture()
def clock() -> _Ticker:
    return _Ticker(datetime(2026, 3, 1, tzinfo=UTC))


@pytest.fixture()
def store(clock) -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore(key=KEY, clock=clock)


def test_rotation_is_single_use(store):
    raw, _ = store.issue(1, 3600)
    record = store.validate_and_consume(raw)

    new_raw, successor = store.rotate(record, 3600)
    assert store.find(raw).replaced_by == successor.jti
    assert store.validate_and_consume(new_raw).user_id == 1

    with pytest.raises(RevokedTokenError):
        store.rotate(record, 3600)
    with pytest.raises(RevokedTokenError):
        store.validate_and_consume(raw)


def test_validation_order(store, clock):
    with pytest.raises(UnknownTokenError):
        store.validate_and_consume("missing")

    raw, record = store.issue(1, 60)
    clock.now += timedelta(seconds=60)
    with pytest.raises(ExpiredTokenError):
        store.validate_and_consume(raw)

    store.revoke(record)
    with pytest.raises(RevokedTokenError):
        store.validate_and_consume(raw)


def test_sweep_removes_expired_records(store, clock):
    old_raw, _ = store.issue(1, 60)
    live_raw, _ = store.issue(1, 3600)
    clock.now += timedelta(seconds=61)

    assert store.sweep_expired(clock()) == 1
    assert store.find(old_raw) is None
    assert store.find(live_raw) is not None
