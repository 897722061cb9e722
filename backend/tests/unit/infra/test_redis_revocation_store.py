"""
Unit tests for RedisRevocationStore using fakeredis.

They cover:
- add / contains / remove with the key namespace and TTL
- idempotence of add and remove
- fail-open and fail-closed behaviour during an outage
"""

from __future__ import annotations

import logging

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from authcore.infra.redis.redis_revocation_store import RedisRevocationStore


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis(decode_responses=True)
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    return RedisRevocationStore(fake_redis)


class _DownRedis:
    """Every command fails like an unreachable server."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise RedisConnectionError("connection refused")

        return _fail


def test_add_writes_namespaced_key_with_ttl(store, fake_redis):
    store.add("jti-1", 3600)

    assert fake_redis.get("auth:blacklist:jti-1") == "revoked"
    assert 3590 <= fake_redis.ttl("auth:blacklist:jti-1") <= 3600
    assert store.contains("jti-1") is True
    assert store.contains("jti-2") is False


def test_add_is_idempotent_and_refreshes_ttl(store, fake_redis):
    store.add("jti-1", 10)
    store.add("jti-1", 100)
    assert store.contains("jti-1") is True
    assert fake_redis.ttl("auth:blacklist:jti-1") > 10


def test_non_positive_ttl_is_clamped(store, fake_redis):
    store.add("jti-1", 0)
    assert fake_redis.ttl("auth:blacklist:jti-1") == 1


def test_remove_is_idempotent(store):
    store.add("jti-1", 60)
    store.remove("jti-1")
    store.remove("jti-1")
    assert store.contains("jti-1") is False


def test_blank_jti_is_ignored(store, fake_redis):
    store.add("", 60)
    assert fake_redis.dbsize() == 0
    assert store.contains("") is False


def test_blank_jti_remove_leaves_prefix_key_alone(store, fake_redis):
    fake_redis.set("auth:blacklist:", "1")
    store.remove("")
    assert fake_redis.get("auth:blacklist:") == "1"


def test_custom_prefix(fake_redis):
    store = RedisRevocationStore(fake_redis, prefix="svc:revoked:")
    store.add("x", 60)
    assert fake_redis.exists("svc:revoked:x") == 1


def test_outage_fails_open_by_default(caplog):
    store = RedisRevocationStore(_DownRedis())  # type: ignore[arg-type]
    with caplog.at_level(logging.ERROR):
        assert store.contains("jti-1") is False
    assert any("revocation lookup failed" in r.getMessage() for r in caplog.records)


def test_outage_fails_closed_when_configured():
    store = RedisRevocationStore(_DownRedis(), fail_open=False)  # type: ignore[arg-type]
    assert store.contains("jti-1") is True


def test_outage_never_raises_on_writes():
    store = RedisRevocationStore(_DownRedis())  # type: ignore[arg-type]
    store.add("jti-1", 60)
    store.remove("jti-1")
    assert store.ping() is False


def test_ping_reports_health(store):
    assert store.ping() is True
