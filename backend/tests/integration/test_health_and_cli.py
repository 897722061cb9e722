from __future__ import annotations

from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from authcore.core.extensions import REVOCATION_STORE_KEY
from authcore.infra.redis.redis_revocation_store import RedisRevocationStore
from authcore.models.base import utcnow
from authcore.models.refresh_token import RefreshToken
from tests.factories.tokens import RefreshTokenFactory


class _DownRedis:
    def ping(self):
        from redis.exceptions import ConnectionError as RedisConnectionError

        raise RedisConnectionError("down")


# --------------------------------- Health ---------------------------------- #
def test_health_ok(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "ok"
    assert body["db"] == "ok"
    assert body["revocation_store"] == "ok"


def test_health_reports_degraded_revocation_store(client, app):
    app.extensions[REVOCATION_STORE_KEY] = RedisRevocationStore(_DownRedis())  # type: ignore[arg-type]
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json()["revocation_store"] == "degraded"


def test_health_fails_without_database(client, session, monkeypatch):
    def _boom(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("db down"))

    monkeypatch.setattr(session, "execute", _boom)
    resp = client.get("/api/v1/health")
    assert resp.status_code == 503
    assert resp.get_json()["db"] == "fail"


def test_unknown_route_is_problem_json(client):
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"


# ----------------------------------- CLI ----------------------------------- #
def test_revoke_and_unrevoke_jti(cli_runner, revocations):
    result = cli_runner.invoke(args=["tokens", "revoke-jti", "abc", "--ttl", "60"])
    assert result.exit_code == 0, result.output
    assert "Revoked abc for 60s." in result.output
    assert revocations.contains("abc")

    result = cli_runner.invoke(args=["tokens", "unrevoke-jti", "abc"])
    assert result.exit_code == 0, result.output
    assert not revocations.contains("abc")


def test_revoke_jti_defaults_to_access_ttl(cli_runner):
    result = cli_runner.invoke(args=["tokens", "revoke-jti", "xyz"])
    assert "Revoked xyz for 3600s." in result.output


def test_sweep_deletes_expired_refresh_tokens(cli_runner, session):
    now = utcnow()
    live_jti = RefreshTokenFactory(issued_at=now, expires_at=now + timedelta(days=1)).jti
    RefreshTokenFactory(issued_at=now - timedelta(days=3), expires_at=now - timedelta(days=2))

    result = cli_runner.invoke(args=["tokens", "sweep"])
    assert result.exit_code == 0, result.output
    assert "Deleted 1 expired refresh token(s)." in result.output
    assert session.execute(select(RefreshToken.jti)).scalars().all() == [live_jti]
