"""Unit tests for the PyJWT-backed access token codec."""

from __future__ import annotations

import base64
from datetime import UTC, datetime, timedelta

import jwt
import pytest
from freezegun import freeze_time

from authcore.infra.jwt.jwt_access_token_codec import JWTAccessTokenCodec
from authcore.services._shared.errors import (
    ExpiredTokenError,
    MalformedTokenError,
    TamperedTokenError,
)

KEY = "unit-test-signing-key-with-32-plus-bytes"


@pytest.fixture()
def codec() -> JWTAccessTokenCodec:
    return JWTAccessTokenCodec(key=KEY)


def _flip_signature_char(token: str) -> str:
    header, payload, signature = token.split(".")
    i = len(signature) // 2
    replacement = "A" if signature[i] != "A" else "B"
    return ".".join([header, payload, signature[:i] + replacement + signature[i + 1 :]])


def test_issue_then_verify_returns_claims(codec):
    with freeze_time("2026-01-01 12:00:00"):
        token = codec.issue(subject="42", jti="jti-1", ttl_seconds=3600)
        claims = codec.verify(token)

    assert claims.subject == "42"
    assert claims.jti == "jti-1"
    assert claims.issued_at == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
    assert claims.expires_at - claims.issued_at == timedelta(hours=1)


def test_flipped_signature_character_is_tampered(codec):
    token = codec.issue(subject="1", jti="j", ttl_seconds=60)
    with pytest.raises(TamperedTokenError):
        codec.verify(_flip_signature_char(token))


def test_swapped_payload_is_tampered(codec):
    a = codec.issue(subject="1", jti="a", ttl_seconds=60)
    b = codec.issue(subject="2", jti="b", ttl_seconds=60)
    forged = ".".join([a.split(".")[0], b.split(".")[1], a.split(".")[2]])
    with pytest.raises(TamperedTokenError):
        codec.verify(forged)


def test_token_signed_with_other_key_is_tampered(codec):
    foreign = JWTAccessTokenCodec(key="another-signing-key-with-32-plus-bytes")
    with pytest.raises(TamperedTokenError):
        codec.verify(foreign.issue(subject="1", jti="j", ttl_seconds=60))


def test_unsigned_token_is_rejected(codec):
    now = datetime.now(UTC)
    token = jwt.encode(
        {"sub": "1", "jti": "j", "iat": now, "exp": now + timedelta(minutes=5)},
        None,
        algorithm="none",
    )
    with pytest.raises(TamperedTokenError):
        codec.verify(token)


def test_other_algorithm_is_malformed(codec):
    now = datetime.now(UTC)
    token = jwt.encode(
        {"sub": "1", "jti": "j", "iat": now, "exp": now + timedelta(minutes=5)},
        KEY + KEY,
        algorithm="HS512",
    )
    with pytest.raises(MalformedTokenError):
        codec.verify(token)


@pytest.mark.parametrize(
    "token",
    ["", "not-a-jwt", "a.b", ".payload.sig", "head..sig", "a.b.c.d", "abc.def.ghi", "é.é.é"],
)
def test_structurally_invalid_tokens_are_malformed(codec, token):
    with pytest.raises(MalformedTokenError):
        codec.verify(token)


def test_missing_required_claim_is_malformed(codec):
    token = jwt.encode({"sub": "1", "jti": "j"}, KEY, algorithm="HS256")
    with pytest.raises(MalformedTokenError):
        codec.verify(token)


def test_token_without_jti_verifies_with_none(codec):
    now = datetime.now(UTC)
    token = jwt.encode(
        {"sub": "7", "iat": now, "exp": now + timedelta(minutes=5)}, KEY, algorithm="HS256"
    )
    assert codec.verify(token).jti is None


def test_expiry_is_reached_at_exp(codec):
    with freeze_time("2026-01-01 12:00:00") as frozen:
        token = codec.issue(subject="1", jti="j", ttl_seconds=60)
        frozen.tick(timedelta(seconds=59))
        assert codec.verify(token).subject == "1"
        frozen.tick(timedelta(seconds=1))
        with pytest.raises(ExpiredTokenError):
            codec.verify(token)


def test_signature_is_checked_before_expiry(codec):
    with freeze_time("2026-01-01 12:00:00") as frozen:
        token = codec.issue(subject="1", jti="j", ttl_seconds=60)
        frozen.tick(timedelta(hours=2))
        with pytest.raises(TamperedTokenError):
            codec.verify(_flip_signature_char(token))


def test_non_object_payload_is_malformed(codec):
    token = codec.issue(subject="1", jti="j", ttl_seconds=60)
    header, _, signature = token.split(".")
    payload = base64.urlsafe_b64encode(b"[1, 2]").rstrip(b"=").decode()
    with pytest.raises(MalformedTokenError):
        codec.verify(f"{header}.{payload}.{signature}")


@pytest.mark.parametrize("signature", ["ghi", "é"])
def test_garbage_signature_on_readable_token_is_tampered(codec, signature):
    header, payload, _ = codec.issue(subject="1", jti="j", ttl_seconds=60).split(".")
    with pytest.raises(TamperedTokenError):
        codec.verify(f"{header}.{payload}.{signature}")
