from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from authcore.models.user import User
from tests.factories.tokens import ConfirmationTokenFactory, RefreshTokenFactory
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


def test_password_is_hashed_and_write_only():
    user = User(username="ana", email="ana@example.com")
    user.password = "Str0ng!pass"

    assert user.password_hash != "Str0ng!pass"
    assert user.verify_password("Str0ng!pass") is True
    assert user.verify_password("wrong") is False
    with pytest.raises(AttributeError):
        _ = user.password


def test_email_and_username_are_normalized():
    user = User(username="  ana ", email="  Ana@Example.COM ")
    assert user.username == "ana"
    assert user.email == "ana@example.com"


@pytest.mark.parametrize("email", ["", "no-at-sign", "ana@localhost"])
def test_invalid_email_is_rejected(email):
    with pytest.raises(ValueError):
        User(username="ana", email=email)


def test_enable_flips_once():
    user = UserFactory(enabled=False)
    assert user.enable() is True
    assert user.enabled is True
    assert user.enable() is False


def test_confirmation_token_expiry_boundary():
    pending = ConfirmationTokenFactory()
    expires_at = pending.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=UTC)

    assert pending.is_confirmed is False
    assert pending.is_expired(expires_at - timedelta(seconds=1)) is False
    assert pending.is_expired(expires_at) is True

    pending.confirmed_at = datetime.now(UTC)
    assert pending.is_confirmed is True


def test_repr_never_exposes_secrets():
    token = RefreshTokenFactory()
    confirmation = ConfirmationTokenFactory()

    assert token.token_hash not in repr(token)
    assert token.jti in repr(token)
    assert confirmation.token not in repr(confirmation)
    assert token.user.password_hash not in repr(token.user)
    assert "username=" in repr(token.user)


def test_credentials_match_handles_missing_user():
    user = UserFactory()

    assert User.credentials_match(user, DEFAULT_PASSWORD) is True
    assert User.credentials_match(user, "nope") is False
    assert User.credentials_match(None, DEFAULT_PASSWORD) is False
