from __future__ import annotations

import pytest

from authcore.core.config import (
    DEFAULT_SECRET_KEY,
    DEFAULT_TOKEN_SECRET,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    check_secrets,
    env_bool,
    env_int,
    env_list,
    get_config,
)
from authcore.factory import create_app


@pytest.mark.parametrize(
    "raw, expected",
    [("1", True), ("YES", True), ("on", True), ("0", False), ("nope", False)],
)
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("FLAG_UNDER_TEST", raw)
    assert env_bool("FLAG_UNDER_TEST") is expected


def test_env_bool_default(monkeypatch):
    monkeypatch.delenv("FLAG_UNDER_TEST", raising=False)
    assert env_bool("FLAG_UNDER_TEST", True) is True


def test_env_int_and_list(monkeypatch):
    monkeypatch.setenv("INT_UNDER_TEST", " ")
    assert env_int("INT_UNDER_TEST", 7) == 7
    monkeypatch.setenv("INT_UNDER_TEST", "42")
    assert env_int("INT_UNDER_TEST", 7) == 42

    monkeypatch.setenv("LIST_UNDER_TEST", "/a/, ,/b/")
    assert env_list("LIST_UNDER_TEST", ()) == ("/a/", "/b/")


@pytest.mark.parametrize(
    "name, cls",
    [("testing", TestingConfig), ("production", ProductionConfig), ("whatever", DevelopmentConfig)],
)
def test_get_config_selects_by_app_env(monkeypatch, name, cls):
    monkeypatch.setenv("APP_ENV", name)
    assert get_config() is cls


def test_token_defaults():
    assert TestingConfig.ACCESS_TOKEN_TTL == 3600
    assert TestingConfig.REFRESH_TOKEN_TTL == 30 * 24 * 3600
    assert len(TestingConfig.TOKEN_SECRET) >= 32
    assert TestingConfig.REDIS_URL is None


def test_production_refuses_placeholder_secrets():
    config = {
        "REQUIRE_EXPLICIT_SECRETS": True,
        "SECRET_KEY": "a-real-flask-secret",
        "TOKEN_SECRET": DEFAULT_TOKEN_SECRET,
    }
    with pytest.raises(RuntimeError, match="TOKEN_SECRET"):
        check_secrets(config)

    config["TOKEN_SECRET"] = "x" * 32
    config["SECRET_KEY"] = DEFAULT_SECRET_KEY
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        check_secrets(config)

    config["SECRET_KEY"] = "a-real-flask-secret"
    check_secrets(config)


def test_non_production_tolerates_placeholder_secrets():
    assert ProductionConfig.REQUIRE_EXPLICIT_SECRETS is True
    assert DevelopmentConfig.REQUIRE_EXPLICIT_SECRETS is False
    check_secrets({"SECRET_KEY": DEFAULT_SECRET_KEY, "TOKEN_SECRET": DEFAULT_TOKEN_SECRET})


def test_create_app_refuses_production_with_placeholder_secrets():
    class PlaceholderProduction(ProductionConfig):
        SECRET_KEY = DEFAULT_SECRET_KEY
        TOKEN_SECRET = DEFAULT_TOKEN_SECRET

    with pytest.raises(RuntimeError, match="placeholder secrets"):
        create_app(PlaceholderProduction, instance_relative_config=False)
