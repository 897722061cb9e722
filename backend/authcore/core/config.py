"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Placeholder secrets; production refuses to start with either.
DEFAULT_SECRET_KEY: Final[str] = "CHANGE_ME"
DEFAULT_TOKEN_SECRET: Final[str] = "CHANGE_ME_TOKEN_SECRET_AT_LEAST_32_BYTES"


# Load .env in development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


def env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Parse a comma-separated list from an environment variable."""
    val = os.getenv(name)
    if val is None:
        return default
    return tuple(item.strip() for item in val.split(",") if item.strip())


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    TOKEN_SECRET: str
        Key for the refresh-secret HMAC and the access-token signature.
        Must be at least 32 bytes for HS256.
    REQUIRE_EXPLICIT_SECRETS: bool
        When true, :func:`check_secrets` rejects placeholder secrets at
        startup. Enabled in production.
    ACCESS_TOKEN_TTL: int
        Access token lifetime in seconds. Also used as the TTL of revocation
        entries written at logout.
    REFRESH_TOKEN_TTL: int
        Refresh token lifetime in seconds.
    CONFIRMATION_TOKEN_TTL: int
        Validity window of e-mail confirmation tokens in seconds.
    REDIS_URL: str | None
        Backing store for the revocation list. When unset an in-process
        store is used (single worker only).
    REDIS_TIMEOUT_SECONDS: float
        Socket and connect timeout applied to every Redis call.
    REVOCATION_KEY_PREFIX: str
        Key namespace of revocation entries.
    REVOCATION_FAIL_OPEN: bool
        When ``True`` (default) a revocation store outage lets tokens through;
        when ``False`` every bearer token is rejected during the outage.
    AUTH_ACCEPT_JTI_HINT: bool
        Consult the deprecated ``X-Token-Jti`` header when a verified token
        carries no ``jti`` claim.
    AUTH_GATE_EXEMPT_PREFIXES: tuple[str, ...]
        Path prefixes skipped by the request gate.
    ALLOWED_EMAIL_DOMAIN: str | None
        Registration e-mail domain restriction (``None`` accepts any domain).
    PUBLIC_BASE_URL: str
        Base URL used to build confirmation links.
    MAIL_*:
        SMTP settings for the confirmation notifier. Without ``MAIL_SERVER``
        notifications are written to the log.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    CORS_MAX_AGE: int
        Preflight cache lifetime in seconds.
    PROXY_HOPS: int
        Number of trusted reverse proxies in front of the app; ``0`` disables
        ``X-Forwarded-*`` handling.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)
    TOKEN_SECRET = os.getenv("TOKEN_SECRET", DEFAULT_TOKEN_SECRET)
    REQUIRE_EXPLICIT_SECRETS = False

    # Token lifetimes (seconds)
    ACCESS_TOKEN_TTL = env_int("ACCESS_TOKEN_TTL", 3600)
    REFRESH_TOKEN_TTL = env_int("REFRESH_TOKEN_TTL", 2592000)
    CONFIRMATION_TOKEN_TTL = env_int("CONFIRMATION_TOKEN_TTL", 86400)

    # Revocation list
    REDIS_URL = os.getenv("REDIS_URL")
    REDIS_TIMEOUT_SECONDS = float(os.getenv("REDIS_TIMEOUT_SECONDS", "0.5"))
    REVOCATION_KEY_PREFIX = os.getenv("REVOCATION_KEY_PREFIX", "auth:blacklist:")
    REVOCATION_FAIL_OPEN = env_bool("REVOCATION_FAIL_OPEN", True)

    # Request gate
    AUTH_ACCEPT_JTI_HINT = env_bool("AUTH_ACCEPT_JTI_HINT", True)
    AUTH_GATE_EXEMPT_PREFIXES = env_list("AUTH_GATE_EXEMPT_PREFIXES", ("/api/v1/auth/",))

    # Registration
    ALLOWED_EMAIL_DOMAIN = os.getenv("ALLOWED_EMAIL_DOMAIN") or None
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")

    # Mail
    MAIL_SERVER = os.getenv("MAIL_SERVER") or None
    MAIL_PORT = env_int("MAIL_PORT", 587)
    MAIL_USERNAME = os.getenv("MAIL_USERNAME") or None
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD") or None
    MAIL_USE_TLS = env_bool("MAIL_USE_TLS", True)
    MAIL_FROM = os.getenv("MAIL_FROM", "no-reply@localhost")
    MAIL_MAX_ATTEMPTS = env_int("MAIL_MAX_ATTEMPTS", 3)
    MAIL_RETRY_DELAY_SECONDS = float(os.getenv("MAIL_RETRY_DELAY_SECONDS", "2"))

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_MAX_AGE = env_int("CORS_MAX_AGE", 600)

    # Reverse proxy
    PROXY_HOPS = env_int("PROXY_HOPS", 1)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    PROXY_HOPS = env_int("PROXY_HOPS", 0)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Never talks to Redis or SMTP; in-process doubles are wired instead.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    REDIS_URL = None
    MAIL_SERVER = None
    TOKEN_SECRET = "test-secret-key-for-hashing-tokens-minimum-32-chars"
    ACCESS_TOKEN_TTL = 3600
    REFRESH_TOKEN_TTL = 2592000
    ALLOWED_EMAIL_DOMAIN = None


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled while relying on WSGI-level log
    configuration for noise control.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    REQUIRE_EXPLICIT_SECRETS = True


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def check_secrets(config: Mapping[str, object]) -> None:
    """Refuse placeholder secrets when ``REQUIRE_EXPLICIT_SECRETS`` is set.

    Raises
    ------
    RuntimeError
        If ``SECRET_KEY`` or ``TOKEN_SECRET`` is missing or still holds its
        placeholder value.
    """
    if not config.get("REQUIRE_EXPLICIT_SECRETS"):
        return
    placeholders = {"SECRET_KEY": DEFAULT_SECRET_KEY, "TOKEN_SECRET": DEFAULT_TOKEN_SECRET}
    unset = sorted(
        name for name, default in placeholders.items() if config.get(name) in (None, "", default)
    )
    if unset:
        raise RuntimeError(f"Refusing to start with placeholder secrets: {', '.join(unset)}")
