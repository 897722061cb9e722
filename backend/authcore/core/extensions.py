"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import logging

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

log = logging.getLogger(__name__)

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
redis_client: redis.Redis | None = None

REVOCATION_STORE_KEY = "revocation_store"
NOTIFIER_KEY = "confirmation_notifier"


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, Redis and the auth collaborators.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`authcore.models` package to ensure SQLAlchemy metadata is ready
        for migrations.

    Notes
    -----
    The revocation store and the confirmation notifier are stored in
    ``app.extensions`` so tests can swap them per application. A Redis
    outage at startup is logged rather than raised; the store then answers
    according to ``REVOCATION_FAIL_OPEN``.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from authcore import models as _models  # noqa: F401

    migrate.init_app(app, db)

    _init_revocation_store(app)
    _init_notifier(app)


def _init_revocation_store(app: Flask) -> None:
    from authcore.infra.redis.redis_revocation_store import RedisRevocationStore
    from authcore.services._shared.ports import InMemoryRevocationStore

    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        app.extensions[REVOCATION_STORE_KEY] = InMemoryRevocationStore()
        log.info("REDIS_URL unset; using in-process revocation store")
        return

    timeout = float(app.config.get("REDIS_TIMEOUT_SECONDS", 0.5))
    redis_client = redis.Redis.from_url(
        redis_url,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
        decode_responses=True,
    )
    try:
        redis_client.ping()
    except RedisError:
        log.warning("Redis at %r is not reachable at startup", redis_url, exc_info=True)
    app.extensions["redis_client"] = redis_client
    app.extensions[REVOCATION_STORE_KEY] = RedisRevocationStore(
        redis_client,
        prefix=app.config.get("REVOCATION_KEY_PREFIX", "auth:blacklist:"),
        fail_open=bool(app.config.get("REVOCATION_FAIL_OPEN", True)),
    )


def _init_notifier(app: Flask) -> None:
    from authcore.infra.mail.smtp_notifier import (
        LoggingConfirmationNotifier,
        SmtpConfirmationNotifier,
    )

    if app.config.get("MAIL_SERVER"):
        app.extensions[NOTIFIER_KEY] = SmtpConfirmationNotifier.from_config(app.config)
    else:
        app.extensions[NOTIFIER_KEY] = LoggingConfirmationNotifier(
            base_url=app.config.get("PUBLIC_BASE_URL", "http://localhost:8000")
        )


def get_revocation_store():
    """Return the revocation store bound to the current application."""
    return current_app.extensions[REVOCATION_STORE_KEY]


def get_notifier():
    """Return the confirmation notifier bound to the current application."""
    return current_app.extensions[NOTIFIER_KEY]
