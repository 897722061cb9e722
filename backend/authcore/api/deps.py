"""Shared API helpers: responses, timing, identity injection, service wiring."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from authcore.core.errors import Unauthorized
from authcore.core.extensions import get_notifier, get_revocation_store
from authcore.core.logger import ensure_request_id
from authcore.infra.jwt.jwt_access_token_codec import JWTAccessTokenCodec
from authcore.infra.sql.sqlalchemy_refresh_token_store import SQLAlchemyRefreshTokenStore
from authcore.services._shared.base import ServiceContext
from authcore.services.auth.dto import AuthTokenConfig
from authcore.services.auth.gate import RequestGate
from authcore.services.auth.service import AuthService
from authcore.services.identity.service import IdentityService
from authcore.services.registration.service import UserRegistrationService

F = TypeVar("F", bound=Callable[..., Any])


# --------------------------------------------------------------------------- #
# Request-scoped context
# --------------------------------------------------------------------------- #


def get_service_ctx() -> ServiceContext:
    """Return the request's :class:`ServiceContext`, creating it on first use."""
    ctx = getattr(g, "service_ctx", None)
    if ctx is None:
        ctx = ServiceContext(request_id=ensure_request_id())
        g.service_ctx = ctx
    return ctx


def require_auth(func: F) -> F:
    """Reject anonymous requests and pass the bound context as ``ctx``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        ctx = get_service_ctx()
        if not ctx.is_authenticated:
            raise Unauthorized("Authentication required")
        kwargs["ctx"] = ctx
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Service wiring
# --------------------------------------------------------------------------- #


def get_codec() -> JWTAccessTokenCodec:
    return JWTAccessTokenCodec(key=current_app.config["TOKEN_SECRET"])


def get_refresh_store() -> SQLAlchemyRefreshTokenStore:
    return SQLAlchemyRefreshTokenStore(key=current_app.config["TOKEN_SECRET"])


def get_request_gate() -> RequestGate:
    config = current_app.config
    return RequestGate(
        codec=get_codec(),
        revocations=get_revocation_store(),
        exempt_prefixes=tuple(config.get("AUTH_GATE_EXEMPT_PREFIXES", ("/api/v1/auth/",))),
        accept_jti_hint=bool(config.get("AUTH_ACCEPT_JTI_HINT", True)),
    )


def get_registration_service() -> UserRegistrationService:
    return UserRegistrationService(
        notifier=get_notifier(),
        confirmation_ttl=timedelta(seconds=int(current_app.config["CONFIRMATION_TOKEN_TTL"])),
        ctx=get_service_ctx(),
    )


def get_auth_service() -> AuthService:
    """Build an :class:`AuthService` from app config and extensions."""
    config = current_app.config
    return AuthService(
        codec=get_codec(),
        refresh_store=get_refresh_store(),
        revocation_store=get_revocation_store(),
        registration=get_registration_service(),
        token_cfg=AuthTokenConfig(
            access_ttl=int(config["ACCESS_TOKEN_TTL"]),
            refresh_ttl=int(config["REFRESH_TOKEN_TTL"]),
        ),
        ctx=get_service_ctx(),
    )


def get_identity_service(ctx: ServiceContext | None = None) -> IdentityService:
    return IdentityService(ctx=ctx or get_service_ctx())


# --------------------------------------------------------------------------- #
# Responses
# --------------------------------------------------------------------------- #


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
