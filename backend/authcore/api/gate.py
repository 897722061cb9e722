"""Flask glue for :class:`authcore.services.auth.gate.RequestGate`."""

from __future__ import annotations

from flask import Flask, request

from authcore.core.errors import Unauthorized
from authcore.services._shared.errors import RevokedTokenError, TokenError

INVALID_ACCESS_TOKEN = "Invalid access token"


def init_app(app: Flask) -> None:
    """Run the request gate before every request.

    The verified identity lands on ``flask.g.service_ctx``. Revoked tokens
    answer ``Token has been revoked``; every other verification failure
    answers ``Invalid access token`` (the concrete class is logged).
    """

    @app.before_request
    def _authenticate_bearer() -> None:
        from authcore.api.deps import get_request_gate, get_service_ctx

        gate = get_request_gate()
        try:
            gate.authenticate(request.path, request.headers, get_service_ctx())
        except RevokedTokenError as exc:
            raise Unauthorized(
                str(exc), bearer_error="invalid_token", error_type=type(exc).__name__
            ) from exc
        except TokenError as exc:
            raise Unauthorized(
                INVALID_ACCESS_TOKEN, bearer_error="invalid_token", error_type=type(exc).__name__
            ) from exc
