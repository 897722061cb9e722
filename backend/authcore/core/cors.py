"""Cross-origin policy for the ``/api`` routes."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

REQUEST_HEADERS = ("Authorization", "Content-Type", "X-Request-ID", "X-Correlation-ID")
JTI_HINT_HEADER = "X-Token-Jti"
EXPOSED_HEADERS = ("X-Request-ID", "WWW-Authenticate", "Retry-After")


def _origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


def init_app(app: Flask) -> None:
    """Install the CORS policy from ``CORS_ORIGINS`` and ``CORS_MAX_AGE``.

    Bearer tokens travel in ``Authorization``, never in cookies, so a blank or
    ``"*"`` origin list is served without credential support. The deprecated
    ``X-Token-Jti`` header is only allowed while ``AUTH_ACCEPT_JTI_HINT`` is on.
    ``WWW-Authenticate`` is exposed so browser clients can read 401 details.
    """
    origins = _origins(app.config.get("CORS_ORIGINS", ""))
    wildcard = not origins or origins == ["*"]

    allow_headers = list(REQUEST_HEADERS)
    if app.config.get("AUTH_ACCEPT_JTI_HINT", False):
        allow_headers.append(JTI_HINT_HEADER)

    api_prefix = app.config.get("API_BASE_PREFIX", "/api").rstrip("/")
    CORS(
        app,
        resources={rf"{api_prefix}/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        allow_headers=allow_headers,
        expose_headers=list(EXPOSED_HEADERS),
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
