"""HTTP surface: the request gate plus the versioned blueprints."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def join_prefix(*segments: str) -> str:
    """Join URL segments into a single ``/``-rooted prefix.

    >>> join_prefix("/api/", "v1", "/auth")
    '/api/v1/auth'
    >>> join_prefix("/api", "v1", "")
    '/api/v1'
    """
    parts = [s.strip("/") for s in segments if s.strip("/")]
    return "/" + "/".join(parts)


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount each ``(blueprint, relative_prefix)`` beneath ``base_prefix``."""

    for bp, rel_prefix in entries:
        app.register_blueprint(bp, url_prefix=join_prefix(base_prefix, rel_prefix))


def init_app(app: Flask) -> None:
    """Install the request gate, then mount ``/<API_BASE_PREFIX>/v1``.

    The gate runs before every request; the ``/auth`` routes are reachable
    without a token because ``AUTH_GATE_EXEMPT_PREFIXES`` covers them.
    """

    from authcore.api.gate import init_app as init_gate
    from authcore.api.v1 import API_VERSION, REGISTRY

    init_gate(app)
    register_blueprint_group(
        app,
        base_prefix=join_prefix(app.config.get("API_BASE_PREFIX", "/api"), API_VERSION),
        entries=REGISTRY,
    )


__all__ = ["init_app", "join_prefix", "register_blueprint_group"]
