"""Trust ``X-Forwarded-*`` headers set by the reverse proxies in front of the app."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`ProxyFix` for ``PROXY_HOPS`` proxies.

    The client address logged with token rejections comes from here, so the
    hop count must match the deployment; ``0`` leaves the WSGI app untouched.
    """
    hops = int(app.config.get("PROXY_HOPS", 1))
    if hops <= 0:
        return
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)
