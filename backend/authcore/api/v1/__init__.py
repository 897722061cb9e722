"""Version 1 of the HTTP API.

``REGISTRY`` holds the ``(blueprint, prefix)`` pairs mounted beneath
``/api/v1``: the health probe at the root, the public ``/auth`` routes
(exempt from the request gate) and the gated ``/users`` routes.
"""

from __future__ import annotations

from flask import Blueprint

from .auth import bp as auth_bp
from .health import bp as health_bp
from .users import bp as users_bp

API_VERSION = "v1"

REGISTRY: tuple[tuple[Blueprint, str], ...] = (
    (health_bp, ""),
    (auth_bp, "auth"),
    (users_bp, "users"),
)
