"""Tiny helpers shared across test modules."""

from __future__ import annotations


def bearer(token: str) -> dict[str, str]:
    """Return an ``Authorization`` header carrying ``token``."""
    return {"Authorization": f"Bearer {token}"}
