"""Opaque refresh secrets and their keyed hashes.

Refresh secrets are handed to clients exactly once; the database only ever
sees ``hash_secret(secret, key)``.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets

SECRET_BYTES = 32


def generate_secret() -> str:
    """
    Generate a high-entropy, URL-safe secret.

    :returns: 32 random bytes encoded as unpadded URL-safe base64 (43 chars).
    :rtype: str
    """
    raw = secrets.token_bytes(SECRET_BYTES)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def hash_secret(secret: str, key: str) -> str:
    """
    Return the HMAC-SHA256 hex digest of ``secret`` under ``key``.

    Deterministic for a given key. An empty secret yields the digest of the
    empty message rather than an error, so lookups of blank input simply
    miss.

    :param secret: Raw secret presented by the client.
    :param key: Server-side HMAC key (``TOKEN_SECRET``).
    :returns: 64 lowercase hex characters.
    :rtype: str
    """
    mac = hmac.new(key.encode("utf-8"), (secret or "").encode("utf-8"), hashlib.sha256)
    return mac.hexdigest()


__all__ = ["generate_secret", "hash_secret", "SECRET_BYTES"]
