"""
authcore.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that define the contracts
for token management and authentication infrastructure.

Modules
-------
- :mod:`access_token_codec`:
    Defines :class:`~.AccessTokenCodec` and :class:`~.AccessTokenClaims`.

- :mod:`revocation_store`:
    Defines :class:`~.RevocationStore`: revocation list of access-token jtis.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore` and :class:`~.RefreshTokenRecord`
    for hashed, single-use refresh tokens with atomic rotation.

- :mod:`notifier`:
    Defines :class:`~.ConfirmationNotifier` for delivery of confirmation links.

Design Notes
------------
Concrete adapters (Redis, SQL, SMTP) live under ``authcore.infra``; the
in-memory implementations here back unit tests and single-process setups.
"""

from __future__ import annotations

from .access_token_codec import AccessTokenClaims, AccessTokenCodec
from .notifier import ConfirmationNotifier, RecordingNotifier
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
    check_presentable,
)
from .revocation_store import InMemoryRevocationStore, RevocationStore

__all__ = [
    "AccessTokenClaims",
    "AccessTokenCodec",
    "ConfirmationNotifier",
    "RecordingNotifier",
    "RefreshTokenStore",
    "RefreshTokenRecord",
    "InMemoryRefreshTokenStore",
    "check_presentable",
    "RevocationStore",
    "InMemoryRevocationStore",
]
