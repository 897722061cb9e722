from __future__ import annotations

import threading
import time
from typing import Protocol


class RevocationStore(Protocol):
    """
    Abstraction for the revocation list of **access tokens**, keyed by jti.

    All methods are idempotent and never raise on backing-store failures.
    """

    def add(self, jti: str, ttl_seconds: int) -> None: ...
    def contains(self, jti: str) -> bool: ...
    def remove(self, jti: str) -> None: ...
    def ping(self) -> bool: ...


class InMemoryRevocationStore(RevocationStore):
    """
    Process-local revocation list with per-entry expiry.

    Suitable for tests and single-worker deployments without Redis.
    Entries expire lazily on lookup.
    """

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, float] = {}
        self._lock = threading.Lock()

    def add(self, jti: str, ttl_seconds: int) -> None:
        if not jti:
            return
        with self._lock:
            self._entries[jti] = self._clock() + max(1, int(ttl_seconds))

    def contains(self, jti: str) -> bool:
        if not jti:
            return False
        with self._lock:
            deadline = self._entries.get(jti)
            if deadline is None:
                return False
            if self._clock() >= deadline:
                del self._entries[jti]
                return False
            return True

    def remove(self, jti: str) -> None:
        with self._lock:
            self._entries.pop(jti, None)

    def ping(self) -> bool:
        return True
