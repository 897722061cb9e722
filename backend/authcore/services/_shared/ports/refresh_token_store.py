from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import uuid4

from authcore.infra.crypto.secret_hasher import generate_secret, hash_secret
from authcore.services._shared.errors import (
    ExpiredTokenError,
    RevokedTokenError,
    UnknownTokenError,
)


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Read-model for a stored refresh token.

    :ivar id: Store-assigned identifier.
    :ivar user_id: Owner user id.
    :ivar token_hash: HMAC-SHA256 hex digest of the raw secret.
    :ivar jti: Unique record identifier, referenced by ``replaced_by``.
    :ivar issued_at: Issuance instant (UTC).
    :ivar expires_at: Absolute expiration (UTC).
    :ivar revoked: Monotonic revocation flag.
    :ivar revoked_at: Set iff ``revoked``.
    :ivar replaced_by: Successor jti when revoked by rotation.
    :ivar last_used_at: Last successful presentation.
    """

    id: int | None
    user_id: int
    token_hash: str
    jti: str
    issued_at: datetime
    expires_at: datetime
    revoked: bool = False
    revoked_at: datetime | None = None
    replaced_by: str | None = None
    last_used_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return now >= _aware(self.expires_at)


def _aware(value: datetime) -> datetime:
    # SQLite round-trips drop tzinfo; every stored instant is UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def check_presentable(record: RefreshTokenRecord | None, now: datetime) -> RefreshTokenRecord:
    """
    Apply the validation order shared by every store implementation.

    :raises UnknownTokenError: ``record`` is ``None``.
    :raises RevokedTokenError: The record was revoked (replay signal).
    :raises ExpiredTokenError: ``now >= expires_at``.
    """
    if record is None:
        raise UnknownTokenError()
    if record.revoked:
        raise RevokedTokenError()
    if record.is_expired(now):
        raise ExpiredTokenError()
    return record


class RefreshTokenStore(Protocol):
    """
    Stateful store for refresh tokens.

    Rotation MUST be atomic: at most one successful rotation per record.
    """

    def issue(self, user_id: int, ttl_seconds: int) -> tuple[str, RefreshTokenRecord]:
        """Create a record and return ``(raw_secret, record)``."""
        ...

    def validate_and_consume(self, raw_secret: str) -> RefreshTokenRecord:
        """
        Resolve a raw secret to an active record without mutating state.

        :raises UnknownTokenError: No record matches.
        :raises RevokedTokenError: Record already revoked.
        :raises ExpiredTokenError: Record past expiry.
        """
        ...

    def rotate(
        self, record: RefreshTokenRecord, new_ttl_seconds: int
    ) -> tuple[str, RefreshTokenRecord]:
        """
        Revoke ``record`` and create its successor in one transaction.

        :raises RevokedTokenError: ``record`` was revoked concurrently.
        """
        ...

    def revoke(self, record: RefreshTokenRecord) -> bool: ...
    def find(self, raw_secret: str) -> RefreshTokenRecord | None: ...
    def sweep_expired(self, now: datetime) -> int: ...


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """Thread-safe in-memory refresh token store for tests."""

    def __init__(self, *, key: str, clock=None) -> None:
        self._key = key
        self._clock = clock or (lambda: datetime.now(UTC))
        self._by_hash: dict[str, RefreshTokenRecord] = {}
        self._seq = 0
        self._lock = threading.Lock()

    def _new_record(self, user_id: int, ttl_seconds: int) -> tuple[str, RefreshTokenRecord]:
        now = self._clock()
        raw = generate_secret()
        self._seq += 1
        record = RefreshTokenRecord(
            id=self._seq,
            user_id=user_id,
            token_hash=hash_secret(raw, self._key),
            jti=str(uuid4()),
            issued_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )
        self._by_hash[record.token_hash] = record
        return raw, record

    def issue(self, user_id: int, ttl_seconds: int) -> tuple[str, RefreshTokenRecord]:
        with self._lock:
            return self._new_record(user_id, ttl_seconds)

    def find(self, raw_secret: str) -> RefreshTokenRecord | None:
        with self._lock:
            return self._by_hash.get(hash_secret(raw_secret, self._key))

    def validate_and_consume(self, raw_secret: str) -> RefreshTokenRecord:
        return check_presentable(self.find(raw_secret), self._clock())

    def rotate(
        self, record: RefreshTokenRecord, new_ttl_seconds: int
    ) -> tuple[str, RefreshTokenRecord]:
        with self._lock:
            current = self._by_hash.get(record.token_hash)
            if current is None or current.revoked:
                raise RevokedTokenError()
            raw, successor = self._new_record(current.user_id, new_ttl_seconds)
            now = self._clock()
            self._by_hash[current.token_hash] = replace(
                current,
                revoked=True,
                revoked_at=now,
                replaced_by=successor.jti,
                last_used_at=now,
            )
            return raw, successor

    def revoke(self, record: RefreshTokenRecord) -> bool:
        with self._lock:
            current = self._by_hash.get(record.token_hash)
            if current is None or current.revoked:
                return False
            self._by_hash[current.token_hash] = replace(
                current, revoked=True, revoked_at=self._clock()
            )
            return True

    def sweep_expired(self, now: datetime) -> int:
        with self._lock:
            doomed = [h for h, r in self._by_hash.items() if _aware(r.expires_at) < now]
            for token_hash in doomed:
                del self._by_hash[token_hash]
            return len(doomed)
