# authcore/infra/sql/sqlalchemy_refresh_token_store.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from authcore.infra.crypto.secret_hasher import generate_secret, hash_secret
from authcore.models.refresh_token import RefreshToken
from authcore.services._shared.errors import RevokedTokenError, StoreUnavailableError
from authcore.services._shared.ports import (
    RefreshTokenRecord,
    RefreshTokenStore,
    check_presentable,
)
from authcore.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


@contextmanager
def _store_guard() -> Iterator[None]:
    """Surface connectivity failures and pool timeouts as retryable errors."""
    try:
        yield
    except (OperationalError, PoolTimeoutError) as exc:
        log.error("refresh token store unavailable", exc_info=True)
        raise StoreUnavailableError() from exc


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Refresh token store over the ``refresh_tokens`` table.

    Rotation is one read-write Unit of Work: a conditional
    ``UPDATE ... WHERE revoked = false`` followed by the successor insert.
    A zero row count means another request rotated (or revoked) the record
    first; the block raises and the Unit of Work rolls back.

    :param key: HMAC key for the secret hashes.
    :param uow_factory: Factory for read-write Units of Work.
    :param ro_uow_factory: Factory for read-only Units of Work.
    :param clock: Returns the current aware UTC datetime.
    """

    def __init__(
        self,
        *,
        key: str,
        uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._key = key
        self._uow_factory = uow_factory
        self._ro_uow_factory = ro_uow_factory
        self._clock = clock or (lambda: datetime.now(UTC))

    def _build(self, user_id: int, ttl_seconds: int, now: datetime) -> tuple[str, RefreshToken]:
        raw = generate_secret()
        row = RefreshToken(
            user_id=user_id,
            token_hash=hash_secret(raw, self._key),
            jti=str(uuid4()),
            issued_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
            revoked=False,
        )
        return raw, row

    def issue(self, user_id: int, ttl_seconds: int) -> tuple[str, RefreshTokenRecord]:
        with _store_guard(), self._uow_factory() as uow:
            raw, row = self._build(user_id, ttl_seconds, self._clock())
            uow.refresh_tokens.add(row)
            record = row.to_record()
        return raw, record

    def find(self, raw_secret: str) -> RefreshTokenRecord | None:
        token_hash = hash_secret(raw_secret, self._key)
        with _store_guard(), self._ro_uow_factory() as uow:
            row = uow.refresh_tokens.get_by_hash(token_hash)
            return row.to_record() if row is not None else None

    def validate_and_consume(self, raw_secret: str) -> RefreshTokenRecord:
        return check_presentable(self.find(raw_secret), self._clock())

    def rotate(
        self, record: RefreshTokenRecord, new_ttl_seconds: int
    ) -> tuple[str, RefreshTokenRecord]:
        if record.id is None:
            raise RevokedTokenError()
        with _store_guard(), self._uow_factory() as uow:
            now = self._clock()
            raw, successor = self._build(record.user_id, new_ttl_seconds, now)
            won = uow.refresh_tokens.mark_rotated_if_active(
                record.id, replaced_by=successor.jti, now=now
            )
            if not won:
                log.warning(
                    "refresh token replay during rotation",
                    extra={"user_id": record.user_id, "jti": record.jti},
                )
                raise RevokedTokenError()
            uow.refresh_tokens.add(successor)
            new_record = successor.to_record()
        return raw, new_record

    def revoke(self, record: RefreshTokenRecord) -> bool:
        if record.id is None:
            return False
        with _store_guard(), self._uow_factory() as uow:
            return uow.refresh_tokens.revoke_if_active(record.id, now=self._clock())

    def sweep_expired(self, now: datetime) -> int:
        with _store_guard(), self._uow_factory() as uow:
            deleted = uow.refresh_tokens.delete_expired(now)
        log.info("swept %d expired refresh tokens", deleted)
        return deleted
