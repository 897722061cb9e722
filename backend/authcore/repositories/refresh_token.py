"""Refresh token repository with conditional (compare-and-set) updates."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select, update

from authcore.models.refresh_token import RefreshToken
from authcore.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`.

    The ``*_if_active`` helpers are single conditional ``UPDATE`` statements
    guarded by ``revoked = false``; their return value tells the caller
    whether this statement won the race.
    """

    model = RefreshToken

    def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        # Conditional updates bypass the identity map; always reload.
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        return self._first(stmt)

    def mark_rotated_if_active(
        self, token_id: int, *, replaced_by: str, now: datetime
    ) -> bool:
        """
        Revoke an active token on behalf of its successor.

        :returns: ``True`` when exactly this call flipped ``revoked``.
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.revoked.is_(False))
            .values(revoked=True, revoked_at=now, replaced_by=replaced_by, last_used_at=now)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def revoke_if_active(self, token_id: int, *, now: datetime) -> bool:
        """Revoke an active token without a successor (logout)."""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.revoked.is_(False))
            .values(revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def delete_expired(self, now: datetime) -> int:
        """Hard-delete every token with ``expires_at < now``."""
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
