"""Persisted refresh tokens (hash only, never the raw secret)."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from authcore.core.extensions import db

from .base import PKMixin, ReprMixin, as_utc

if TYPE_CHECKING:
    from .user import User


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    One issued refresh token.

    Fields
    ------
    token_hash : str
        HMAC-SHA256 hex digest of the raw secret.
    jti : str
        Unique identifier; the predecessor stores it in ``replaced_by``.
    revoked : bool
        Monotonic. ``revoked_at`` is set iff ``revoked``.
    replaced_by : str | None
        Successor jti, set only when revoked by rotation.
    """

    __tablename__ = "refresh_tokens"
    __repr_attrs__ = ("id", "jti", "user_id", "revoked")

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    jti: Mapped[str] = mapped_column(String(36), nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    replaced_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship(back_populates="refresh_tokens")

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_refresh_tokens_token_hash"),
        UniqueConstraint("jti", name="uq_refresh_tokens_jti"),
        Index("ix_refresh_tokens_user_id", "user_id"),
        Index("ix_refresh_tokens_expires_at", "expires_at"),
    )

    def to_record(self):
        """Return the immutable :class:`RefreshTokenRecord` view of this row."""
        from authcore.services._shared.ports import RefreshTokenRecord

        return RefreshTokenRecord(
            id=self.id,
            user_id=self.user_id,
            token_hash=self.token_hash,
            jti=self.jti,
            issued_at=as_utc(self.issued_at),
            expires_at=as_utc(self.expires_at),
            revoked=bool(self.revoked),
            revoked_at=as_utc(self.revoked_at),
            replaced_by=self.replaced_by,
            last_used_at=as_utc(self.last_used_at),
        )
