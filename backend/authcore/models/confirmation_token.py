"""E-mail confirmation tokens issued at registration."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from authcore.core.extensions import db

from .base import PKMixin, ReprMixin, as_utc

if TYPE_CHECKING:
    from .user import User


class ConfirmationToken(PKMixin, ReprMixin, db.Model):
    """Single confirmation link; ``confirmed_at`` is set once."""

    __tablename__ = "confirmation_tokens"
    __repr_attrs__ = ("id", "user_id", "confirmed_at")

    token: Mapped[str] = mapped_column(String(36), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship(back_populates="confirmation_tokens")

    __table_args__ = (UniqueConstraint("token", name="uq_confirmation_tokens_token"),)

    def is_expired(self, now: datetime) -> bool:
        expires_at = as_utc(self.expires_at)
        return expires_at is not None and now >= expires_at

    @property
    def is_confirmed(self) -> bool:
        return self.confirmed_at is not None
