"""User model definition for the account service."""

from __future__ import annotations

import secrets
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, Index, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from authcore.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .confirmation_token import ConfirmationToken
    from .refresh_token import RefreshToken


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return generate_password_hash(secrets.token_urlsafe(16))


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account identity consulted by the token core.

    Fields
    ------
    username : str
        Login handle. Unique per system.
    email : str
        Login email. Stored normalized (lowercase, trimmed). Unique.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    display_name : str | None
        Optional human-readable name.
    enabled : bool
        ``False`` until the e-mail address is confirmed. Flips once via
        :meth:`enable`.
    """

    __tablename__ = "users"
    __repr_attrs__ = ("id", "username", "enabled")

    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    confirmation_tokens: Mapped[list[ConfirmationToken]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
        Index("ix_users_email", "email"),
        Index("ix_users_username", "username"),
    )

    # -------------------- Credentials --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - write-only
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """Store a salted hash of ``raw``; the plain text is never kept."""
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """Return ``True`` when ``raw`` matches the stored hash."""
        if not self.password_hash or not isinstance(raw, str):
            return False
        return bool(check_password_hash(self.password_hash, raw))

    @staticmethod
    def credentials_match(user: User | None, raw: str) -> bool:
        """
        Check a login attempt against ``user``, which may not exist.

        An unknown identifier still pays for one hash comparison, so response
        time does not reveal whether a username or e-mail is registered.

        :param user: Account resolved from the login identifier, or ``None``.
        :param raw: Password candidate.
        :returns: ``True`` only for an existing user with a matching password.
        """
        if user is None:
            check_password_hash(_dummy_password_hash(), raw if isinstance(raw, str) else "")
            return False
        return user.verify_password(raw)

    # -------------------- Lifecycle --------------------
    def enable(self) -> bool:
        """
        Enable the account.

        :returns: ``True`` when the flag flipped, ``False`` if already enabled.
        :rtype: bool
        """
        if self.enabled:
            return False
        self.enabled = True
        return True

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        return value.strip()
