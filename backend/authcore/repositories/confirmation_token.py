"""Confirmation token repository."""

from __future__ import annotations

from sqlalchemy import select

from authcore.models.confirmation_token import ConfirmationToken
from authcore.repositories.base import BaseRepository


class ConfirmationTokenRepository(BaseRepository[ConfirmationToken]):
    model = ConfirmationToken

    def get_by_token(self, token: str) -> ConfirmationToken | None:
        stmt = select(ConfirmationToken).where(ConfirmationToken.token == token)
        return self._first(stmt)
