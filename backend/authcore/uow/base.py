"""
Abstract Unit of Work contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from authcore.repositories import (
        ConfirmationTokenRepository,
        RefreshTokenRepository,
        UserRepository,
    )


class ReadOnlyViolation(RuntimeError):
    """A write was attempted inside a read-only Unit of Work."""


class UnitOfWork(ABC):
    """
    Transactional boundary for one authentication use case.

    The three repositories share a session, so a refresh-token rotation (mark
    the old row used, insert its successor) is committed or discarded as a
    whole. Leaving the ``with`` block cleanly commits; an exception rolls
    back and propagates.
    """

    users: UserRepository
    refresh_tokens: RefreshTokenRepository
    confirmation_tokens: ConfirmationTokenRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
