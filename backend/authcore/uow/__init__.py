"""Unit of Work abstractions and the SQLAlchemy-backed implementations.

Services depend on :class:`UnitOfWork`; the concrete classes expose the
``users``, ``refresh_tokens`` and ``confirmation_tokens`` repositories bound
to one session.
"""

from .base import ReadOnlyViolation, UnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "ReadOnlyViolation",
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
]
