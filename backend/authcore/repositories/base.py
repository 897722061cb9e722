"""Generic repository base for SQLAlchemy 2.x.

Repositories are persistence-only: they resolve a session (the one injected
by the Unit of Work, else the Flask-scoped one), build statements and return
mapped rows. They never commit or roll back; services own transactions.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select
from sqlalchemy.orm import Session

from authcore.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Persistence-only repository for a single mapped class.

    Subclasses MUST define ``model``.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session, else the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    def _first(self, stmt: Select[Any]) -> E | None:
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def add(self, instance: E) -> E:
        """Stage a new entity and flush so its primary key is assigned.

        Unique-constraint violations surface here as ``IntegrityError``.
        """
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key."""
        return cast(E | None, self.session.get(self.model, entity_id))

    def flush(self) -> None:
        self.session.flush()
