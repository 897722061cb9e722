"""
SQLAlchemy Units of Work bound to the Flask-scoped session.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from authcore.core.extensions import db
from authcore.repositories import (
    ConfirmationTokenRepository,
    RefreshTokenRepository,
    UserRepository,
)
from authcore.uow.base import ReadOnlyViolation, UnitOfWork

log = logging.getLogger(__name__)

# First SQL keyword of any statement the read-only unit refuses to run.
_WRITE_VERBS = frozenset(
    {
        "insert",
        "update",
        "delete",
        "merge",
        "upsert",
        "replace",
        "alter",
        "create",
        "drop",
        "truncate",
        "grant",
        "revoke",
    }
)

# Dialects that understand ``SET TRANSACTION <mode>[, <mode>]``.
_TRANSACTION_MODE_DIALECTS = frozenset({"postgresql", "mysql", "mariadb"})


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)
        self.confirmation_tokens = ConfirmationTokenRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """Read-write unit; the session begins lazily on the first statement."""

    def __init__(self, session: Session | None = None) -> None:
        super().__init__(session=session or db.session())

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only unit used by token validation and profile lookups.

    On entry it installs two guards: one on the session (``before_flush``)
    and one on the connection (``before_cursor_execute``). Either raises
    :class:`ReadOnlyViolation` on a write. When the unit opened the
    transaction itself and the dialect supports it, the transaction is also
    declared read-only (and its isolation level set) on the server. The unit
    always rolls back on exit and ``commit()`` is refused.

    :param isolation_level: Isolation level requested from the server, or
        ``None`` for the connection default.
    :param enforce_db_readonly: Declare the transaction ``READ ONLY`` on the
        server where supported; the guards apply regardless.
    """

    def __init__(
        self,
        *,
        session: Session | None = None,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=session or db.session())
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly

        self._conn: Connection | None = None
        self._owned: SessionTransaction | None = None
        self._guarding = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # An already running transaction (autobegin, outer test fixture) is
        # joined as is: guarded, but without server-side directives.
        try:
            self._owned = self.session.begin()
        except InvalidRequestError:
            self._owned = None

        self._conn = self.session.connection()
        self._guard_writes()
        if self._owned is not None:
            self._declare_transaction_modes(self._conn.dialect.name)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
        finally:
            self._owned = None
            self._release_guards()
            self._conn = None

    def commit(self) -> None:
        """
        :raises ReadOnlyViolation: always.
        """
        raise ReadOnlyViolation("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- server directives ---------------------------

    def _transaction_modes(self) -> list[str]:
        modes = []
        if self.isolation_level:
            modes.append(f"ISOLATION LEVEL {self.isolation_level.upper().strip()}")
        if self.enforce_db_readonly:
            modes.append("READ ONLY")
        return modes

    def _declare_transaction_modes(self, dialect: str) -> None:
        modes = self._transaction_modes()
        if not modes or dialect not in _TRANSACTION_MODE_DIALECTS:
            return
        try:
            self.session.execute(text("SET TRANSACTION " + ", ".join(modes)))
        except SQLAlchemyError as exc:
            log.warning("SET TRANSACTION failed on %s (%s); relying on guards only", dialect, exc)

    # ----------------------------- write guards --------------------------------

    def _on_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise ReadOnlyViolation(
                "Read-only UnitOfWork: ORM flush blocked (pending new/dirty/deleted objects)."
            )

    def _on_execute(self, conn, cursor, statement, parameters, context, executemany) -> None:
        verb = statement.lstrip().split(None, 1)[0].lower() if statement else ""
        if verb in _WRITE_VERBS:
            raise ReadOnlyViolation(f"Read-only UnitOfWork: SQL statement blocked: {verb.upper()}")

    def _guard_writes(self) -> None:
        if self._guarding:
            return
        event.listen(self.session, "before_flush", self._on_flush)
        event.listen(self._conn, "before_cursor_execute", self._on_execute)
        self._guarding = True

    def _release_guards(self) -> None:
        if not self._guarding:
            return
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._on_flush)
        with suppress(InvalidRequestError):
            event.remove(self._conn, "before_cursor_execute", self._on_execute)
        self._guarding = False
