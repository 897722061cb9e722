# authcore/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass

from authcore.core import errors as api_errors
from authcore.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConfirmationError,
    ConflictError,
    InfrastructureError,
    NotFoundError,
    ServiceError,
)
from authcore.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry request-scoped data (authenticated actor, correlation id).

    :param actor_id: Authenticated user identifier bound by the request gate.
    :param request_id: Correlation id for logging/tracing.
    :param token_jti: jti of the access token that authenticated the request.
    """

    actor_id: int | None = None
    request_id: str | None = None
    token_jti: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.actor_id is not None


class BaseService:
    """
    Base class for the authentication, registration and identity services.

    Subclasses open a Unit of Work per use case (``rw_uow`` for writes such
    as registration and confirmation, ``ro_uow`` for credential and profile
    lookups) and raise errors from :mod:`authcore.services._shared.errors`.
    :meth:`translate_exceptions` is the single place where those errors
    acquire an HTTP status.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map service-level errors to API-level (HTTP) errors.

        The originating class name travels in ``error_type`` so the log can
        tell e.g. a replayed refresh token from an expired one, while the
        response keeps a single 401 shape.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        error_type = type(exc).__name__

        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc), error_type=error_type)

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc), error_type=error_type)

        if isinstance(exc, AuthenticationError):
            return api_errors.Unauthorized(str(exc), error_type=error_type)

        if isinstance(exc, AuthorizationError):
            return api_errors.Forbidden(str(exc), error_type=error_type)

        if isinstance(exc, ConfirmationError):
            return api_errors.BadRequest(str(exc), error_type=error_type)

        if isinstance(exc, InfrastructureError):
            return api_errors.ServiceUnavailable(error_type=error_type)

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.BadRequest(str(exc), error_type=error_type)

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
