"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between stores,
repositories, domain models, and application services.

The translation to HTTP responses (RFC 7807) is handled by
``authcore/core/errors.py`` via ``BaseService.translate_exceptions()``.

Hierarchy
---------
- :class:`ServiceError`
    - :class:`NotFoundError`
    - :class:`ConflictError` → :class:`DuplicateUsernameError`, :class:`DuplicateEmailError`
    - :class:`AuthenticationError` (401 class)
        - :class:`InvalidCredentialsError`
        - :class:`TokenError` → unknown / revoked / expired / tampered /
          malformed / ownership mismatch
    - :class:`AuthorizationError` (403 class) → :class:`AccountNotEnabledError`
    - :class:`ConfirmationError` → invalid / expired confirmation token
    - :class:`InfrastructureError` (retryable, 5xx class) → :class:`StoreUnavailableError`
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str, column: str | None = None) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Supports PostgreSQL (constraint name lookup) and a qualified column
    fallback for SQLite, whose messages read
    ``UNIQUE constraint failed: users.email``.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').
    column : str | None
        Qualified column (e.g., 'users.email') matched when the dialect omits
        constraint names.

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    return column is not None and column.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from stores, repositories or domain logic.
    - The API layer will later translate them to APIError.
    """

    pass


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class DuplicateUsernameError(ConflictError):
    """Registration conflict: the username is already taken."""

    def __init__(self) -> None:
        super().__init__("User", "username is already taken")


class DuplicateEmailError(ConflictError):
    """Registration conflict: the e-mail is already registered."""

    def __init__(self) -> None:
        super().__init__("User", "email is already registered")


# --------------------------------------------------------------------------- #
# Authentication (401 class)
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """The caller could not be authenticated."""

    default_message = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidCredentialsError(AuthenticationError):
    """
    Unknown user or wrong password.

    Both cases raise this exact error with the same message so that the
    response never reveals whether an account exists.
    """

    default_message = "Invalid username or password"


class TokenError(AuthenticationError):
    """Base class for access/refresh token failures."""

    default_message = "Invalid token"


class UnknownTokenError(TokenError):
    """No refresh record matches the presented secret."""

    default_message = "Invalid refresh token"


class RevokedTokenError(TokenError):
    """The token was revoked (rotation replay, logout, or revocation list hit)."""

    default_message = "Token has been revoked"


class ExpiredTokenError(TokenError):
    """The token is past its expiry instant."""

    default_message = "Token has expired"


class TamperedTokenError(TokenError):
    """The access-token signature does not match."""

    default_message = "Invalid access token"


class MalformedTokenError(TokenError):
    """The access token cannot be parsed."""

    default_message = "Invalid access token"


class TokenOwnershipMismatchError(TokenError):
    """A refresh token presented at logout belongs to another user."""

    default_message = "Token does not belong to the user"


# --------------------------------------------------------------------------- #
# Authorization (403 class)
# --------------------------------------------------------------------------- #


class AuthorizationError(ServiceError):
    """The caller is authenticated but not allowed to proceed."""

    default_message = "Forbidden"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class AccountNotEnabledError(AuthorizationError):
    """The account exists but has not been confirmed (or was disabled)."""

    default_message = "Account is not enabled yet. Please check your email."


# --------------------------------------------------------------------------- #
# Confirmation (400 class)
# --------------------------------------------------------------------------- #


class ConfirmationError(ServiceError):
    """Base class for e-mail confirmation failures."""


class InvalidConfirmationTokenError(ConfirmationError):
    """No confirmation token matches the presented value."""

    def __init__(self) -> None:
        super().__init__("invalid token")


class ExpiredConfirmationTokenError(ConfirmationError):
    """The confirmation token's window has passed."""

    def __init__(self) -> None:
        super().__init__("token expired")


# --------------------------------------------------------------------------- #
# Infrastructure (retryable)
# --------------------------------------------------------------------------- #


class InfrastructureError(ServiceError):
    """
    A backing store failed. Callers may retry.

    Never converted into a business-rule error.
    """


class StoreUnavailableError(InfrastructureError):
    """
    The refresh-token database could not be reached or timed out.

    :param store: Logical store name used in logs.
    """

    def __init__(self, store: str = "refresh_tokens") -> None:
        super().__init__(f"Store temporarily unavailable: {store}")
        self.store = store
