# authcore/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

from authcore.services.identity.dto import UserProfileOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param username_or_email: Username, or e-mail as a fallback.
    :type username_or_email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    username_or_email: str
    password: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout. Every token field is optional.

    :param username: Caller's username, used for the ownership check.
    :param refresh_token: Raw refresh secret to revoke.
    :param access_jti: jti of the access token to put on the revocation list.
    """

    username: str
    refresh_token: str | None = None
    access_jti: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param access_ttl: Access token lifetime in seconds.
    :type access_ttl: int
    :param refresh_token: Raw refresh secret (shown to the client once).
    :type refresh_token: str
    """

    access_token: str
    access_ttl: int
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LoginOut:
    """Token pair plus the authenticated profile."""

    profile: UserProfileOut
    access_token: str
    access_ttl: int
    refresh_token: str


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_ttl: Access token lifetime (seconds). Also the TTL of
        revocation entries written at logout.
    :param refresh_ttl: Refresh token lifetime (seconds).
    """

    access_ttl: int = 3600
    refresh_ttl: int = 2592000
