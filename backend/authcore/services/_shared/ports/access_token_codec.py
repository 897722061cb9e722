from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class AccessTokenClaims:
    """
    Verified claims of an access token.

    :ivar subject: User id as carried in ``sub``.
    :ivar jti: Token identifier, ``None`` for tokens minted without one.
    :ivar issued_at: ``iat`` as an aware UTC datetime.
    :ivar expires_at: ``exp`` as an aware UTC datetime.
    """

    subject: str
    jti: str | None
    issued_at: datetime
    expires_at: datetime


class AccessTokenCodec(Protocol):
    """Port for minting and verifying signed access tokens."""

    def issue(self, *, subject: str, jti: str, ttl_seconds: int) -> str: ...

    def verify(self, token: str) -> AccessTokenClaims:
        """
        Verify signature, structure and expiry.

        :raises TamperedTokenError: Signature mismatch.
        :raises MalformedTokenError: Unparseable token or missing claims.
        :raises ExpiredTokenError: ``now >= exp``.
        """
        ...
