# authcore/infra/jwt/jwt_access_token_codec.py
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt.utils import base64url_decode, base64url_encode

from authcore.services._shared.errors import (
    ExpiredTokenError,
    MalformedTokenError,
    TamperedTokenError,
)
from authcore.services._shared.ports import AccessTokenClaims, AccessTokenCodec

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "exp", "iat"]


@dataclass(slots=True)
class JWTAccessTokenCodec(AccessTokenCodec):
    """
    HS256 access tokens built on PyJWT.

    The signing key is bound at construction so the codec can be shared by
    the session issuer and the request gate.

    .. note::
       Only HS256 is accepted on verification; tokens declaring any other
       algorithm are rejected as malformed. Unsigned (``none``) tokens carry
       an empty signature segment and are rejected as tampered.
    """

    key: str
    algorithm: str = ALGORITHM

    def issue(self, *, subject: str, jti: str, ttl_seconds: int) -> str:
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(subject),
            "jti": jti,
            "iat": now,
            "exp": now + timedelta(seconds=ttl_seconds),
        }
        return jwt.encode(payload, self.key, algorithm=self.algorithm)

    def verify(self, token: str) -> AccessTokenClaims:
        self._check_structure(token)
        try:
            payload = jwt.decode(
                token,
                self.key,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError() from exc
        # InvalidSignatureError subclasses DecodeError; keep it first.
        except jwt.InvalidSignatureError as exc:
            raise TamperedTokenError() from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError() from exc

        jti = payload.get("jti")
        return AccessTokenClaims(
            subject=str(payload["sub"]),
            jti=str(jti) if jti else None,
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=UTC),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
        )

    @staticmethod
    def _check_structure(token: str) -> None:
        """
        Reject tokens whose shape or signature segment cannot be trusted.

        Header and payload must decode to JSON objects before the signature
        is looked at; anything else is malformed. A signature segment that
        does not re-encode to itself differs from the canonical encoding only
        in its padding bits; PyJWT would accept it, so it is treated as
        tampered here.
        """
        if not isinstance(token, str):
            raise MalformedTokenError()
        parts = token.split(".")
        if len(parts) != 3 or not parts[0] or not parts[1]:
            raise MalformedTokenError()
        for segment in parts[:2]:
            try:
                decoded = json.loads(base64url_decode(segment.encode("ascii")))
            except (ValueError, UnicodeEncodeError) as exc:
                raise MalformedTokenError() from exc
            if not isinstance(decoded, dict):
                raise MalformedTokenError()

        signature = parts[2]
        try:
            raw = base64url_decode(signature.encode("ascii"))
        except (ValueError, UnicodeEncodeError) as exc:
            raise TamperedTokenError() from exc
        if not raw or base64url_encode(raw).decode("ascii") != signature:
            raise TamperedTokenError()
