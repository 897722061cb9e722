"""
Per-request bearer-token check, independent of the web framework.

The Flask glue in :mod:`authcore.api.gate` feeds it the path and headers and
stores the resulting :class:`ServiceContext` on the request.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from authcore.services._shared.base import ServiceContext
from authcore.services._shared.errors import (
    MalformedTokenError,
    RevokedTokenError,
    TokenError,
)
from authcore.services._shared.ports import AccessTokenCodec, RevocationStore

log = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
JTI_HINT_HEADER = "X-Token-Jti"


@dataclass(slots=True)
class RequestGate:
    """
    Verify bearer tokens and bind the caller's identity.

    :param codec: Access-token verifier.
    :param revocations: Revocation list consulted for every bearer token.
    :param exempt_prefixes: Paths starting with any of these are not gated.
    :param accept_jti_hint: Consult the deprecated ``X-Token-Jti`` header for
        tokens minted without a ``jti`` claim.
    """

    codec: AccessTokenCodec
    revocations: RevocationStore
    exempt_prefixes: Sequence[str] = ("/api/v1/auth/",)
    accept_jti_hint: bool = True

    def is_exempt(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.exempt_prefixes)

    @staticmethod
    def extract_bearer(headers: Mapping[str, str]) -> str | None:
        value = headers.get("Authorization") or ""
        if not value.startswith(BEARER_PREFIX):
            return None
        return value[len(BEARER_PREFIX):].strip() or None

    def authenticate(
        self,
        path: str,
        headers: Mapping[str, str],
        ctx: ServiceContext,
    ) -> ServiceContext:
        """
        Check the request's bearer token and bind ``ctx.actor_id``.

        Requests without a bearer credential, or on exempt paths, pass
        through untouched. An identity already present on ``ctx`` is never
        overwritten.

        :raises TokenError: Tampered, malformed, expired or revoked token.
        """
        if self.is_exempt(path):
            return ctx
        token = self.extract_bearer(headers)
        if token is None:
            return ctx

        try:
            claims = self.codec.verify(token)
        except TokenError as exc:
            log.warning(
                "bearer token rejected: %s",
                type(exc).__name__,
                extra={"error_type": type(exc).__name__, "path": path},
            )
            raise

        jti = claims.jti
        if jti is None and self.accept_jti_hint:
            jti = headers.get(JTI_HINT_HEADER) or None
            if jti is not None:
                log.warning("deprecated %s header consulted", JTI_HINT_HEADER)

        if jti is not None and self.revocations.contains(jti):
            log.warning("bearer token rejected: revoked", extra={"jti": jti, "path": path})
            raise RevokedTokenError()

        try:
            actor_id = int(claims.subject)
        except ValueError as exc:
            raise MalformedTokenError() from exc

        if ctx.actor_id is None:
            ctx.actor_id = actor_id
            ctx.token_jti = jti
        return ctx
