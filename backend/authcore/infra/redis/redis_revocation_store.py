import logging
from typing import cast

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

log = logging.getLogger(__name__)

REVOKED_MARKER = "revoked"


class RedisRevocationStore:
    """
    Revocation list for **access tokens** by jti.

    Entries are plain keys ``<prefix><jti>`` holding a marker value with a
    TTL, so Redis expires them on its own. Backing-store errors are logged and
    swallowed: ``contains`` then answers ``not fail_open``.
    """

    def __init__(
        self,
        r: redis.Redis,
        *,
        prefix: str = "auth:blacklist:",
        fail_open: bool = True,
    ):
        self.r = r
        self.prefix = prefix
        self.fail_open = fail_open

    def _k(self, jti: str) -> str:
        return f"{self.prefix}{jti}"

    def add(self, jti: str, ttl_seconds: int) -> None:
        if not jti:
            return
        try:
            self.r.set(self._k(jti), REVOKED_MARKER, ex=max(1, int(ttl_seconds)))
        except RedisError:
            log.error("revocation add failed", exc_info=True, extra={"jti": jti})

    def contains(self, jti: str) -> bool:
        if not jti:
            return False
        try:
            return cast(int, self.r.exists(self._k(jti))) == 1
        except RedisError:
            log.error(
                "revocation lookup failed; fail_open=%s",
                self.fail_open,
                exc_info=True,
                extra={"jti": jti},
            )
            return not self.fail_open

    def remove(self, jti: str) -> None:
        if not jti:
            return
        try:
            self.r.delete(self._k(jti))
        except RedisError:
            log.error("revocation remove failed", exc_info=True, extra={"jti": jti})

    def ping(self) -> bool:
        try:
            return bool(self.r.ping())
        except RedisError:
            log.warning("revocation store ping failed", exc_info=True)
            return False
