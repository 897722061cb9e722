# authcore/services/auth/service.py
from __future__ import annotations

import logging
from uuid import uuid4

from authcore.models.user import User
from authcore.repositories.user import UserRepository
from authcore.services._shared.base import BaseService, ServiceContext
from authcore.services._shared.errors import (
    AccountNotEnabledError,
    InvalidCredentialsError,
    TokenOwnershipMismatchError,
    UnknownTokenError,
)
from authcore.services._shared.ports import (
    AccessTokenCodec,
    RefreshTokenStore,
    RevocationStore,
)
from authcore.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LoginOut,
    LogoutIn,
    TokenPairOut,
)
from authcore.services.identity.dto import UserProfileOut
from authcore.services.registration.dto import RegisterIn
from authcore.services.registration.service import UserRegistrationService

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Session lifecycle service (register / login / refresh / logout).

    Access tokens come from the :class:`AccessTokenCodec`, refresh tokens
    from the :class:`RefreshTokenStore` (single-use rotation with replay
    detection), and logout writes access-token jtis to the
    :class:`RevocationStore` consulted by the request gate.

    A refresh token moves from *active* to exactly one of *rotated*,
    *logged out* or *expired*; none of those transitions can be undone.
    """

    def __init__(
        self,
        *,
        codec: AccessTokenCodec,
        refresh_store: RefreshTokenStore,
        revocation_store: RevocationStore,
        registration: UserRegistrationService | None = None,
        token_cfg: AuthTokenConfig | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param codec: Mints and verifies access tokens.
        :param refresh_store: Stateful store for refresh tokens.
        :param revocation_store: Revocation list for access-token jtis.
        :param registration: Account creation collaborator.
        :param token_cfg: Access/refresh lifetimes.
        """
        super().__init__(ctx=ctx)
        self.codec = codec
        self.refresh_store = refresh_store
        self.revocations = revocation_store
        self.registration = registration
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserProfileOut:
        """Create a disabled account; see :meth:`UserRegistrationService.register`."""
        if self.registration is None:
            raise RuntimeError("AuthService was built without a registration service.")
        return self.registration.register(dto)

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown user and wrong password raise the same error. The enabled
        check runs only after the password matched.

        :param dto: Login input.
        :returns: Profile plus access/refresh tokens.
        :raises InvalidCredentialsError: Unknown user or wrong password.
        :raises AccountNotEnabledError: Correct password, account not confirmed.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_by_username_or_email(dto.username_or_email or "")
            if not User.credentials_match(user, dto.password):
                log.warning("login rejected: invalid credentials")
                raise InvalidCredentialsError()
            if not user.enabled:
                log.warning("login rejected: account not enabled", extra={"user_id": user.id})
                raise AccountNotEnabledError()
            profile = UserProfileOut.from_model(user)

        refresh_secret, _ = self.refresh_store.issue(profile.id, self.cfg.refresh_ttl)
        access_token = self._mint_access(profile.id)
        log.info("login succeeded", extra={"user_id": profile.id})
        return LoginOut(
            profile=profile,
            access_token=access_token,
            access_ttl=self.cfg.access_ttl,
            refresh_token=refresh_secret,
        )

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, refresh_secret: str) -> TokenPairOut:
        """
        Rotate a refresh token and mint a new access token.

        :param refresh_secret: Raw refresh secret presented by the client.
        :returns: New access token and the successor refresh secret.
        :raises UnknownTokenError: No such refresh token.
        :raises RevokedTokenError: Already rotated or logged out (replay).
        :raises ExpiredTokenError: Past its expiry.
        :raises AccountNotEnabledError: The owner was disabled.
        """
        record = self.refresh_store.validate_and_consume(refresh_secret)

        with self.ro_uow() as uow:
            owner = uow.users.get(record.user_id)
            if owner is None:
                raise UnknownTokenError()
            if not owner.enabled:
                raise AccountNotEnabledError("Account has been disabled")

        new_secret, new_record = self.refresh_store.rotate(record, self.cfg.refresh_ttl)
        log.info("refresh token rotated", extra={"user_id": new_record.user_id})
        return TokenPairOut(
            access_token=self._mint_access(new_record.user_id),
            access_ttl=self.cfg.access_ttl,
            refresh_token=new_secret,
        )

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke the presented refresh token and/or access-token jti.

        Idempotent, and tolerant of either input being absent or unknown.
        The revocation entry lives for the full configured access lifetime,
        whatever the token's remaining life.

        :param dto: Logout input.
        :raises TokenOwnershipMismatchError: The refresh token belongs to
            another user; nothing is revoked.
        """
        if dto.refresh_token:
            record = self.refresh_store.find(dto.refresh_token)
            if record is not None:
                with self.ro_uow() as uow:
                    owner = uow.users.get(record.user_id)
                    owner_name = owner.username if owner is not None else None
                if owner_name != dto.username:
                    log.warning(
                        "logout rejected: refresh token owner mismatch",
                        extra={"user_id": record.user_id},
                    )
                    raise TokenOwnershipMismatchError()
                self.refresh_store.revoke(record)

        if dto.access_jti:
            self.revocations.add(dto.access_jti, self.cfg.access_ttl)
            log.info("access token revoked", extra={"jti": dto.access_jti})

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _mint_access(self, user_id: int) -> str:
        return self.codec.issue(
            subject=str(user_id), jti=str(uuid4()), ttl_seconds=self.cfg.access_ttl
        )
