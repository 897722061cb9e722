"""
UserRegistrationService
=======================

Process-level service that creates accounts and confirms them:

- Creates a disabled ``User`` plus a ``ConfirmationToken`` in one transaction.
- Sends the confirmation link after commit (best effort).
- Enables the account when the link is opened (idempotent).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from sqlalchemy.exc import IntegrityError

from authcore.core.logger import redact_email
from authcore.repositories.user import UserRepository
from authcore.services._shared.base import BaseService, ServiceContext
from authcore.services._shared.errors import (
    DuplicateEmailError,
    DuplicateUsernameError,
    ExpiredConfirmationTokenError,
    InvalidConfirmationTokenError,
    violates,
)
from authcore.services._shared.ports import ConfirmationNotifier
from authcore.services.identity.dto import UserProfileOut
from authcore.services.registration.dto import ConfirmationStatus, RegisterIn

log = logging.getLogger(__name__)

DEFAULT_CONFIRMATION_TTL = timedelta(hours=24)


class UserRegistrationService(BaseService):
    """
    Orchestrates registration and e-mail confirmation.

    :param notifier: Delivers confirmation links; failures never abort
        registration.
    :param confirmation_ttl: Validity window of confirmation tokens.
    :param clock: Returns the current aware UTC datetime.
    """

    def __init__(
        self,
        *,
        notifier: ConfirmationNotifier,
        confirmation_ttl: timedelta = DEFAULT_CONFIRMATION_TTL,
        clock: Callable[[], datetime] | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.notifier = notifier
        self.confirmation_ttl = confirmation_ttl
        self._clock = clock or (lambda: datetime.now(UTC))

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserProfileOut:
        """
        Create a disabled account and send its confirmation link.

        Username uniqueness is checked before e-mail uniqueness, both before
        any write. A concurrent insert that slips past the checks is mapped
        from the unique constraint to the same errors.

        :param dto: Registration input.
        :type dto: :class:`RegisterIn`
        :returns: Profile of the new (disabled) account.
        :rtype: :class:`UserProfileOut`
        :raises DuplicateUsernameError: Username taken.
        :raises DuplicateEmailError: E-mail already registered.
        """
        norm_email = dto.email.lower().strip()
        token = str(uuid4())

        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                if repo.exists_by_username(dto.username):
                    raise DuplicateUsernameError()
                if repo.exists_by_email(norm_email):
                    raise DuplicateEmailError()

                user = repo.model(
                    username=dto.username,
                    email=norm_email,
                    password=dto.password,  # model setter hashes
                    display_name=dto.display_name,
                    enabled=False,
                )
                repo.add(user)

                now = self._clock()
                uow.confirmation_tokens.add(
                    uow.confirmation_tokens.model(
                        token=token,
                        user_id=user.id,
                        created_at=now,
                        expires_at=now + self.confirmation_ttl,
                    )
                )
                profile = UserProfileOut.from_model(user)
        except IntegrityError as exc:
            if violates(exc, "uq_users_username", "users.username"):
                raise DuplicateUsernameError() from exc
            if violates(exc, "uq_users_email", "users.email"):
                raise DuplicateEmailError() from exc
            raise  # unknown integrity error -> bubble up

        log.info("registered user", extra={"user_id": profile.id})
        self._notify(profile, token)
        return profile

    def _notify(self, profile: UserProfileOut, token: str) -> None:
        try:
            self.notifier.send_confirmation(
                email=profile.email, username=profile.username, token=token
            )
        except Exception:
            # Registration already committed; delivery is best effort.
            log.error(
                "confirmation notification to %s failed",
                redact_email(profile.email),
                exc_info=True,
                extra={"user_id": profile.id},
            )

    # ------------------------------------------------------------------ #
    # Confirmation
    # ------------------------------------------------------------------ #

    def confirm(self, token: str) -> ConfirmationStatus:
        """
        Enable the account owning ``token``.

        :param token: Confirmation token from the link.
        :returns: ``CONFIRMED`` or ``ALREADY_CONFIRMED``.
        :raises InvalidConfirmationTokenError: Unknown token.
        :raises ExpiredConfirmationTokenError: Token past its window.
        """
        with self.rw_uow() as uow:
            record = uow.confirmation_tokens.get_by_token(token or "")
            if record is None:
                raise InvalidConfirmationTokenError()
            if record.is_confirmed:
                return ConfirmationStatus.ALREADY_CONFIRMED

            now = self._clock()
            if record.is_expired(now):
                raise ExpiredConfirmationTokenError()

            record.confirmed_at = now
            record.user.enable()
            user_id = record.user_id

        log.info("confirmed user", extra={"user_id": user_id})
        return ConfirmationStatus.CONFIRMED
