"""
IdentityService
===============

Read access to the ``User`` aggregate for authenticated callers.
"""

from __future__ import annotations

from authcore.repositories.user import UserRepository
from authcore.services._shared.base import BaseService
from authcore.services._shared.errors import NotFoundError
from authcore.services.identity.dto import UserProfileOut


class IdentityService(BaseService):
    """Application service for the ``User`` aggregate."""

    def get_profile(self, user_id: int) -> UserProfileOut:
        """
        Retrieve a user's public profile.

        :param user_id: User primary key.
        :type user_id: int
        :returns: Public-safe user DTO.
        :rtype: UserProfileOut
        :raises NotFoundError: If user does not exist.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return UserProfileOut.from_model(user)

    def current_profile(self) -> UserProfileOut:
        """Profile of the actor bound to this service's context."""
        if self.ctx.actor_id is None:
            raise NotFoundError("User", "anonymous")
        return self.get_profile(self.ctx.actor_id)
