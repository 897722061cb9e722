"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from authcore.models.base import as_utc


@dataclass(frozen=True, slots=True)
class UserProfileOut:
    """
    Output DTO representing public-safe user data.

    :param id: User identifier.
    :type id: int
    :param username: Username.
    :type username: str
    :param email: Email address.
    :type email: str
    :param display_name: Optional display name.
    :type display_name: str | None
    :param enabled: Whether the account is confirmed.
    :type enabled: bool
    :param created_at: Account creation instant (UTC).
    :type created_at: datetime | None
    """

    id: int
    username: str
    email: str
    display_name: str | None
    enabled: bool
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, user) -> UserProfileOut:
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            display_name=user.display_name,
            enabled=bool(user.enabled),
            created_at=as_utc(user.created_at),
        )
