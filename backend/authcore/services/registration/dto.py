# authcore/services/registration/dto.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for account registration.

    :param username: Login handle.
    :param email: Login email (normalized by the model).
    :param password: Raw password; already checked against the policy.
    :param display_name: Optional display name.
    """

    username: str
    email: str
    password: str
    display_name: str | None = None


class ConfirmationStatus(str, Enum):
    CONFIRMED = "confirmed"
    ALREADY_CONFIRMED = "already_confirmed"
