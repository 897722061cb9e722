"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    TokenResponseSchema,
)
from .user import UserProfileSchema
from .validators import AllowedEmailDomain, StrongPassword

__all__ = [
    "LoginSchema",
    "LogoutSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenResponseSchema",
    "UserProfileSchema",
    "AllowedEmailDomain",
    "StrongPassword",
]
