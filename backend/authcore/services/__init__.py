"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`authcore.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``authcore.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Session issuer (from ``authcore.services.auth``)
    * :class:`AuthService`, :class:`RequestGate`
    * DTOs: :class:`LoginIn`, :class:`LogoutIn`, :class:`LoginOut`, :class:`TokenPairOut`

- Registration (from ``authcore.services.registration``)
    * :class:`UserRegistrationService`
    * DTOs: :class:`RegisterIn`, :class:`ConfirmationStatus`

- Identity (from ``authcore.services.identity``)
    * :class:`IdentityService`
    * DTOs: :class:`UserProfileOut`
"""

from __future__ import annotations

from ._shared.base import BaseService, ServiceContext
from .auth.dto import AuthTokenConfig, LoginIn, LoginOut, LogoutIn, TokenPairOut
from .auth.gate import RequestGate
from .auth.service import AuthService
from .identity.dto import UserProfileOut
from .identity.service import IdentityService
from .registration.dto import ConfirmationStatus, RegisterIn
from .registration.service import UserRegistrationService

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Session issuer
    "AuthService",
    "AuthTokenConfig",
    "RequestGate",
    "LoginIn",
    "LoginOut",
    "LogoutIn",
    "TokenPairOut",
    # Registration
    "UserRegistrationService",
    "RegisterIn",
    "ConfirmationStatus",
    # Identity
    "IdentityService",
    "UserProfileOut",
]
