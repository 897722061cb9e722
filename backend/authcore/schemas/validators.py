"""Marshmallow validators for registration input."""

from __future__ import annotations

from flask import current_app, has_app_context
from marshmallow import ValidationError
from marshmallow.validate import Validator

MIN_PASSWORD_LENGTH = 8
MIN_PASSWORD_CATEGORIES = 3


class StrongPassword(Validator):
    """
    Require at least ``min_length`` characters drawn from at least
    ``min_categories`` of: uppercase, lowercase, digits, symbols.
    """

    error = (
        "Password must be at least {min_length} characters long and contain "
        "at least {min_categories} of: uppercase letters, lowercase letters, "
        "digits, symbols."
    )

    def __init__(
        self,
        *,
        min_length: int = MIN_PASSWORD_LENGTH,
        min_categories: int = MIN_PASSWORD_CATEGORIES,
        error: str | None = None,
    ) -> None:
        self.min_length = min_length
        self.min_categories = min_categories
        self.error = error or self.error

    def _repr_args(self) -> str:
        return f"min_length={self.min_length!r}, min_categories={self.min_categories!r}"

    @staticmethod
    def categories(value: str) -> int:
        checks = (
            any(c.isupper() for c in value),
            any(c.islower() for c in value),
            any(c.isdigit() for c in value),
            any(not c.isalnum() and not c.isspace() for c in value),
        )
        return sum(checks)

    def __call__(self, value: str) -> str:
        if (
            not isinstance(value, str)
            or len(value) < self.min_length
            or self.categories(value) < self.min_categories
        ):
            raise ValidationError(
                self.error.format(min_length=self.min_length, min_categories=self.min_categories)
            )
        return value


class AllowedEmailDomain(Validator):
    """
    Restrict e-mail addresses to one domain.

    Without an explicit ``domain`` the ``ALLOWED_EMAIL_DOMAIN`` setting of the
    current application is used; an unset setting accepts every domain.
    """

    error = "Email must belong to the {domain} domain."

    def __init__(self, domain: str | None = None, *, error: str | None = None) -> None:
        self.domain = domain
        self.error = error or self.error

    def _repr_args(self) -> str:
        return f"domain={self.domain!r}"

    def _resolve_domain(self) -> str | None:
        if self.domain is not None:
            return self.domain
        if has_app_context():
            return current_app.config.get("ALLOWED_EMAIL_DOMAIN")
        return None

    def __call__(self, value: str) -> str:
        domain = self._resolve_domain()
        if not domain:
            return value
        domain = domain.lstrip("@").lower()
        if not isinstance(value, str) or not value.strip().lower().endswith(f"@{domain}"):
            raise ValidationError(self.error.format(domain=domain))
        return value
