"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .validators import AllowedEmailDomain, StrongPassword


class RegisterSchema(Schema):
    """Input payload for account registration."""

    username = fields.String(required=True, validate=validate.Length(min=3, max=50))
    email = fields.Email(
        required=True, validate=[validate.Length(max=254), AllowedEmailDomain()]
    )
    password = fields.String(
        required=True, validate=[validate.Length(max=128), StrongPassword()]
    )
    display_name = fields.String(load_default=None, validate=validate.Length(max=100))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    username_or_email = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    """Input payload for rotating a refresh token."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1, max=512))


class LogoutSchema(Schema):
    """Logout payload; query-string values take precedence."""

    username = fields.String(load_default=None)
    refresh_token = fields.String(load_default=None)
    jti = fields.String(load_default=None)


class TokenResponseSchema(Schema):
    """Response payload containing a token pair."""

    access_token = fields.String(required=True)
    token_type = fields.String(dump_default="Bearer")
    expires_in = fields.Integer(required=True)
    refresh_token = fields.String(required=True)
