"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields


class UserProfileSchema(Schema):
    """Public representation of an account."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    display_name = fields.String(allow_none=True)
    enabled = fields.Boolean(required=True)
    created_at = fields.DateTime(allow_none=True)
