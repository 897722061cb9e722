"""User endpoints for the authenticated caller."""

from __future__ import annotations

from flask import Blueprint

from authcore.api.deps import get_identity_service, json_response, require_auth, timing
from authcore.schemas import UserProfileSchema
from authcore.services._shared.base import ServiceContext

bp = Blueprint("users", __name__)

profile_schema = UserProfileSchema()


@bp.get("/me")
@timing
@require_auth
def me(ctx: ServiceContext):
    """Return the profile of the user bound by the request gate."""

    profile = get_identity_service(ctx).current_profile()
    return json_response({"data": profile_schema.dump(profile)})
