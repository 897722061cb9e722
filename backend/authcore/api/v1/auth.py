"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, request

from authcore.api.deps import get_auth_service, get_registration_service, json_response, timing
from authcore.core.errors import BadRequest
from authcore.schemas import (
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    TokenResponseSchema,
    UserProfileSchema,
)
from authcore.services.auth.dto import LoginIn, LogoutIn
from authcore.services.registration.dto import RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
token_schema = TokenResponseSchema()
profile_schema = UserProfileSchema()


def _token_body(access_token: str, access_ttl: int, refresh_token: str) -> dict:
    return token_schema.dump(
        {
            "access_token": access_token,
            "token_type": "Bearer",
            "expires_in": access_ttl,
            "refresh_token": refresh_token,
        }
    )


@bp.post("/register")
@timing
def register():
    """Create a disabled account and send its confirmation link."""

    payload = register_schema.load(request.get_json(silent=True) or {})
    profile = get_auth_service().register(RegisterIn(**payload))
    return json_response({"data": profile_schema.dump(profile)}, status=201)


@bp.get("/confirm")
@timing
def confirm():
    """Enable the account owning the ``token`` query parameter."""

    token = request.args.get("token", "")
    status = get_registration_service().confirm(token)
    return json_response({"data": {"status": status.value}})


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = get_auth_service().login(LoginIn(**data))
    body = _token_body(result.access_token, result.access_ttl, result.refresh_token)
    body["user"] = profile_schema.dump(result.profile)
    return json_response({"data": body})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate the presented refresh token."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    pair = get_auth_service().refresh(data["refresh_token"])
    return json_response(
        {"data": _token_body(pair.access_token, pair.access_ttl, pair.refresh_token)}
    )


@bp.post("/logout")
@timing
def logout():
    """Revoke a refresh token and/or an access-token jti for ``username``."""

    body = logout_schema.load(request.get_json(silent=True) or {})
    username = request.args.get("username") or body["username"]
    if not username or not username.strip():
        raise BadRequest("Username is required")

    get_auth_service().logout(
        LogoutIn(
            username=username.strip(),
            refresh_token=body["refresh_token"],
            access_jti=request.args.get("jti") or body["jti"],
        )
    )
    return json_response({"message": "Logged out successfully"})
