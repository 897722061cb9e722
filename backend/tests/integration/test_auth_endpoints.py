"""End-to-end auth flows through the Flask test client."""

from __future__ import annotations

from authcore.infra.jwt.jwt_access_token_codec import JWTAccessTokenCodec
from tests.factories.user import DEFAULT_PASSWORD, UserFactory

PASSWORD = "Str0ng!pass"


def _register(client, username="ana", email="ana@example.com", password=PASSWORD):
    return client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": email, "password": password},
    )


def _login(client, username, password=DEFAULT_PASSWORD):
    return client.post(
        "/api/v1/auth/login", json={"username_or_email": username, "password": password}
    )


def _enabled_user() -> str:
    return UserFactory().username


# ------------------------- Registration & confirm -------------------------- #
def test_register_confirm_login_flow(client, notifier):
    resp = _register(client)
    assert resp.status_code == 201
    body = resp.get_json()["data"]
    assert body["username"] == "ana"
    assert body["enabled"] is False
    assert body["created_at"]
    token = notifier.sent[0]["token"]

    resp = _login(client, "ana", PASSWORD)
    assert resp.status_code == 403
    assert resp.get_json()["detail"] == "Account is not enabled yet. Please check your email."

    resp = client.get(f"/api/v1/auth/confirm?token={token}")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "confirmed"
    resp = client.get(f"/api/v1/auth/confirm?token={token}")
    assert resp.get_json()["data"]["status"] == "already_confirmed"

    resp = _login(client, "ana@example.com", PASSWORD)
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["token_type"] == "Bearer"
    assert data["expires_in"] == 3600
    assert data["access_token"] and data["refresh_token"]
    assert data["user"]["enabled"] is True


def test_register_duplicates_conflict(client):
    assert _register(client).status_code == 201

    resp = _register(client, email="other@example.com")
    assert resp.status_code == 409
    assert resp.mimetype == "application/problem+json"
    assert "username" in resp.get_json()["detail"]

    resp = _register(client, username="other", email="ANA@example.com")
    assert resp.status_code == 409
    assert "email" in resp.get_json()["detail"]


def test_register_validation_errors(client):
    resp = _register(client, username="ab", email="nope", password="weak")
    assert resp.status_code == 422
    problem = resp.get_json()
    assert problem["code"] == "validation_error"
    assert set(problem["details"]["errors"]) == {"username", "email", "password"}


def test_confirm_unknown_token(client):
    resp = client.get("/api/v1/auth/confirm?token=missing")
    assert resp.status_code == 400
    assert resp.get_json()["detail"] == "invalid token"


# ---------------------------------- Login ---------------------------------- #
def test_login_failures_share_one_message(client):
    username = _enabled_user()

    wrong = _login(client, username, "Wr0ng!pass")
    unknown = _login(client, "ghost", DEFAULT_PASSWORD)

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.get_json()["detail"] == unknown.get_json()["detail"]
    assert wrong.headers["WWW-Authenticate"] == "Bearer"


def test_auth_routes_ignore_bad_bearer_header(client):
    username = _enabled_user()
    resp = client.post(
        "/api/v1/auth/login",
        json={"username_or_email": username, "password": DEFAULT_PASSWORD},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert resp.status_code == 200


# --------------------------------- Refresh --------------------------------- #
def test_refresh_rotates_and_detects_replay(client):
    first = _login(client, _enabled_user()).get_json()["data"]

    resp = client.post("/api/v1/auth/refresh", json={"refresh_token": first["refresh_token"]})
    assert resp.status_code == 200
    second = resp.get_json()["data"]
    assert second["refresh_token"] != first["refresh_token"]

    replay = client.post("/api/v1/auth/refresh", json={"refresh_token": first["refresh_token"]})
    assert replay.status_code == 401
    assert replay.get_json()["detail"] == "Token has been revoked"

    resp = client.post("/api/v1/auth/refresh", json={"refresh_token": second["refresh_token"]})
    assert resp.status_code == 200


def test_refresh_requires_token(client):
    assert client.post("/api/v1/auth/refresh", json={}).status_code == 422
    resp = client.post("/api/v1/auth/refresh", json={"refresh_token": "unknown"})
    assert resp.status_code == 401


# --------------------------------- Logout ---------------------------------- #
def test_logout_requires_username(client):
    resp = client.post("/api/v1/auth/logout", json={"jti": "x"})
    assert resp.status_code == 400
    assert resp.get_json()["detail"] == "Username is required"


def test_logout_revokes_refresh_token_and_access_jti(client, revocations, app):
    username = _enabled_user()
    data = _login(client, username).get_json()["data"]
    jti = JWTAccessTokenCodec(key=app.config["TOKEN_SECRET"]).verify(data["access_token"]).jti

    resp = client.post(
        f"/api/v1/auth/logout?username={username}&jti={jti}",
        json={"refresh_token": data["refresh_token"]},
    )
    assert resp.status_code == 200
    assert resp.get_json() == {"message": "Logged out successfully"}
    assert revocations.contains(jti)

    me = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 401
    assert me.get_json()["detail"] == "Token has been revoked"

    resp = client.post("/api/v1/auth/refresh", json={"refresh_token": data["refresh_token"]})
    assert resp.status_code == 401

    # Idempotent
    again = client.post(f"/api/v1/auth/logout?username={username}&jti={jti}")
    assert again.status_code == 200


def test_logout_with_foreign_refresh_token(client):
    owner_data = _login(client, _enabled_user()).get_json()["data"]
    intruder = _enabled_user()

    resp = client.post(
        "/api/v1/auth/logout",
        json={"username": intruder, "refresh_token": owner_data["refresh_token"]},
    )
    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Token does not belong to the user"

    still_valid = client.post(
        "/api/v1/auth/refresh", json={"refresh_token": owner_data["refresh_token"]}
    )
    assert still_valid.status_code == 200
