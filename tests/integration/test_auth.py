"""
Authentication without dependency overrides: development identities on the
local backend and bearer-token enforcement otherwise.
"""

from unittest.mock import patch

from fastapi import HTTPException

from wsp.auth.verify import DEV_USER_HEADER


def test_dev_header_selects_profile(client):
    response = client.get("/me", headers={DEV_USER_HEADER: "user-003"})

    assert response.status_code == 200
    assert response.json()["profile"]["name"] == "Eve Employee"
    assert response.json()["auth"]["role"] == "authenticated"


def test_dev_user_fallback(client):
    with patch("wsp.auth.verify.settings.DEV_USER_ID", "admin-002"):
        response = client.get("/me")

    assert response.json()["profile"]["id"] == "admin-002"


def test_no_identity_without_dev_user(client):
    with patch("wsp.auth.verify.settings.DEV_USER_ID", None):
        response = client.get("/me")

    assert response.status_code == 401


def test_dev_header_ignored_outside_local_backend(client):
    with patch("wsp.auth.verify.settings.DATA_BACKEND", "postgres"):
        response = client.get("/me", headers={DEV_USER_HEADER: "user-003"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"


def test_bearer_token_is_verified(client):
    with patch(
        "wsp.auth.verify.verify_jwt",
        side_effect=HTTPException(status_code=401, detail="Invalid authentication token: expired"),
    ):
        response = client.get("/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_verified_claims_reach_route(client):
    claims = {"sub": "user-001", "email": "bob@innovate.local", "role": "authenticated", "aud": "authenticated"}
    with patch("wsp.auth.verify.verify_jwt", return_value=claims):
        response = client.get("/me", headers={"Authorization": "Bearer token"})

    assert response.status_code == 200
    assert response.json()["auth"]["email"] == "bob@innovate.local"
