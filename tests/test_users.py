"""
Access guard, profile endpoints, user listing/deletion and app-level routes.
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

import config
from conftest import register, register_verified, login, auth_header


@pytest.fixture
def tokens(client, mailer):
    register_verified(client, mailer)
    return login(client).json()["data"]


# ─────────────────────────────────────────────
# access guard
# ─────────────────────────────────────────────

def test_me_without_header(client):
    res = client.get("/api/users/me")
    assert res.status_code == 401
    assert res.json()["message"] == "Access denied. No token provided."


def test_me_without_bearer_prefix(client, tokens):
    res = client.get("/api/users/me", headers={"Authorization": tokens["accessToken"]})
    assert res.status_code == 401


def test_me_with_refresh_token(client, tokens):
    res = client.get("/api/users/me", headers=auth_header(tokens["refreshToken"]))
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid or expired token"


def test_me_with_token_signed_by_wrong_key(client, tokens, store):
    user = store.user("a@x.com")
    exp = datetime.now(timezone.utc) + timedelta(minutes=5)
    forged = jwt.encode({"userId": user.id, "email": user.email, "exp": exp}, "some-other-key", algorithm="HS256")
    assert client.get("/api/users/me", headers=auth_header(forged)).status_code == 401


def test_me_with_expired_token(client, tokens, store):
    user = store.user("a@x.com")
    exp = datetime.now(timezone.utc) - timedelta(seconds=1)
    expired = jwt.encode(
        {"userId": user.id, "email": user.email, "type": "access", "exp": exp},
        config.JWT_ACCESS_SECRET,
        algorithm="HS256",
    )
    assert client.get("/api/users/me", headers=auth_header(expired)).status_code == 401


# ─────────────────────────────────────────────
# profile
# ─────────────────────────────────────────────

def test_me(client, tokens):
    res = client.get("/api/users/me", headers=auth_header(tokens["accessToken"]))
    assert res.status_code == 200
    user = res.json()["data"]["user"]
    assert user["email"] == "a@x.com"
    assert user["fullName"] == "Alice"
    assert "createdAt" in user and "updatedAt" in user


def test_update_me(client, tokens, store):
    res = client.put(
        "/api/users/me",
        json={"schoolName": "New School"},
        headers=auth_header(tokens["accessToken"]),
    )
    assert res.status_code == 200
    assert res.json()["data"]["user"]["schoolName"] == "New School"
    assert res.json()["data"]["user"]["fullName"] == "Alice"
    assert store.user("a@x.com").school_name == "New School"


def test_update_me_ignores_other_fields(client, tokens, store):
    res = client.put(
        "/api/users/me",
        json={"fullName": "Alice B", "email": "evil@x.com", "isVerified": False},
        headers=auth_header(tokens["accessToken"]),
    )
    assert res.status_code == 200
    user = store.user("a@x.com")
    assert user.full_name == "Alice B"
    assert user.is_verified is True


def test_update_me_requires_a_field(client, tokens):
    res = client.put("/api/users/me", json={}, headers=auth_header(tokens["accessToken"]))
    assert res.status_code == 400
    assert res.json()["message"] == "At least one field is required to update"


def test_update_me_requires_auth(client):
    assert client.put("/api/users/me", json={"fullName": "X"}).status_code == 401


# ─────────────────────────────────────────────
# listing / lookup / delete
# ─────────────────────────────────────────────

def test_list_users(client, mailer):
    register(client, email="a@x.com")
    register(client, email="b@x.com")
    res = client.get("/api/users")
    assert res.status_code == 200
    body = res.json()
    assert body["results"] == 2
    assert {u["email"] for u in body["data"]["users"]} == {"a@x.com", "b@x.com"}


def test_get_user_by_id(client, store):
    register(client)
    user_id = store.user("a@x.com").id
    res = client.get(f"/api/users/{user_id}")
    assert res.status_code == 200
    assert res.json()["data"]["user"]["id"] == user_id


def test_get_unknown_user(client):
    res = client.get("/api/users/does-not-exist")
    assert res.status_code == 404
    assert res.json()["message"] == "User with ID does-not-exist not found"


def test_delete_user(client, mailer, tokens, store):
    register(client, email="b@x.com")
    victim = store.user("b@x.com").id
    res = client.delete(f"/api/users/{victim}", headers=auth_header(tokens["accessToken"]))
    assert res.status_code == 204
    assert res.content == b""
    assert store.user("b@x.com") is None
    assert store.verifications("b@x.com") == []


def test_delete_requires_auth(client, store):
    register(client)
    user_id = store.user("a@x.com").id
    assert client.delete(f"/api/users/{user_id}").status_code == 401
    assert store.user("a@x.com") is not None


def test_delete_unknown_user(client, tokens):
    res = client.delete("/api/users/does-not-exist", headers=auth_header(tokens["accessToken"]))
    assert res.status_code == 404


def test_deleted_user_cannot_refresh_or_read_profile(client, tokens, store):
    user_id = store.user("a@x.com").id
    headers = auth_header(tokens["accessToken"])
    assert client.delete(f"/api/users/{user_id}", headers=headers).status_code == 204
    assert client.get("/api/users/me", headers=headers).status_code == 404
    res = client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert res.status_code == 404


# ─────────────────────────────────────────────
# app-level routes
# ─────────────────────────────────────────────

def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "success"
    assert "timestamp" in res.json()["data"]


def test_root(client):
    assert client.get("/").json()["status"] == "success"


def test_unknown_route(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.json() == {"status": "error", "message": "Route /api/nope not found", "details": "NotFoundError"}


def test_security_headers(client):
    res = client.get("/api/health")
    assert res.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Frame-Options" in res.headers


def test_security_headers_on_error_envelopes(client):
    res = client.get("/api/users/me")
    assert res.status_code == 401
    assert res.headers["X-Content-Type-Options"] == "nosniff"
