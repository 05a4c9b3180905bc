"""
Tests d'authentification: inscription, connexion, profil et administrateur initial.
"""

from __future__ import annotations

from conftest import ADMIN_PASSWORD, ADMIN_USERNAME, login

from nouvel_ayiti.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_CONFLICT,
    HTTP_CREATED,
    HTTP_FORBIDDEN,
    HTTP_OK,
    HTTP_UNAUTHORIZED,
)
from nouvel_ayiti.domain.auth import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)


def test_register_creates_regular_user(client) -> None:
    r = client.post("/api/register", json={"username": "marie", "password": "secret1"})
    assert r.status_code == HTTP_CREATED
    body = r.json()
    assert body["username"] == "marie"
    assert body["isAdmin"] is False
    assert "passwordHash" not in body
    assert "password_hash" not in body


def test_register_ignores_admin_flag(client) -> None:
    r = client.post(
        "/api/register", json={"username": "malin", "password": "secret1", "isAdmin": True}
    )
    assert r.status_code == HTTP_CREATED
    assert r.json()["isAdmin"] is False


def test_register_duplicate_username(client) -> None:
    client.post("/api/register", json={"username": "marie", "password": "secret1"})
    r = client.post("/api/register", json={"username": "marie", "password": "secret2"})
    assert r.status_code == HTTP_CONFLICT
    assert r.json()["message"] == "Username already exists"


def test_register_validation(client) -> None:
    r = client.post("/api/register", json={"username": "ab", "password": "123"})
    assert r.status_code == HTTP_BAD_REQUEST
    assert {e["field"] for e in r.json()["errors"]} == {"username", "password"}


def test_login_and_current_user(client) -> None:
    headers = login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
    r = client.get("/api/user", headers=headers)
    assert r.status_code == HTTP_OK
    assert r.json()["username"] == ADMIN_USERNAME
    assert r.json()["isAdmin"] is True


def test_login_response_shape(client) -> None:
    r = client.post(
        "/api/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )
    body = r.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["username"] == ADMIN_USERNAME
    assert "passwordHash" not in body["user"]


def test_login_wrong_password(client) -> None:
    r = client.post("/api/login", json={"username": ADMIN_USERNAME, "password": "wrong"})
    assert r.status_code == HTTP_UNAUTHORIZED
    assert r.json()["code"] == "UNAUTHORIZED"


def test_logout_succeeds_with_or_without_token(client) -> None:
    headers = login(client, ADMIN_USERNAME, ADMIN_PASSWORD)
    r = client.post("/api/logout", headers=headers)
    assert r.status_code == HTTP_OK
    assert r.json() == {"message": "Logged out"}
    assert client.post("/api/logout").status_code == HTTP_OK


def test_current_user_requires_token(client) -> None:
    assert client.get("/api/user").status_code == HTTP_UNAUTHORIZED
    r = client.get("/api/user", headers={"Authorization": "Basic abc"})
    assert r.status_code == HTTP_UNAUTHORIZED


def test_token_for_unknown_user_is_rejected(client, container) -> None:
    settings = container.settings
    token = create_access_token(
        settings.JWT_SECRET,
        settings.JWT_ALG,
        5,
        {"sub": "999", "username": "ghost", "is_admin": True},
    )
    r = client.post(
        "/api/admin/categories",
        json={"name": "x", "label": "X", "language": "ht"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert r.status_code == HTTP_UNAUTHORIZED


def test_admin_flag_is_read_from_store(client, container) -> None:
    user = container.content.register("jean", "secret1")
    settings = container.settings
    token = create_access_token(
        settings.JWT_SECRET,
        settings.JWT_ALG,
        5,
        {"sub": str(user.id), "username": "jean", "is_admin": True},
    )
    r = client.post(
        "/api/admin/categories",
        json={"name": "x", "label": "X", "language": "ht"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert r.status_code == HTTP_FORBIDDEN


def test_password_hashing() -> None:
    hashed = hash_password("secret1")
    assert hashed != "secret1"
    assert verify_password("secret1", hashed) is True
    assert verify_password("other", hashed) is False


def test_expired_token_is_invalid() -> None:
    token = create_access_token("s", "HS256", -1, {"sub": "1", "username": "u"})
    assert decode_token(token, "s", "HS256") is None
    assert decode_token("garbage", "s", "HS256") is None
