# tests/test_auth_api.py

from datetime import timedelta

import jwt
from fastapi.testclient import TestClient

from taskboard.core.security import create_access_token, create_reset_token
from taskboard.main import create_app

from .conftest import PASSWORD, auth_headers, login, register


def test_register_then_login_returns_token_for_same_user(client, settings) -> None:
    response = register(client, "alice", "alice@x.com")
    assert response.status_code == 201
    created = response.json()["user"]
    assert created["username"] == "alice"
    assert created["email"] == "alice@x.com"
    assert "password_hash" not in created

    body = login(client, "alice")
    assert body["user"] == {"id": created["id"], "username": "alice"}

    claims = jwt.decode(body["token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert claims["id"] == created["id"]
    assert claims["username"] == "alice"
    assert claims["exp"] - claims["iat"] == 24 * 60 * 60


def test_login_accepts_email_as_identifier(client) -> None:
    register(client, "bob", "bob@x.com")
    body = login(client, "bob@x.com")
    assert body["user"]["username"] == "bob"


def test_register_requires_all_fields(client) -> None:
    response = client.post("/api/register", json={"username": "carol", "password": PASSWORD})
    assert response.status_code == 400
    assert "error" in response.json()

    response = client.post("/api/register", json={"username": "  ", "email": "c@x.com", "password": PASSWORD})
    assert response.status_code == 400


def test_duplicate_username_and_email_are_conflicts(client) -> None:
    assert register(client, "dave", "dave@x.com").status_code == 201

    response = register(client, "dave", "other@x.com")
    assert response.status_code == 409
    assert response.json() == {"error": "Username already exists", "field": "username"}

    response = register(client, "dave2", "dave@x.com")
    assert response.status_code == 409
    assert response.json()["field"] == "email"


def test_wrong_password_is_an_auth_error(client) -> None:
    register(client, "erin")
    response = client.post("/api/login", json={"username": "erin", "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json() == {"error": "Incorrect password"}


def test_unknown_user_is_an_auth_error(client) -> None:
    response = client.post("/api/login", json={"username": "ghost", "password": PASSWORD})
    assert response.status_code == 401
    assert response.json() == {"error": "User not found"}


def test_login_requires_fields(client) -> None:
    response = client.post("/api/login", json={"username": "erin"})
    assert response.status_code == 400


def test_tasks_require_a_bearer_token(client) -> None:
    response = client.get("/api/tasks")
    assert response.status_code == 401
    assert "error" in response.json()

    response = client.get("/api/tasks", headers={"Authorization": "Basic abc"})
    assert response.status_code == 401


def test_garbage_token_is_forbidden(client) -> None:
    response = client.get("/api/tasks", headers=auth_headers("not-a-jwt"))
    assert response.status_code == 403


def test_token_signed_with_other_secret_is_forbidden(client, settings) -> None:
    register(client, "frank")
    user_id = login(client, "frank")["user"]["id"]
    other = settings.model_copy(update={"SECRET_KEY": "someone-else"})
    token = create_access_token(user_id, "frank", other)
    response = client.get("/api/tasks", headers=auth_headers(token))
    assert response.status_code == 403


def test_expired_token_is_forbidden(client, settings) -> None:
    register(client, "gina")
    user_id = login(client, "gina")["user"]["id"]
    token = create_access_token(user_id, "gina", settings, expires_delta=timedelta(seconds=-5))
    response = client.get("/api/tasks", headers=auth_headers(token))
    assert response.status_code == 403


def test_reset_token_cannot_be_used_as_bearer(client, settings) -> None:
    register(client, "hank", "hank@x.com")
    token = create_reset_token("hank@x.com", "some-hash", settings)
    response = client.get("/api/tasks", headers=auth_headers(token))
    assert response.status_code == 403


def test_token_for_missing_user_is_forbidden(client, settings) -> None:
    token = create_access_token(9999, "nobody", settings)
    response = client.get("/api/tasks", headers=auth_headers(token))
    assert response.status_code == 403


def test_health_endpoints(client) -> None:
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").status_code == 200


def test_password_with_nul_byte_is_a_wrong_password(client) -> None:
    register(client, "ivan")
    response = client.post("/api/login", json={"username": "ivan", "password": "bad\u0000pw"})
    assert response.status_code == 401
    assert response.json() == {"error": "Incorrect password"}


def test_register_rejects_password_bcrypt_cannot_hash(client) -> None:
    response = register(client, "judy", password="bad\u0000pw")
    assert response.status_code == 400
    assert "error" in response.json()
    assert client.post("/api/login", json={"username": "judy", "password": "bad"}).json() == {
        "error": "User not found"
    }


def test_handlers_use_the_apps_own_settings(engine, mailer, settings) -> None:
    short = settings.model_copy(update={"ACCESS_TOKEN_EXPIRE_MINUTES": 5})
    with TestClient(create_app(short, engine=engine, mailer=mailer)) as client:
        register(client, "kate")
        token = login(client, "kate")["token"]

    claims = jwt.decode(token, short.SECRET_KEY, algorithms=[short.ALGORITHM])
    assert claims["exp"] - claims["iat"] == 5 * 60
