# tests/conftest.py

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from taskboard.core.config import Settings
from taskboard.core.security import pwd_context
from taskboard.db.session import create_db_and_tables, create_db_engine
from taskboard.main import create_app

from .fakes import RecordingMailer

# Cheapest bcrypt cost so the suite stays fast
pwd_context.update(bcrypt__rounds=4)

PASSWORD = "pw123456"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret-key",
        FRONTEND_URL="http://frontend.test",
        MAIL_PROVIDER="log",
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture()
def engine(settings: Settings):
    """One in-memory database shared by every connection of a test."""
    engine = create_db_engine(settings, poolclass=StaticPool)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def client(settings: Settings, engine, mailer: RecordingMailer):
    app = create_app(settings, engine=engine, mailer=mailer)
    with TestClient(app) as client:
        yield client


def register(client: TestClient, username: str, email: str = None, password: str = PASSWORD):
    email = email or f"{username}@x.com"
    return client.post(
        "/api/register", json={"username": username, "email": email, "password": password}
    )


def login(client: TestClient, username: str, password: str = PASSWORD) -> dict:
    response = client.post("/api/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_user(client: TestClient):
    """Register a user and return (user dict, auth headers)."""

    def _make(username: str):
        assert register(client, username).status_code == 201
        body = login(client, username)
        return body["user"], auth_headers(body["token"])

    return _make
