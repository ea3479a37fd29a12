"""Request limits enforced through the HTTP stack."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.rate_limit import limiter
from app.db.base import get_database, get_db
from app.db.dialects import PostgresDialect
from app.main import app
from conftest import scalar_result


@pytest.fixture
def client(session, monkeypatch):
    session.execute.return_value = scalar_result(None)

    async def override_db():
        yield session

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_database] = lambda: MagicMock(dialect=PostgresDialect())
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    yield TestClient(app)
    limiter.reset()
    app.dependency_overrides.clear()


def test_login_limit(client, monkeypatch):
    monkeypatch.setattr(settings, "LOGIN_RATE_LIMIT", "2 per minute")
    credentials = {"username": "ghost", "password": "whatever"}

    assert client.post("/api/auth/login", json=credentials).status_code == 401
    assert client.post("/api/auth/login", json=credentials).status_code == 401

    blocked = client.post("/api/auth/login", json=credentials)
    assert blocked.status_code == 429
    assert blocked.json() == {"error": "Too many login attempts, please try again later"}


def test_api_limit_covers_every_route(client, monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_DEFAULT", "3 per minute")

    for _ in range(3):
        assert client.get("/api/inventory").status_code == 401

    blocked = client.get("/api/customers")
    assert blocked.status_code == 429
    assert blocked.json() == {"error": "Too many requests from this IP"}


def test_health_is_not_limited(client, monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_DEFAULT", "1 per minute")

    for _ in range(3):
        assert client.get("/health").status_code == 200
