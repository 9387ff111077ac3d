from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

# Test-mode runtime guards:
# - in-memory database for the module-level app
# - no external LLM traffic
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["OPENAI_API_KEY"] = ""

from tutor_api.config import Settings  # noqa: E402
from tutor_api.main import create_app  # noqa: E402

TEST_SECRET = "test-secret-key"
DEFAULT_PASSWORD = "password123"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        secret_key=TEST_SECRET,
        openai_api_key="",
        log_level="WARNING",
    )


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app) -> TestClient:
    with TestClient(app) as tc:
        yield tc


@pytest.fixture()
def register_user(client):
    def _register(email: str, password: str = DEFAULT_PASSWORD, name: str = "Test User"):
        return client.post("/auth/register", json={"email": email, "password": password, "name": name})

    return _register


@pytest.fixture()
def auth_headers(client, register_user):
    """Registers (if needed) and logs in, returning Authorization headers."""

    def _headers(email: str, password: str = DEFAULT_PASSWORD) -> dict:
        register_user(email, password)
        login = client.post("/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        return {"Authorization": f"Bearer {login.json()['access_token']}"}

    return _headers
