from __future__ import annotations

from dataclasses import replace

import manage
from tutor_api.config import Settings
from tutor_api.core.database import create_db_engine
from tutor_api.main import create_app


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["timestamp"]
    assert body["services"]["llm"] == "mock"


def test_health_reports_configured_provider(settings):
    app = create_app(replace(settings, openai_api_key="sk-live-key-123456"))

    assert app.state.llm_service.is_mock is False


def test_placeholder_key_falls_back_to_mock(settings):
    app = create_app(replace(settings, openai_api_key="sk-your-key-here"))

    assert app.state.llm_service.is_mock is True


def test_unknown_route(client):
    response = client.get("/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Route not found"}


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "env-secret")
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_DAYS", "3")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.delenv("API_PORT", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.secret_key == "env-secret"
    assert settings.access_token_expires.days == 3
    assert settings.api_port == 8080
    assert settings.log_level == "DEBUG"


def test_manage_seed_and_check(settings):
    engine = create_db_engine(settings)

    assert manage.seed_db(settings, engine=engine) == 3
    assert manage.seed_db(settings, engine=engine) == 0

    rows = manage.check_db(settings, engine=engine)
    assert [user.email for user, _ in rows] == [u["email"] for u in manage.TEST_USERS]
    assert all(count == 0 for _, count in rows)

    assert manage.reset_db(settings, engine=engine, yes=True) is True
    assert manage.check_db(settings, engine=engine) == []
