from __future__ import annotations

from datetime import datetime, timedelta, timezone

from tutor_api.core.models import User
from tutor_api.core.security import TokenService
from tutor_api.services.user_store import UserStore


def test_protected_route_with_valid_token(client, auth_headers):
    response = client.get("/sessions", headers=auth_headers("valid@example.com"))

    assert response.status_code == 200
    assert "sessions" in response.json()


def test_request_without_token(client):
    response = client.get("/sessions")

    assert response.status_code == 401
    assert "Missing authorization" in response.json()["error"]


def test_header_without_token_segment(client):
    for header in ("Bearer", "Bearer ", "Token abc", "Bearer a b"):
        response = client.get("/sessions", headers={"Authorization": header})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid authorization header format"


def test_request_with_invalid_token(client):
    response = client.get("/sessions", headers={"Authorization": "Bearer invalid.token.here"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


def test_token_signed_with_other_secret(client, register_user):
    user_id = register_user("forged@example.com").json()["user"]["id"]
    token = TokenService("not-the-server-secret").issue(user_id)

    response = client.get("/sessions", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


def test_expired_token(client, settings, register_user):
    user_id = register_user("expired@example.com").json()["user"]["id"]
    eight_days_ago = datetime.now(timezone.utc) - timedelta(days=8)
    token = TokenService(settings.secret_key, clock=lambda: eight_days_ago).issue(user_id)

    response = client.get("/sessions", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


def test_token_of_deleted_user_is_rejected(app, client, auth_headers):
    headers = auth_headers("deleted@example.com")
    with app.state.session_factory() as db:
        db.delete(db.query(User).filter(User.email == "deleted@example.com").one())
        db.commit()

    response = client.get("/sessions", headers=headers)

    assert response.status_code == 401
    assert response.json()["error"] == "User not found"


def test_unexpected_failure_is_a_server_error(client, auth_headers, monkeypatch):
    headers = auth_headers("broken@example.com")

    def _boom(self, user_id):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(UserStore, "get_by_id", _boom)
    response = client.get("/sessions", headers=headers)

    assert response.status_code == 500
    assert response.json()["error"] == "Authentication error"


def test_optional_auth_without_header(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["name"] == "Tutoring API"
    assert "user" not in response.json()


def test_optional_auth_with_valid_token(client, auth_headers):
    response = client.get("/", headers=auth_headers("known@example.com"))

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "known@example.com"
    assert "password" not in response.json()["user"]


def test_optional_auth_ignores_bad_token(client):
    response = client.get("/", headers={"Authorization": "Bearer invalid.token.here"})

    assert response.status_code == 200
    assert "user" not in response.json()
