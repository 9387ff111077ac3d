from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from tutor_api.core.logging_config import redact_secrets
from tutor_api.core.security import TokenService, hash_password, verify_password

SECRET = "unit-test-secret"


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def test_hash_password_never_stores_plaintext_and_salts_each_call():
    first = hash_password("password123")
    second = hash_password("password123")

    assert first != "password123"
    assert first != second
    assert first.startswith("$2b$10$")


def test_verify_password_matches_only_the_right_password():
    hashed = hash_password("correct horse")

    assert verify_password("correct horse", hashed) is True
    assert verify_password("wrong horse", hashed) is False


def test_verify_password_rejects_malformed_hash():
    with pytest.raises(ValueError):
        verify_password("password123", "not-a-hash")


def test_token_round_trip_returns_subject():
    service = TokenService(SECRET)
    token = service.issue(42)

    assert service.verify(token) == 42


def test_token_expires_after_seven_days():
    issued_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    clock = FakeClock(issued_at)
    service = TokenService(SECRET, clock=clock)
    token = service.issue(7)

    clock.now = issued_at + timedelta(days=7) - timedelta(seconds=1)
    assert service.verify(token) == 7

    clock.now = issued_at + timedelta(days=7)
    assert service.verify(token) is None

    clock.now = issued_at + timedelta(days=30)
    assert service.verify(token) is None


def test_token_signed_with_other_secret_is_rejected():
    token = TokenService("another-secret").issue(1)

    assert TokenService(SECRET).verify(token) is None


@pytest.mark.parametrize("token", ["", "invalid.token.here", "abc", "a.b"])
def test_malformed_tokens_are_rejected(token):
    assert TokenService(SECRET).verify(token) is None


def test_numeric_subject_is_normalized():
    exp = datetime.now(timezone.utc) + timedelta(hours=1)
    token = jwt.encode({"sub": 15, "exp": exp}, SECRET, algorithm="HS256")

    assert TokenService(SECRET).verify(token) == 15


@pytest.mark.parametrize("claims", [{"sub": "alice"}, {"sub": None}, {"sub": "\u00b2"}, {}])
def test_token_without_integer_subject_is_rejected(claims):
    claims = dict(claims, exp=datetime.now(timezone.utc) + timedelta(hours=1))
    token = jwt.encode(claims, SECRET, algorithm="HS256")

    assert TokenService(SECRET).verify(token) is None


def test_token_without_expiry_is_rejected():
    token = jwt.encode({"sub": "3"}, SECRET, algorithm="HS256")

    assert TokenService(SECRET).verify(token) is None


def test_redact_secrets_masks_credentials():
    raw = (
        "authorization=Bearer abc.def.ghi "
        "api_key=my-api-key password=hunter22 "
        "key sk-abcdefghijklmnop"
    )
    masked = redact_secrets(raw)

    assert "abc.def.ghi" not in masked
    assert "my-api-key" not in masked
    assert "hunter22" not in masked
    assert "abcdefghijklmnop" not in masked
