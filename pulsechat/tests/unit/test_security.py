# pulsechat/tests/unit/test_security.py
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from pulsechat.config import AppConfig
from pulsechat.infrastructure.security import SecurityService

SECRET = "unit_test_identity_secret_with_enough_bytes"


@pytest.fixture
def security_service():
    config = AppConfig(
        REDIS_HOST="localhost",
        REDIS_PORT=6379,
        IDENTITY_JWT_KEY=SECRET,
        IDENTITY_JWT_ALGORITHM="HS256",
    )
    return SecurityService(config)


def _token(key=SECRET, expires_in=60, **claims):
    payload = {"exp": datetime.now(UTC) + timedelta(seconds=expires_in), **claims}
    return jwt.encode(payload, key, algorithm="HS256")


def test_decode_identity_token(security_service):
    token = _token(
        sub="user-1",
        iss="https://id.example",
        name="Alice",
        email="alice@example.com",
        picture="https://img.example/a.png",
    )

    caller = security_service.decode_identity_token(token)

    assert caller.token_identifier == "https://id.example|user-1"
    assert caller.name == "Alice"
    assert caller.email == "alice@example.com"
    assert caller.picture_url == "https://img.example/a.png"


def test_token_identifier_without_issuer(security_service):
    caller = security_service.decode_identity_token(_token(sub="user-1"))
    assert caller.token_identifier == "user-1"
    assert caller.name is None


def test_image_url_claim_is_accepted(security_service):
    token = _token(sub="user-1", image_url="https://img.example/b.png")
    caller = security_service.decode_identity_token(token)
    assert caller.picture_url == "https://img.example/b.png"


def test_expired_token_is_rejected(security_service):
    assert security_service.decode_identity_token(_token(sub="user-1", expires_in=-10)) is None


def test_wrong_signature_is_rejected(security_service):
    token = _token(key="another_secret_with_enough_bytes_too", sub="user-1")
    assert security_service.decode_identity_token(token) is None


def test_token_without_subject_is_rejected(security_service):
    assert security_service.decode_identity_token(_token(name="Nobody")) is None


def test_garbage_token_is_rejected(security_service):
    assert security_service.decode_identity_token("not-a-jwt") is None


def test_issuer_and_audience_are_enforced_when_configured():
    config = AppConfig(
        REDIS_HOST="localhost",
        REDIS_PORT=6379,
        IDENTITY_JWT_KEY=SECRET,
        IDENTITY_JWT_ALGORITHM="HS256",
        IDENTITY_JWT_ISSUER="https://id.example",
        IDENTITY_JWT_AUDIENCE="pulsechat",
    )
    security_service = SecurityService(config)

    good = _token(sub="u", iss="https://id.example", aud="pulsechat")
    wrong_issuer = _token(sub="u", iss="https://evil.example", aud="pulsechat")
    wrong_audience = _token(sub="u", iss="https://id.example", aud="other")

    assert security_service.decode_identity_token(good) is not None
    assert security_service.decode_identity_token(wrong_issuer) is None
    assert security_service.decode_identity_token(wrong_audience) is None
