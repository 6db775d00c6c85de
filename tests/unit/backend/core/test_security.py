"""
Unit Tests for Security Module.

bcrypt and JWT run for real; only the config boundary is stubbed with
real Pydantic schema objects.
"""

import time
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from jose import jwt as jose_jwt

from modules.backend.core.config_schema import JwtSchema
from modules.backend.core.exceptions import AuthenticationError
from modules.backend.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

TEST_JWT_SECRET = "survey-crm-test-secret-long-enough-for-hs256"


@pytest.fixture
def jwt_config() -> JwtSchema:
    return JwtSchema(
        algorithm="HS256",
        access_token_expire_minutes=60,
        audience="survey-crm-api",
    )


@pytest.fixture
def _stub_config(jwt_config):
    settings = SimpleNamespace(jwt_secret=TEST_JWT_SECRET)
    app_config = SimpleNamespace(security=SimpleNamespace(jwt=jwt_config))
    with (
        patch("modules.backend.core.security.get_settings", return_value=settings),
        patch("modules.backend.core.security.get_app_config", return_value=app_config),
    ):
        yield


class TestPasswords:
    """Tests for bcrypt hashing and verification."""

    def test_hash_is_salted_bcrypt(self):
        first = hash_password("correct-horse")
        second = hash_password("correct-horse")

        assert first.startswith("$2b$")
        assert first != second

    def test_verify(self):
        hashed = hash_password("correct-horse")

        assert verify_password("correct-horse", hashed) is True
        assert verify_password("Correct-horse", hashed) is False
        assert verify_password("", hashed) is False

    def test_greek_password(self):
        hashed = hash_password("κωδικός-2026")

        assert verify_password("κωδικός-2026", hashed) is True

    def test_unreadable_stored_hash(self):
        assert verify_password("correct-horse", "plain-text-legacy") is False


@pytest.mark.usefixtures("_stub_config")
class TestAccessTokens:
    """Tests for issuing access tokens."""

    def test_claims(self):
        claims = decode_access_token(create_access_token("user-42", "EMPLOYEE"))

        assert claims["sub"] == "user-42"
        assert claims["role"] == "EMPLOYEE"
        assert claims["type"] == "access"
        assert claims["aud"] == "survey-crm-api"

    def test_default_lifetime_from_config(self):
        claims = decode_access_token(create_access_token("user-42", "ADMIN"))

        lifetime = claims["exp"] - int(time.time())
        assert 59 * 60 <= lifetime <= 60 * 60 + 1

    def test_custom_expiration(self):
        short = decode_access_token(create_access_token("u", "USER", expires_delta=timedelta(minutes=5)))
        default = decode_access_token(create_access_token("u", "USER"))

        assert short["exp"] < default["exp"]

    def test_non_access_token_rejected(self):
        token = jose_jwt.encode(
            {"sub": "user-1", "aud": "survey-crm-api", "type": "refresh"},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_token_without_subject_rejected(self):
        token = jose_jwt.encode(
            {"aud": "survey-crm-api", "type": "access"},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError):
            decode_access_token(token)



@pytest.mark.usefixtures("_stub_config")
class TestDecodeFailures:
    """Every rejected token surfaces as AuthenticationError."""

    @pytest.mark.parametrize("token", ["", "not-a-jwt-token"])
    def test_garbage(self, token):
        with pytest.raises(AuthenticationError, match="Invalid or expired token"):
            decode_access_token(token)

    def test_tampered_signature(self):
        token = create_access_token("user-1", "USER")

        with pytest.raises(AuthenticationError):
            decode_access_token(token[:-4] + "XXXX")

    def test_wrong_secret(self):
        token = jose_jwt.encode(
            {"sub": "user-1", "aud": "survey-crm-api"},
            "another-secret",
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_wrong_audience(self):
        token = jose_jwt.encode(
            {"sub": "user-1", "aud": "some-other-api"},
            TEST_JWT_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_expired(self):
        token = create_access_token("user-1", "USER", expires_delta=timedelta(seconds=-1))

        with pytest.raises(AuthenticationError):
            decode_access_token(token)
