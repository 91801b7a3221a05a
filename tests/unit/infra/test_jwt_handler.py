"""Tests for infrastructure.auth.jwt_handler."""

from __future__ import annotations

import pytest
from jose import JWTError

from infrastructure.auth.jwt_handler import JWTConfig, JWTHandler

SECRET = "unit-test-secret-key-for-hs256-signing"


@pytest.fixture
def jwt_handler() -> JWTHandler:
    return JWTHandler(SECRET)


class TestCreateAccessToken:
    def test_returns_jwt_string(self, jwt_handler: JWTHandler) -> None:
        token = jwt_handler.create_access_token(admin_id="a-1", username="op", role="admin")
        assert isinstance(token, str)
        # JWTs have three dot-separated segments
        assert token.count(".") == 2

    def test_unique_jti(self, jwt_handler: JWTHandler) -> None:
        first = jwt_handler.decode_token(jwt_handler.create_access_token("a-1", "op", "admin"))
        second = jwt_handler.decode_token(jwt_handler.create_access_token("a-1", "op", "admin"))
        assert first["jti"] != second["jti"]

    def test_expires_in(self) -> None:
        handler = JWTHandler(SECRET, config=JWTConfig(access_token_expire_minutes=15))
        assert handler.expires_in == 900


class TestDecodeToken:
    def test_contains_expected_claims(self, jwt_handler: JWTHandler) -> None:
        token = jwt_handler.create_access_token(
            admin_id="a-42",
            username="operator",
            role="super_admin",
            extra_claims={"full_name": "Grid Operator"},
        )
        claims = jwt_handler.decode_token(token)

        assert claims["sub"] == "a-42"
        assert claims["username"] == "operator"
        assert claims["role"] == "super_admin"
        assert claims["iss"] == "electricity-billing"
        assert claims["full_name"] == "Grid Operator"
        assert claims["exp"] > claims["iat"]

    def test_expired_token_raises(self) -> None:
        handler = JWTHandler(SECRET, config=JWTConfig(access_token_expire_minutes=-1))
        token = handler.create_access_token("a-1", "op", "admin")
        with pytest.raises(JWTError):
            handler.decode_token(token)

    def test_wrong_issuer_raises(self, jwt_handler: JWTHandler) -> None:
        other = JWTHandler(SECRET, config=JWTConfig(issuer="someone-else"))
        token = other.create_access_token("a-1", "op", "admin")
        with pytest.raises(JWTError):
            jwt_handler.decode_token(token)

    def test_wrong_secret_raises(self, jwt_handler: JWTHandler) -> None:
        token = JWTHandler("another-secret-entirely").create_access_token("a-1", "op", "admin")
        with pytest.raises(JWTError):
            jwt_handler.decode_token(token)


class TestVerifyToken:
    def test_valid_token_returns_true(self, jwt_handler: JWTHandler) -> None:
        token = jwt_handler.create_access_token("a-1", "op", "admin")
        assert jwt_handler.verify_token(token) is True

    def test_garbage_returns_false(self, jwt_handler: JWTHandler) -> None:
        assert jwt_handler.verify_token("not.a.jwt") is False
