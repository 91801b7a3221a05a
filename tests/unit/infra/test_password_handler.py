"""Tests for infrastructure.auth.password_handler."""

from __future__ import annotations

import pytest

from infrastructure.auth.password_handler import PasswordHandler


@pytest.fixture
def handler() -> PasswordHandler:
    return PasswordHandler(time_cost=1, memory_cost=16384, parallelism=1)


class TestHashPassword:
    def test_argon2id_encoding(self, handler: PasswordHandler) -> None:
        hashed = handler.hash_password("correct horse")
        assert hashed.startswith("$argon2id$")
        assert "correct horse" not in hashed

    def test_salted(self, handler: PasswordHandler) -> None:
        assert handler.hash_password("same") != handler.hash_password("same")


class TestVerifyPassword:
    def test_match(self, handler: PasswordHandler) -> None:
        hashed = handler.hash_password("correct horse")
        assert handler.verify_password("correct horse", hashed) is True

    def test_mismatch(self, handler: PasswordHandler) -> None:
        hashed = handler.hash_password("correct horse")
        assert handler.verify_password("battery staple", hashed) is False

    def test_malformed_hash(self, handler: PasswordHandler) -> None:
        assert handler.verify_password("anything", "not-a-hash") is False
