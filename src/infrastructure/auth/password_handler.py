"""
Administrator password hashing using Argon2id.
"""

from __future__ import annotations

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError


class PasswordHandler:
    """
    Thin wrapper around argon2-cffi.

    Defaults follow the OWASP interactive-login profile (3 iterations,
    64 MiB, 4 lanes); tests pass cheaper parameters.
    """

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ) -> None:
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )

    def hash_password(self, plain_password: str) -> str:
        """Return the encoded Argon2id string (parameters and salt included)."""
        return self._hasher.hash(plain_password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify *plain_password* against *hashed_password*.

        A malformed stored hash counts as a mismatch.
        """
        try:
            return self._hasher.verify(hashed_password, plain_password)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False
