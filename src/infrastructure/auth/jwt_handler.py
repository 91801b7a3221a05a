"""
JWT token management for the electricity billing back office.

Handles creation, decoding, and verification of signed access tokens that
carry the administrator's identity and role.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt


@dataclass(frozen=True)
class JWTConfig:
    """Configuration for JWT token generation and validation."""

    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    issuer: str = "electricity-billing"


class JWTHandler:
    """
    Manages JWT token lifecycle: creation, decoding, and verification.

    With the default HS256 algorithm *signing_key* and *verification_key*
    are the same shared secret; pass a PEM key pair together with
    ``JWTConfig(algorithm="RS256")`` for asymmetric signing.
    """

    def __init__(
        self,
        signing_key: str,
        verification_key: Optional[str] = None,
        config: Optional[JWTConfig] = None,
    ) -> None:
        self._signing_key = signing_key
        self._verification_key = verification_key or signing_key
        self._config = config or JWTConfig()

    @property
    def expires_in(self) -> int:
        return self._config.access_token_expire_minutes * 60

    # ------------------------------------------------------------------
    # Token creation
    # ------------------------------------------------------------------

    def create_access_token(
        self,
        admin_id: str,
        username: str,
        role: str,
        extra_claims: Optional[dict[str, Any]] = None,
    ) -> str:
        """Create an access token carrying identity and role claims."""

        now = datetime.now(timezone.utc)
        expires = now + timedelta(minutes=self._config.access_token_expire_minutes)

        payload: dict[str, Any] = {
            "sub": admin_id,
            "username": username,
            "role": role,
            "iat": now,
            "exp": expires,
            "iss": self._config.issuer,
            "jti": str(uuid.uuid4()),
        }

        if extra_claims:
            payload.update(extra_claims)

        return jwt.encode(
            payload,
            self._signing_key,
            algorithm=self._config.algorithm,
        )

    # ------------------------------------------------------------------
    # Token consumption
    # ------------------------------------------------------------------

    def decode_token(self, token: str) -> dict[str, Any]:
        """
        Decode and validate a JWT token.

        Raises ``jose.JWTError`` when the token is invalid, expired, or has
        an unexpected issuer.
        """

        claims: dict[str, Any] = jwt.decode(
            token,
            self._verification_key,
            algorithms=[self._config.algorithm],
            issuer=self._config.issuer,
            options={"require_exp": True, "require_iat": True, "require_sub": True},
        )
        return claims

    def verify_token(self, token: str) -> bool:
        """Return *True* when the token is structurally valid and not expired."""

        try:
            self.decode_token(token)
            return True
        except JWTError:
            return False
