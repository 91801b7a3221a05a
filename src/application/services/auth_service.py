"""Administrator authentication application service.

Handles admin registration, credential validation, access-token issuance
and profile lookup.  Password hashing is delegated to
:class:`PasswordHandler` (Argon2id) and token signing to
:class:`JWTHandler` (*python-jose*).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Optional, Protocol
from uuid import UUID, uuid4

from jose import JWTError

from domain.exceptions import AdminAlreadyExistsError, AuthenticationError, InvalidTokenError
from domain.models.admin import Admin, AdminRole

if TYPE_CHECKING:
    from infrastructure.auth.jwt_handler import JWTHandler
    from infrastructure.auth.password_handler import PasswordHandler

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    admin: Admin
    token_type: str = "Bearer"
    expires_in: int = 0


# ---------------------------------------------------------------------------
# Repository port
# ---------------------------------------------------------------------------


class AdminRepository(Protocol):
    """Port: persistence operations for :class:`Admin` accounts."""

    def get_by_id(self, admin_id: UUID) -> Admin | None: ...

    def get_by_username(self, username: str) -> Admin | None: ...

    def get_by_email(self, email: str) -> Admin | None: ...

    def save(self, admin: Admin) -> Admin: ...

    def update(self, admin: Admin) -> Admin: ...


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class AdminAuthService:
    """Handles admin registration, login and token validation."""

    def __init__(
        self,
        admin_repo: AdminRepository,
        password_handler: PasswordHandler,
        jwt_handler: JWTHandler,
    ) -> None:
        self._admin_repo = admin_repo
        self._passwords = password_handler
        self._tokens = jwt_handler

    def register(
        self,
        username: str,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        role: AdminRole = AdminRole.ADMIN,
    ) -> Admin:
        if self._admin_repo.get_by_username(username) is not None:
            raise AdminAlreadyExistsError(identifier=username)
        if self._admin_repo.get_by_email(email) is not None:
            raise AdminAlreadyExistsError(identifier=email)

        now = datetime.now(UTC)
        admin = Admin(
            id=uuid4(),
            username=username,
            email=email,
            hashed_password=self._passwords.hash_password(password),
            full_name=full_name,
            role=role,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        admin = self._admin_repo.save(admin)
        logger.info("Admin %s registered with role %s", admin.id, role.value)
        return admin

    def authenticate(self, username: str, password: str) -> LoginResult:
        """Validate credentials and issue an access token."""
        admin = self._admin_repo.get_by_username(username)
        if admin is None or not admin.is_active:
            raise AuthenticationError()

        if not self._passwords.verify_password(password, admin.hashed_password):
            logger.warning("Failed login attempt for %s", username)
            raise AuthenticationError()

        admin = self._admin_repo.update(replace(admin, last_login=datetime.now(UTC)))

        token = self._tokens.create_access_token(
            admin_id=str(admin.id),
            username=admin.username,
            role=admin.role.value,
        )
        logger.info("Admin %s authenticated successfully", admin.id)
        return LoginResult(access_token=token, admin=admin, expires_in=self._tokens.expires_in)

    def decode_token(self, token: str) -> dict[str, Any]:
        try:
            return self._tokens.decode_token(token)
        except JWTError as exc:
            raise InvalidTokenError(detail=str(exc)) from exc

    def get_profile(self, admin_id: UUID) -> Admin:
        admin = self._admin_repo.get_by_id(admin_id)
        if admin is None:
            raise AuthenticationError(detail="User not found")
        return admin

    def get_current_admin(self, token: str) -> Admin:
        """Decode an access token and return the active admin it names."""
        claims = self.decode_token(token)
        try:
            admin_id = UUID(claims["sub"])
        except (KeyError, ValueError) as exc:
            raise InvalidTokenError(detail="Invalid admin ID in token") from exc

        admin = self._admin_repo.get_by_id(admin_id)
        if admin is None or not admin.is_active:
            raise InvalidTokenError(detail="User not found or inactive")
        return admin
