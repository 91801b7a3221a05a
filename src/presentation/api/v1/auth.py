"""Administrator authentication API endpoints."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import APIRouter, Depends, status

from application.services.auth_service import AdminAuthService
from domain.exceptions import InvalidTokenError
from infrastructure.auth.rbac import get_current_user
from infrastructure.container import get_auth_service

from .schemas import (
    AdminLogin,
    AdminRegister,
    AdminResponse,
    ErrorResponse,
    LoginResponse,
    MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AdminResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an administrator",
    responses={
        409: {"description": "Username or email already registered.", "model": ErrorResponse},
        422: {"description": "Validation error.", "model": ErrorResponse},
    },
)
def register(
    body: AdminRegister,
    service: AdminAuthService = Depends(get_auth_service),
) -> AdminResponse:
    admin = service.register(
        username=body.username,
        email=body.email,
        password=body.password.get_secret_value(),
        full_name=body.full_name,
        role=body.role,
    )
    return AdminResponse.from_domain(admin)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in and obtain an access token",
    responses={401: {"description": "Invalid credentials.", "model": ErrorResponse}},
)
def login(
    body: AdminLogin,
    service: AdminAuthService = Depends(get_auth_service),
) -> LoginResponse:
    result = service.authenticate(body.username, body.password.get_secret_value())
    return LoginResponse(
        access_token=result.access_token,
        token_type=result.token_type,
        expires_in=result.expires_in,
        admin=AdminResponse.from_domain(result.admin),
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
    description="Tokens are stateless; the client discards its token.",
    responses={401: {"description": "Not authenticated.", "model": ErrorResponse}},
)
def logout(user: dict[str, Any] = Depends(get_current_user)) -> MessageResponse:
    logger.info("Admin %s logged out", user.get("sub"))
    return MessageResponse(message="Logout successful")


@router.get(
    "/profile",
    response_model=AdminResponse,
    summary="Current administrator's profile",
    responses={401: {"description": "Not authenticated.", "model": ErrorResponse}},
)
def profile(
    user: dict[str, Any] = Depends(get_current_user),
    service: AdminAuthService = Depends(get_auth_service),
) -> AdminResponse:
    try:
        admin_id = uuid.UUID(str(user.get("sub")))
    except ValueError as exc:
        raise InvalidTokenError(detail="Invalid admin ID in token") from exc
    return AdminResponse.from_domain(service.get_profile(admin_id))
