"""
Role-based access control for the administrative endpoints.

:class:`AuthContextMiddleware` (presentation layer) decodes any bearer
token and stores its claims on ``request.state.user``.  The dependencies
here turn those claims into 401 / 403 responses.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Any

from fastapi import HTTPException, Request, status

if TYPE_CHECKING:
    from collections.abc import Callable


class AdminLevel(IntEnum):
    """Admin roles ordered by privilege level."""

    ADMIN = 10
    SUPER_ADMIN = 20


def get_current_user(request: Request) -> dict[str, Any]:
    """
    Return the authenticated claims attached to the request.

    Raises 401 when the request carried no valid bearer token.
    """
    user: dict[str, Any] | None = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def _resolve_level(role_value: str | None) -> AdminLevel:
    try:
        return AdminLevel[(role_value or "").upper()]
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin privileges required.",
        ) from exc


def require_role(min_level: AdminLevel = AdminLevel.ADMIN) -> Callable[..., Any]:
    """
    Return a FastAPI dependency that enforces a minimum admin level.

    Usage::

        @router.post("/config", dependencies=[Depends(require_role())])
        async def create_rate(): ...
    """

    async def _check(request: Request) -> dict[str, Any]:
        user = get_current_user(request)
        level = _resolve_level(user.get("role"))
        if level < min_level:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient role. Required: {min_level.name.lower()}",
            )
        return user

    return _check


require_admin = require_role(AdminLevel.ADMIN)
