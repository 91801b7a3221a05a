"""
Bearer-token context middleware.

Decodes an ``Authorization: Bearer <jwt>`` header, when present, and
attaches the verified claims to ``request.state.user`` (and
``request.state.jwt_claims`` for the request logger).  Requests without a
valid token pass through unauthenticated; the RBAC dependencies decide
whether that is acceptable for the route.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from domain.exceptions import InvalidTokenError
from infrastructure.container import get_container

logger = logging.getLogger(__name__)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AuthContextMiddleware(BaseHTTPMiddleware):
    """Resolve the caller's JWT claims once per request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        claims: dict[str, Any] | None = None
        token = _bearer_token(request)
        if token is not None:
            try:
                claims = get_container().auth_service.decode_token(token)
            except InvalidTokenError as exc:
                logger.debug("Rejected bearer token: %s", exc.detail)

        request.state.user = claims
        request.state.jwt_claims = claims
        return await call_next(request)
