"""Session identity middleware for FastAPI.

The client authenticates locally and sends its user id in the ``X-User-Id``
header on every request.  This middleware checks the header is present on
non-public routes and sets ``request.state.auth`` with the user context that
route handlers consume via ``get_current_user``.
"""

from __future__ import annotations

import logging
import re

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.dependencies import AuthContext

logger = logging.getLogger("auracycle.auth")

USER_HEADER = "X-User-Id"

# Paths that do not require a session
PUBLIC_PATHS: set[str] = {
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
}

_USER_ID = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def _is_public(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/redoc")


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """Populate request.state.auth from the X-User-Id header."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if _is_public(request.url.path):
            return await call_next(request)

        # OPTIONS requests pass through (CORS preflight)
        if request.method == "OPTIONS":
            return await call_next(request)

        user_id = (request.headers.get(USER_HEADER) or "").strip()
        if not user_id:
            return Response(
                content='{"detail":"Missing X-User-Id header"}',
                status_code=401,
                media_type="application/json",
            )
        if not _USER_ID.match(user_id):
            logger.warning("Rejected malformed user id header")
            return Response(
                content='{"detail":"Invalid X-User-Id header"}',
                status_code=401,
                media_type="application/json",
            )

        request.state.auth = AuthContext(user_id=user_id)
        return await call_next(request)
