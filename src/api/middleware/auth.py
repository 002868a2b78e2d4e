"""
User identification middleware.

Authentication is handled by the upstream auth provider, which forwards the
caller's id in ``settings.auth_user_header``. This middleware copies it to
``request.state.user_id`` for ``/api/v1/`` routes and rejects requests that
arrive without one. Health and docs endpoints are never checked.
"""

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.core.config import get_settings


class UserHeaderMiddleware(BaseHTTPMiddleware):
    """Resolve the calling user from the auth header on /api/v1/ routes."""

    _SKIP_PREFIXES = ("/health", "/docs", "/openapi.json", "/redoc")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        settings = get_settings()
        path = request.url.path

        # Only enforce on /api/v1/ paths
        if not path.startswith("/api/v1/") or path == "/api/v1/health":
            return await call_next(request)

        for prefix in self._SKIP_PREFIXES:
            if path.startswith(prefix):
                return await call_next(request)

        # CORS preflight carries no credentials
        if request.method == "OPTIONS":
            return await call_next(request)

        user_id = request.headers.get(settings.auth_user_header, "").strip()
        if not user_id:
            user_id = settings.dev_user_id
        if not user_id:
            return JSONResponse(
                status_code=401,
                content={"detail": "Authentication required", "code": "AUTH_REQUIRED"},
            )

        request.state.user_id = user_id
        return await call_next(request)
