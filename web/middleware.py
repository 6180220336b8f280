"""HTTP middleware: security headers + password gate."""

import logging
import re

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

# Paths reachable without logging in
_AUTH_EXEMPT = ("/login", "/api/auth", "/api/health")

_STATIC_ASSET_RE = re.compile(
    r'\.(?:svg|png|jpg|jpeg|gif|webp|ico|js|css|map|json|webmanifest|txt|xml)$',
    re.IGNORECASE,
)


def is_static_asset_path(path: str) -> bool:
    """Asset-looking paths are never gated, so the front end can always load."""
    if path == "/favicon.ico":
        return True
    if path.startswith("/api/"):
        return False
    return bool(_STATIC_ASSET_RE.search(path))


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            "script-src 'self' 'unsafe-inline'; "
            "style-src 'self' 'unsafe-inline'; "
            "img-src 'self' https:; "
            "frame-src https://www.youtube-nocookie.com https://www.youtube.com; "
            "connect-src 'self'; "
            "object-src 'none'; "
            "base-uri 'self'"
        )
        return response


class PasswordAuthMiddleware(BaseHTTPMiddleware):
    """Require the shared app password when one is configured."""

    def __init__(self, app, password: str = ""):
        super().__init__(app)
        self.password = password

    async def dispatch(self, request: Request, call_next) -> Response:
        if not self.password:
            return await call_next(request)
        path = request.url.path
        if path.startswith(_AUTH_EXEMPT) or is_static_asset_path(path):
            return await call_next(request)
        if request.session.get("authenticated"):
            return await call_next(request)
        # Return JSON 401 for API endpoints instead of redirect
        if path.startswith("/api/"):
            return JSONResponse({"error": "unauthorized", "success": False}, status_code=401)
        return RedirectResponse(url="/login", status_code=303)
