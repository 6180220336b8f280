"""FastAPI application factory."""

import logging
import secrets

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.sessions import SessionMiddleware

from config import Config
from nocodb.client import NocoDBClientProtocol
from version import __version__
from web.middleware import PasswordAuthMiddleware, SecurityHeadersMiddleware
from web.routers.auth import router as auth_router
from web.routers.pages import router as pages_router
from web.routers.search import router as search_router
from web.routers.videos import router as videos_router
from web.shared import limiter

logger = logging.getLogger(__name__)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        {"error": "Too many requests", "success": False, "details": str(exc.detail)},
        status_code=429,
    )


def create_app(config: Config, client: NocoDBClientProtocol) -> FastAPI:
    """Build the app with routers, state and middleware wired in."""
    app = FastAPI(title="YTViewer", version=__version__)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

    app.include_router(auth_router)
    app.include_router(pages_router)
    app.include_router(videos_router)
    app.include_router(search_router)

    state = app.state
    state.nocodb = client
    state.web_config = config.web

    session_secret = config.web.session_secret
    if not session_secret:
        # Sessions will not survive a restart without a configured secret
        session_secret = secrets.token_hex(32)
        logger.warning("web.session_secret not set, generated an ephemeral one")

    # Middleware (order matters: last added = first executed)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(PasswordAuthMiddleware, password=config.web.password)
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        max_age=config.web.session_max_age,
        same_site="lax",
    )

    logger.info("Web app initialized (password gate %s)", "on" if config.web.password else "off")
    return app
