"""Helpers shared across web routers: CSRF tokens, error envelopes, serialization."""

import secrets

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


# ---------------------------------------------------------------------------
# CSRF helpers
# ---------------------------------------------------------------------------

def get_csrf_token(request: Request) -> str:
    """Get or create a CSRF token in the session."""
    token = request.session.get("csrf_token")
    if not token:
        token = secrets.token_hex(32)
        request.session["csrf_token"] = token
    return token


def validate_csrf(request: Request, token: str) -> bool:
    """Validate a submitted CSRF token against the session."""
    expected = request.session.get("csrf_token")
    if not expected or not token:
        return False
    return secrets.compare_digest(expected, token)


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------

def error_response(error: str, exc: BaseException | None = None, status_code: int = 500) -> JSONResponse:
    """The ``{error, success: false, details}`` envelope every API route fails with."""
    details = (str(exc) or type(exc).__name__) if exc is not None else "Unknown error"
    return JSONResponse(
        {"error": error, "success": False, "details": details},
        status_code=status_code,
    )


def dump_video(video) -> dict:
    """JSON-ready dict for a pydantic record or a raw row."""
    if isinstance(video, BaseModel):
        return video.model_dump(mode="json")
    return dict(video)


def split_csv(raw: str) -> list[str]:
    """``"a,b,,c"`` -> ``["a", "b", "c"]``."""
    return [part.strip() for part in raw.split(",") if part.strip()]
