"""Authentication routes: password login, logout."""

import hmac
import logging
import secrets

from fastapi import APIRouter, Request, Query
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from web.deps import get_web_config, is_authenticated
from web.helpers import get_csrf_token, validate_csrf
from web.shared import LOGIN_RATE_LIMIT, limiter, templates

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_credentials(request: Request) -> tuple[str | None, str, bool]:
    """Extract (password, csrf_token, is_json) from a JSON or form body."""
    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            body = await request.json()
        except ValueError:
            return None, "", True
        password = body.get("password") if isinstance(body, dict) else None
        return (password if isinstance(password, str) else None), "", True

    form = await request.form()
    password = form.get("password")
    csrf_token = form.get("csrf_token") or ""
    return (password if isinstance(password, str) else None), str(csrf_token), False


def _password_matches(expected: str, given: str | None) -> bool:
    if not expected:
        return True
    if not given:
        return False
    return hmac.compare_digest(given.encode(), expected.encode())


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, error: str = Query("", max_length=10)):
    """Password form."""
    if is_authenticated(request) and not error:
        return RedirectResponse(url="/", status_code=303)
    return templates.TemplateResponse(request, "login.html", {
        "csrf_token": get_csrf_token(request),
        "error": bool(error),
    })


@router.post("/login")
@router.post("/api/auth/login")
@limiter.limit(LOGIN_RATE_LIMIT)
async def login_submit(request: Request):
    """Check the password and mark the session authenticated.

    Form posts redirect; JSON posts get a JSON answer.
    """
    try:
        password, csrf_token, is_json = await _read_credentials(request)
    except Exception as e:
        logger.error("Failed to read login body: %s", e)
        return JSONResponse({"success": False, "message": "Authentication error"}, status_code=500)

    if not is_json and not validate_csrf(request, csrf_token):
        return RedirectResponse(url="/login?error=1", status_code=303)

    web_config = get_web_config(request)
    expected = web_config.password if web_config else ""
    if _password_matches(expected, password):
        request.session["authenticated"] = True
        request.session["csrf_token"] = secrets.token_hex(32)
        if is_json:
            return JSONResponse({"success": True})
        return RedirectResponse(url="/", status_code=303)

    logger.info("Failed login attempt from %s", request.client.host if request.client else "unknown")
    if is_json:
        return JSONResponse({"success": False, "message": "Invalid password"}, status_code=401)
    return RedirectResponse(url="/login?error=1", status_code=303)


@router.post("/api/auth/logout")
async def logout_api(request: Request):
    """Drop the authenticated session."""
    request.session.clear()
    return JSONResponse({"success": True})


@router.get("/logout")
@router.post("/logout")
async def logout(request: Request):
    """Drop the authenticated session and return to the login form."""
    request.session.clear()
    return RedirectResponse(url="/login", status_code=303)
