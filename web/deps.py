"""Dependency providers: read from app.state, set by create_app()."""

from fastapi import Request

from nocodb.client import NocoDBClientProtocol


def get_nocodb(request: Request) -> NocoDBClientProtocol:
    """NocoDB client shared by all requests."""
    return request.app.state.nocodb


def get_web_config(request: Request):
    """WebConfig instance."""
    return request.app.state.web_config


def is_authenticated(request: Request) -> bool:
    """True when no password is configured or the session passed the login form."""
    web_config = get_web_config(request)
    if not web_config or not web_config.password:
        return True
    return bool(request.session.get("authenticated"))
