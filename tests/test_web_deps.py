"""Tests for web/deps.py: dependency lookup from app.state."""

from types import SimpleNamespace
from unittest.mock import MagicMock

from config import WebConfig
from web.deps import get_nocodb, get_web_config, is_authenticated


def _make_request(state_attrs=None, session=None):
    """Build a fake Request with app.state and session."""
    state = SimpleNamespace(**(state_attrs or {}))
    app = SimpleNamespace(state=state)
    req = SimpleNamespace(app=app, session=session or {})
    return req


class TestGetNocoDB:
    def test_returns_client_from_state(self):
        client = MagicMock()
        req = _make_request({"nocodb": client})
        assert get_nocodb(req) is client


class TestConfigDeps:
    def test_get_web_config(self):
        cfg = WebConfig(password="x")
        req = _make_request({"web_config": cfg})
        assert get_web_config(req) is cfg


class TestIsAuthenticated:
    def test_no_password_is_open(self):
        req = _make_request({"web_config": WebConfig(password="")})
        assert is_authenticated(req) is True

    def test_password_requires_session_flag(self):
        req = _make_request({"web_config": WebConfig(password="pw")})
        assert is_authenticated(req) is False

    def test_authenticated_session(self):
        req = _make_request({"web_config": WebConfig(password="pw")}, session={"authenticated": True})
        assert is_authenticated(req) is True
