"""
Pytest configuration and fixtures
"""
from unittest.mock import Mock

import pytest

from clinic_portal import api_client
from clinic_portal import config
from clinic_portal import session


@pytest.fixture(autouse=True)
def clean_session(tmp_path, monkeypatch):
    """Each test starts logged out, with the session file under tmp_path."""
    monkeypatch.setattr(config, "SESSION_FILE", tmp_path / "session.json")
    monkeypatch.setattr(config, "PERSIST_SESSION", True)
    for k in session._KEYS:
        session._state[k] = None
    yield
    for k in session._KEYS:
        session._state[k] = None


def make_response(payload, status=200):
    r = Mock()
    r.ok = 200 <= status < 400
    r.status_code = status
    r.json.return_value = payload
    return r


@pytest.fixture
def fake_http(monkeypatch):
    """Replace the shared requests.Session transport; set `.return_value` or `.side_effect`."""
    request = Mock(return_value=make_response({"success": True, "message": "", "data": None}))
    monkeypatch.setattr(api_client._session, "request", request)
    return request
