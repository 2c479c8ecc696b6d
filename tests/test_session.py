import json

import pytest

from clinic_portal import config
from clinic_portal import session


def test_start_maps_backend_role_to_dashboard():
    role = session.start("tok", {"role": "CLINIC_MANAGER", "email": "m@clinic.vn", "ma_user": "U7"}, "mgr")

    assert role == "manager"
    assert session.get_role() == "manager"
    assert session.get_email() == "m@clinic.vn"
    assert session.get_user_id() == "U7"
    assert session.is_logged_in()


@pytest.mark.parametrize("backend_role,dashboard", [
    ("CUSTOMER", "customer"),
    ("doctor", "doctor"),
    ("RECEPTIONIST", "receptionist"),
    ("ACCOUNTANT", "accountant"),
    ("OPERATION_MANAGER", "executive"),
    ("SOMETHING_NEW", "customer"),
    (None, "customer"),
])
def test_dashboard_for(backend_role, dashboard):
    assert session.dashboard_for(backend_role) == dashboard


def test_email_falls_back_to_username():
    session.start("tok", {"role": "CUSTOMER"}, "alice")
    assert session.get_email() == "alice"


def test_session_is_persisted_and_restored():
    session.start("tok", {"role": "DOCTOR", "email": "d@clinic.vn"}, "doc")
    saved = json.loads(config.SESSION_FILE.read_text(encoding="utf-8"))
    assert saved["token"] == "tok"

    for k in session._KEYS:
        session._state[k] = None
    assert not session.is_logged_in()

    assert session.load() is True
    assert session.get_role() == "doctor"
    assert session.get_token() == "tok"


def test_clear_forgets_login_and_removes_file():
    session.start("tok", {"role": "DOCTOR"}, "doc")
    session.clear()

    assert not session.is_logged_in()
    assert session.get_token() is None
    assert not config.SESSION_FILE.exists()


def test_load_ignores_corrupt_file():
    config.SESSION_FILE.write_text("{not json", encoding="utf-8")
    assert session.load() is False


def test_persistence_can_be_switched_off(monkeypatch):
    monkeypatch.setattr(config, "PERSIST_SESSION", False)
    session.start("tok", {"role": "DOCTOR"}, "doc")

    assert not config.SESSION_FILE.exists()
    assert session.load() is False


def test_require_role():
    with pytest.raises(PermissionError):
        session.require_role("doctor")

    session.start("tok", {"role": "RECEPTIONIST"}, "rec")
    session.require_role("receptionist")
    with pytest.raises(PermissionError, match="Doctor only page"):
        session.require_role("doctor")


def test_role_display_name():
    assert session.role_display_name("executive") == "Executive"
    assert session.role_display_name("unknown") == "unknown"
