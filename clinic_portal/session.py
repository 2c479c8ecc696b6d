import json
import logging
from typing import Any, Dict, Optional

from clinic_portal import config

_logger = logging.getLogger(__name__)

ROLE_DASHBOARDS = {
    "CUSTOMER": "customer",
    "DOCTOR": "doctor",
    "RECEPTIONIST": "receptionist",
    "ACCOUNTANT": "accountant",
    "CLINIC_MANAGER": "manager",
    "OPERATION_MANAGER": "executive",
}

ROLE_NAMES = {
    "customer": "Customer",
    "receptionist": "Receptionist",
    "doctor": "Doctor",
    "accountant": "Accountant",
    "manager": "Manager",
    "executive": "Executive",
}

_KEYS = ("token", "role", "email", "user_id", "username")
_state: Dict[str, Optional[str]] = dict.fromkeys(_KEYS)


def dashboard_for(backend_role: Optional[str]) -> str:
    return ROLE_DASHBOARDS.get((backend_role or "").upper(), "customer")


def role_display_name(role: Optional[str]) -> str:
    return ROLE_NAMES.get(role or "", role or "")


def start(token: str, user: Dict[str, Any], username: str) -> str:
    """Remember a successful login and return the dashboard to open."""
    _state["token"] = token
    _state["role"] = dashboard_for(user.get("role"))
    _state["email"] = user.get("email") or username
    _state["user_id"] = user.get("ma_user")
    _state["username"] = username
    save()
    return _state["role"]


def get_token() -> Optional[str]:
    return _state["token"]


def get_role() -> Optional[str]:
    return _state["role"]


def get_email() -> str:
    return _state["email"] or ""


def get_user_id() -> Optional[str]:
    return _state["user_id"]


def is_logged_in() -> bool:
    return bool(_state["token"] and _state["role"])


def require_role(role: str):
    if not is_logged_in() or _state["role"] != role:
        raise PermissionError(f"{role_display_name(role)} only page")


def clear():
    for k in _KEYS:
        _state[k] = None
    path = config.SESSION_FILE
    if path.exists():
        path.unlink()


# ---------- persistence (the desktop stand-in for browser storage) ----------
def save():
    if not config.PERSIST_SESSION:
        return
    path = config.SESSION_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(_state), encoding="utf-8")


def load() -> bool:
    """Restore a saved login. Returns True when a usable session was found."""
    if not config.PERSIST_SESSION:
        return False
    path = config.SESSION_FILE
    if not path.exists():
        return False
    try:
        saved = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        _logger.warning("Ignoring unreadable session file %s: %s", path, e)
        return False
    if not isinstance(saved, dict):
        return False
    for k in _KEYS:
        _state[k] = saved.get(k)
    return is_logged_in()
