import logging
from typing import Dict

from clinic_portal import api_client as api
from clinic_portal import session
from clinic_portal.api_client import ApiError
from clinic_portal.formatting import date_part
from clinic_portal.validators import (
    ValidationError,
    validate_password_change,
    validate_password_reset,
    validate_registration,
)

_logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("ho_ten", "email", "so_dien_thoai", "ngay_sinh", "gioi_tinh", "dia_chi", "ma_bao_hiem")
GENDERS = ("Nam", "Nữ", "Khác")


# ---------- login / logout ----------
def login(username: str, password: str) -> str:
    """Authenticate against the backend and return the dashboard key to open."""
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("Enter your username and password")
    try:
        data = api.login(username, password)
    except ApiError as e:
        _logger.info("Login refused for %s: %s", username, e.error)
        raise ApiError(e.message or "Invalid email or password", e.error, e.status) from e
    if not data or not data.get("token"):
        raise ApiError("Invalid email or password")
    return session.start(data["token"], data.get("user") or {}, username)


def logout():
    session.clear()


# ---------- self-service account ----------
def register(form: Dict[str, str]):
    validate_registration(form)
    body = {
        "ho_ten": form["ho_ten"].strip(),
        "ten_dang_nhap": form["ten_dang_nhap"].strip(),
        "mat_khau": form["mat_khau"],
    }
    if form.get("email"):
        body["email"] = form["email"]
    if form.get("so_dien_thoai"):
        body["so_dien_thoai"] = form["so_dien_thoai"]
    return api.register(body)


def forgot_password(email: str):
    if not (email or "").strip():
        raise ValidationError("Please enter your email address")
    api.forgot_password(email.strip())


def reset_password(email: str, reset_code: str, new_password: str, confirm_password: str):
    validate_password_reset(reset_code, new_password, confirm_password)
    api.reset_password(email, reset_code, new_password)


def change_password(current: str, new: str, confirm: str):
    validate_password_change(current, new, confirm)
    api.change_password(current, new)


# ---------- profile ----------
def load_profile() -> Dict[str, str]:
    """Editable profile fields, blanks as '' and birth date cut to YYYY-MM-DD."""
    data = api.get_profile() or {}
    profile = {k: data.get(k) or "" for k in PROFILE_FIELDS}
    profile["ngay_sinh"] = date_part(profile["ngay_sinh"])
    profile["ten_dang_nhap"] = data.get("ten_dang_nhap") or ""
    return profile


def save_profile(profile: Dict[str, str]):
    # username is shown read-only and never sent back
    api.update_profile({k: profile.get(k, "") for k in PROFILE_FIELDS})
