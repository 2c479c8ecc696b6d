"""Form rules shared by the account, registration and customer screens."""
import re
from typing import Any, Dict

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
VN_PHONE_RE = re.compile(r"(0[35789])+[0-9]{8}")
SPECIAL_CHARS = set('!@#$%^&*(),.?":{}|<>')

MIN_PASSWORD_LENGTH = 6
STRONG_PASSWORD_LENGTH = 8


class ValidationError(ValueError):
    """A form rule failed; the message is shown to the user as-is."""


def _blank(value: Any) -> bool:
    return not (value or "").strip()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.fullmatch(email or ""))


def is_valid_vn_phone(phone: str) -> bool:
    return bool(VN_PHONE_RE.fullmatch(phone or ""))


def validate_registration(form: Dict[str, str]):
    if _blank(form.get("ho_ten")):
        raise ValidationError("Full name is required")
    if _blank(form.get("ten_dang_nhap")):
        raise ValidationError("Username is required")
    password = form.get("mat_khau") or ""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if password != (form.get("confirm_password") or ""):
        raise ValidationError("Passwords do not match")
    email = form.get("email") or ""
    if email and not is_valid_email(email):
        raise ValidationError("Please enter a valid email address")
    phone = form.get("so_dien_thoai") or ""
    if phone and not is_valid_vn_phone(phone):
        raise ValidationError("Please enter a valid Vietnamese phone number")


def password_strength(password: str) -> Dict[str, bool]:
    password = password or ""
    flags = {
        "min_length": len(password) >= STRONG_PASSWORD_LENGTH,
        "has_upper": any(c.isascii() and c.isupper() for c in password),
        "has_lower": any(c.isascii() and c.islower() for c in password),
        "has_digit": any(c.isdigit() for c in password),
        "has_special": any(c in SPECIAL_CHARS for c in password),
    }
    flags["is_valid"] = all(flags.values())
    return flags


def validate_password_change(current: str, new: str, confirm: str):
    if not current:
        raise ValidationError("Current password is required")
    if not password_strength(new)["is_valid"]:
        raise ValidationError("New password does not meet security requirements")
    if new != confirm:
        raise ValidationError("New passwords do not match")


def validate_password_reset(reset_code: str, new: str, confirm: str):
    if not reset_code or not new or not confirm:
        raise ValidationError("Please fill in all fields")
    if new != confirm:
        raise ValidationError("Passwords do not match")
    if len(new) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")


def validate_customer_form(form: Dict[str, str], mode: str = "create"):
    if _blank(form.get("ho_ten")):
        raise ValidationError("Full name is required")
    if _blank(form.get("ten_dang_nhap")):
        raise ValidationError("Username is required")
    if mode == "create" and len(form.get("mat_khau") or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if _blank(form.get("so_dien_thoai")):
        raise ValidationError("Phone number is required")
    if _blank(form.get("email")):
        raise ValidationError("Email is required")
    if not is_valid_email(form["email"].strip()):
        raise ValidationError("Email is not valid")
