import pytest

from clinic_portal.validators import (
    ValidationError,
    is_valid_email,
    is_valid_vn_phone,
    password_strength,
    validate_customer_form,
    validate_password_change,
    validate_password_reset,
    validate_registration,
)


def _registration(**overrides):
    form = {"ho_ten": "Nguyễn Văn A", "ten_dang_nhap": "nva", "mat_khau": "secret1",
            "confirm_password": "secret1", "email": "", "so_dien_thoai": ""}
    form.update(overrides)
    return form


def test_valid_registration_passes():
    validate_registration(_registration(email="a@b.vn", so_dien_thoai="0912345678"))


@pytest.mark.parametrize("overrides,message", [
    ({"ho_ten": "  "}, "Full name is required"),
    ({"ten_dang_nhap": ""}, "Username is required"),
    ({"mat_khau": "12345", "confirm_password": "12345"}, "Password must be at least 6 characters long"),
    ({"confirm_password": "other1"}, "Passwords do not match"),
    ({"email": "not-an-email"}, "Please enter a valid email address"),
    ({"so_dien_thoai": "0212345678"}, "Please enter a valid Vietnamese phone number"),
])
def test_registration_errors(overrides, message):
    with pytest.raises(ValidationError, match=message):
        validate_registration(_registration(**overrides))


def test_validation_error_is_a_value_error():
    assert issubclass(ValidationError, ValueError)


@pytest.mark.parametrize("phone,ok", [
    ("0312345678", True),
    ("0912345678", True),
    ("0512345678", True),
    ("0112345678", False),
    ("091234567", False),
    ("+84912345678", False),
    ("0912345678\n", False),
    ("09" + "\u0661" * 8, False),
])
def test_vn_phone(phone, ok):
    assert is_valid_vn_phone(phone) is ok


def test_email():
    assert is_valid_email("dr.smith@clinic.vn")
    assert not is_valid_email("dr smith@clinic.vn")
    assert not is_valid_email("")
    assert not is_valid_email("a@b.vn\n")


def test_password_strength_flags():
    flags = password_strength("abc")
    assert flags == {"min_length": False, "has_upper": False, "has_lower": True,
                     "has_digit": False, "has_special": False, "is_valid": False}
    assert password_strength("Str0ng!pass")["is_valid"] is True


def test_password_change_rules():
    with pytest.raises(ValidationError, match="Current password is required"):
        validate_password_change("", "Str0ng!pass", "Str0ng!pass")
    with pytest.raises(ValidationError, match="does not meet security requirements"):
        validate_password_change("old", "weakpass", "weakpass")
    with pytest.raises(ValidationError, match="New passwords do not match"):
        validate_password_change("old", "Str0ng!pass", "Str0ng!pas")
    validate_password_change("old", "Str0ng!pass", "Str0ng!pass")


def test_password_reset_rules():
    with pytest.raises(ValidationError, match="Please fill in all fields"):
        validate_password_reset("", "secret1", "secret1")
    with pytest.raises(ValidationError, match="Passwords do not match"):
        validate_password_reset("123456", "secret1", "secret2")
    with pytest.raises(ValidationError, match="at least 6"):
        validate_password_reset("123456", "abc", "abc")


def test_customer_form_rules():
    form = {"ho_ten": "Trần B", "ten_dang_nhap": "tranb", "mat_khau": "123",
            "so_dien_thoai": "0901234567", "email": "b@clinic.vn"}
    with pytest.raises(ValidationError, match="at least 6"):
        validate_customer_form(form, "create")
    # password is not checked when editing
    validate_customer_form(form, "edit")

    with pytest.raises(ValidationError, match="Email is not valid"):
        validate_customer_form(dict(form, mat_khau="123456", email="nope"), "create")
    with pytest.raises(ValidationError, match="Phone number is required"):
        validate_customer_form(dict(form, mat_khau="123456", so_dien_thoai=" "), "create")
