from unittest.mock import Mock

import pytest

from clinic_portal import login_backend
from clinic_portal import session
from clinic_portal.api_client import ApiError
from clinic_portal.validators import ValidationError


def test_login_starts_session(monkeypatch):
    monkeypatch.setattr(login_backend.api, "login", Mock(return_value={
        "token": "tok", "user": {"role": "DOCTOR", "email": "d@clinic.vn", "ma_user": "BS01"}}))

    assert login_backend.login(" doc ", "pw") == "doctor"
    login_backend.api.login.assert_called_once_with("doc", "pw")
    assert session.get_token() == "tok"
    assert session.get_user_id() == "BS01"


def test_login_requires_both_fields():
    with pytest.raises(ValidationError):
        login_backend.login("", "pw")
    with pytest.raises(ValidationError):
        login_backend.login("doc", "")


def test_login_failure_message(monkeypatch):
    monkeypatch.setattr(login_backend.api, "login", Mock(side_effect=ApiError("", "AUTH", 401)))

    with pytest.raises(ApiError, match="Invalid email or password") as exc:
        login_backend.login("doc", "bad")
    assert exc.value.status == 401
    assert not session.is_logged_in()


def test_login_without_token_is_rejected(monkeypatch):
    monkeypatch.setattr(login_backend.api, "login", Mock(return_value={"user": {}}))
    with pytest.raises(ApiError):
        login_backend.login("doc", "pw")


def test_logout_clears_session():
    session.start("tok", {"role": "CUSTOMER"}, "c")
    login_backend.logout()
    assert not session.is_logged_in()


def test_register_sends_optional_fields_only_when_given(monkeypatch):
    register = Mock(return_value={"user_id": "U1"})
    monkeypatch.setattr(login_backend.api, "register", register)

    login_backend.register({"ho_ten": " An ", "ten_dang_nhap": "an", "mat_khau": "secret1",
                            "confirm_password": "secret1", "email": "", "so_dien_thoai": "0912345678"})

    register.assert_called_once_with({"ho_ten": "An", "ten_dang_nhap": "an", "mat_khau": "secret1",
                                      "so_dien_thoai": "0912345678"})


def test_register_validates_before_calling_backend(monkeypatch):
    register = Mock()
    monkeypatch.setattr(login_backend.api, "register", register)
    with pytest.raises(ValidationError):
        login_backend.register({"ho_ten": "An", "ten_dang_nhap": "an", "mat_khau": "1",
                                "confirm_password": "1"})
    register.assert_not_called()


def test_forgot_and_reset_password(monkeypatch):
    forgot = Mock()
    reset = Mock()
    monkeypatch.setattr(login_backend.api, "forgot_password", forgot)
    monkeypatch.setattr(login_backend.api, "reset_password", reset)

    with pytest.raises(ValidationError):
        login_backend.forgot_password("  ")
    login_backend.forgot_password(" a@b.vn ")
    forgot.assert_called_once_with("a@b.vn")

    login_backend.reset_password("a@b.vn", "123456", "newpass", "newpass")
    reset.assert_called_once_with("a@b.vn", "123456", "newpass")


def test_change_password(monkeypatch):
    change = Mock()
    monkeypatch.setattr(login_backend.api, "change_password", change)
    login_backend.change_password("old", "Str0ng!pass", "Str0ng!pass")
    change.assert_called_once_with("old", "Str0ng!pass")


def test_load_profile_normalises_fields(monkeypatch):
    monkeypatch.setattr(login_backend.api, "get_profile", Mock(return_value={
        "ho_ten": "An", "email": None, "ngay_sinh": "1990-05-01T00:00:00Z", "ten_dang_nhap": "an",
        "vai_tro": "CUSTOMER"}))

    profile = login_backend.load_profile()

    assert profile["ngay_sinh"] == "1990-05-01"
    assert profile["email"] == ""
    assert profile["ten_dang_nhap"] == "an"
    assert "vai_tro" not in profile


def test_save_profile_never_sends_username(monkeypatch):
    update = Mock()
    monkeypatch.setattr(login_backend.api, "update_profile", update)

    login_backend.save_profile({"ho_ten": "An", "ten_dang_nhap": "an", "gioi_tinh": "Nữ"})

    sent = update.call_args.args[0]
    assert set(sent) == set(login_backend.PROFILE_FIELDS)
    assert sent["gioi_tinh"] == "Nữ"
    assert sent["email"] == ""
