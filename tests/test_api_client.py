"""
Tests for the REST wrapper
"""
import json

import pytest
import requests

from clinic_portal import api_client
from clinic_portal import config
from clinic_portal import session
from clinic_portal.api_client import ApiError

from conftest import make_response


def test_request_returns_envelope_and_sends_bearer_token(fake_http):
    session.start("tok-123", {"role": "CUSTOMER", "email": "a@b.vn"}, "alice")
    fake_http.return_value = make_response({"success": True, "message": "ok", "data": [{"ma_lich_kham": "LK1"}]})

    res = api_client.request("GET", "/appointments")

    assert res["success"] is True
    assert res["data"] == [{"ma_lich_kham": "LK1"}]
    args, kwargs = fake_http.call_args
    assert args == ("GET", f"{config.API_BASE_URL}/appointments")
    assert kwargs["headers"] == {"Authorization": "Bearer tok-123"}
    assert kwargs["timeout"] == config.TIMEOUT


def test_no_token_means_no_authorization_header(fake_http):
    api_client.request("GET", "/clinics")
    assert fake_http.call_args.kwargs["headers"] == {}


def test_http_error_without_message_uses_generic_text(fake_http):
    fake_http.return_value = make_response({}, status=404)

    res = api_client.request("GET", "/missing")

    assert res["success"] is False
    assert res["message"] == "An error occurred"
    assert res["error"] == "HTTP 404"
    assert res["status"] == 404


def test_http_error_keeps_backend_message(fake_http):
    fake_http.return_value = make_response({"success": False, "message": "Sai mật khẩu", "error": "AUTH"}, status=401)

    with pytest.raises(ApiError) as exc:
        api_client.get("/users/profile")

    assert exc.value.message == "Sai mật khẩu"
    assert exc.value.error == "AUTH"
    assert exc.value.status == 401


def test_transport_failure_is_network_error(fake_http):
    fake_http.side_effect = requests.ConnectionError("refused")

    res = api_client.request("GET", "/clinics")

    assert res == {"success": False, "message": "Network error", "error": "refused"}


def test_unparseable_body_is_network_error(fake_http):
    bad = make_response(None)
    bad.json.side_effect = ValueError("not json")
    fake_http.return_value = bad

    assert api_client.request("GET", "/clinics")["message"] == "Network error"


def test_non_dict_success_body_is_wrapped(fake_http):
    fake_http.return_value = make_response(["Cardiology", "Dermatology"])

    assert api_client.get_specialties() == ["Cardiology", "Dermatology"]


def test_empty_query_params_are_dropped(fake_http):
    fake_http.return_value = make_response({"success": True, "data": None})

    assert api_client.get_appointments() == []
    assert fake_http.call_args.kwargs["params"] is None

    api_client.get_schedules(doctor_id="BS1", date_from="2024-01-15", date_to="")
    assert fake_http.call_args.kwargs["params"] == {"doctor_id": "BS1", "date_from": "2024-01-15"}


def test_login_posts_credentials_as_json(fake_http):
    fake_http.return_value = make_response({"success": True, "data": {"token": "t", "user": {}}})

    assert api_client.login("alice", "secret")["token"] == "t"
    args, kwargs = fake_http.call_args
    assert args[0] == "POST"
    assert args[1].endswith("/auth/login")
    assert json.loads(kwargs["data"]) == {"ten_dang_nhap": "alice", "mat_khau": "secret"}


def test_delete_sends_no_body(fake_http):
    api_client.cancel_appointment("LK9")
    args, kwargs = fake_http.call_args
    assert args == ("DELETE", f"{config.API_BASE_URL}/appointments/LK9")
    assert kwargs["data"] is None


def test_medication_search_uses_q_param(fake_http):
    api_client.get_medications("para")
    assert fake_http.call_args.kwargs["params"] == {"q": "para"}


def test_clinic_doctors_pass_specialty(fake_http):
    api_client.get_clinic_doctors("PK001", "Tim mạch")
    args, kwargs = fake_http.call_args
    assert args[1].endswith("/clinics/PK001/doctors")
    assert kwargs["params"] == {"chuyen_khoa": "Tim mạch"}


def test_payments_pass_paging_and_filters(fake_http):
    api_client.get_payments(2, 10, from_date="2024-01-01", status="COMPLETED")
    assert fake_http.call_args.kwargs["params"] == {
        "page": 2, "limit": 10, "from_date": "2024-01-01", "status": "COMPLETED"}
