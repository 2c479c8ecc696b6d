import json
import logging
from typing import Any, Dict, List, Optional

import requests

from clinic_portal import session
from clinic_portal.config import API_BASE_URL, TIMEOUT, HEADERS_JSON

_logger = logging.getLogger(__name__)

_session = requests.Session()
_session.headers.update(HEADERS_JSON)


class ApiError(Exception):
    """Backend answered with success == false, or could not be reached."""

    def __init__(self, message: str, error: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.error = error
        self.status = status


def _url(path: str) -> str:
    return f"{API_BASE_URL}/{path.strip('/')}"


def _clean(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {k: v for k, v in (params or {}).items() if v is not None and v != ""}


def _auth_headers() -> Dict[str, str]:
    token = session.get_token()
    return {"Authorization": f"Bearer {token}"} if token else {}


# ======================= basic HTTP wrappers =======================
def request(method: str, path: str, *,
            params: Optional[Dict[str, Any]] = None,
            body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Send one request and return the backend envelope
    {"success", "message", "data", "error"}. Never raises.
    """
    try:
        r = _session.request(
            method, _url(path),
            params=_clean(params) or None,
            data=json.dumps(body) if body is not None else None,
            headers=_auth_headers(),
            timeout=TIMEOUT,
        )
        payload = r.json()
    except (requests.RequestException, ValueError) as e:
        _logger.warning("%s %s failed: %s", method, path, e)
        return {"success": False, "message": "Network error", "error": str(e)}

    if not r.ok:
        detail = payload if isinstance(payload, dict) else {}
        _logger.info("%s %s -> HTTP %s", method, path, r.status_code)
        return {
            "success": False,
            "message": detail.get("message") or "An error occurred",
            "error": detail.get("error") or f"HTTP {r.status_code}",
            "status": r.status_code,
        }
    if not isinstance(payload, dict):
        return {"success": True, "message": "", "data": payload}
    return payload


def _unwrap(res: Dict[str, Any]) -> Any:
    if not res.get("success"):
        raise ApiError(res.get("message") or "An error occurred", res.get("error"), res.get("status"))
    return res.get("data")


def get(path: str, params: Optional[Dict[str, Any]] = None) -> Any:
    return _unwrap(request("GET", path, params=params))


def post(path: str, body: Dict[str, Any]) -> Any:
    return _unwrap(request("POST", path, body=body))


def put(path: str, body: Dict[str, Any]) -> Any:
    return _unwrap(request("PUT", path, body=body))


def delete(path: str) -> Any:
    return _unwrap(request("DELETE", path))


# ============================== auth ==============================
def login(ten_dang_nhap: str, mat_khau: str) -> Dict[str, Any]:
    """Returns {"token", "user"}."""
    return post("/auth/login", {"ten_dang_nhap": ten_dang_nhap, "mat_khau": mat_khau})


def register(user_data: Dict[str, Any]) -> Dict[str, Any]:
    return post("/auth/register", user_data)


def forgot_password(email: str) -> Any:
    return post("/auth/forgot-password", {"email": email})


def reset_password(email: str, reset_code: str, new_password: str) -> Any:
    return post("/auth/reset-password",
                {"email": email, "reset_code": reset_code, "new_password": new_password})


# ============================== users ==============================
def get_profile() -> Dict[str, Any]:
    return get("/users/profile")


def update_profile(profile: Dict[str, Any]) -> Dict[str, Any]:
    return put("/users/profile", profile)


def change_password(current_password: str, new_password: str) -> Any:
    return put("/users/password",
               {"current_password": current_password, "new_password": new_password})


# =========================== appointments ===========================
def get_appointments(status: Optional[str] = None) -> List[Dict[str, Any]]:
    return get("/appointments", {"status": status}) or []


def get_appointment(appointment_id: str) -> Dict[str, Any]:
    return get(f"/appointments/{appointment_id}")


def create_appointment(data: Dict[str, Any]) -> Dict[str, Any]:
    """Returns {"appointment_id"}."""
    return post("/appointments", data)


def update_appointment(appointment_id: str, data: Dict[str, Any]) -> Any:
    return put(f"/appointments/{appointment_id}", data)


def cancel_appointment(appointment_id: str) -> Any:
    return delete(f"/appointments/{appointment_id}")


# ========================== medical records ==========================
def get_medical_records(ma_customer: Optional[str] = None) -> List[Dict[str, Any]]:
    return get("/medical-records", {"ma_customer": ma_customer}) or []


def get_medical_record(record_id: str) -> Dict[str, Any]:
    return get(f"/medical-records/{record_id}")


def create_medical_record(data: Dict[str, Any]) -> Dict[str, Any]:
    return post("/medical-records", data)


def update_medical_record(record_id: str, data: Dict[str, Any]) -> Any:
    return put(f"/medical-records/{record_id}", data)


# =========================== prescriptions ===========================
def get_prescriptions(ma_ho_so: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
    return get("/prescriptions", {"ma_ho_so": ma_ho_so, "status": status}) or []


def get_prescription(prescription_id: str) -> Dict[str, Any]:
    return get(f"/prescriptions/{prescription_id}")


def create_prescription(data: Dict[str, Any]) -> Dict[str, Any]:
    return post("/prescriptions", data)


def update_prescription(prescription_id: str, data: Dict[str, Any]) -> Any:
    return put(f"/prescriptions/{prescription_id}", data)


def get_medications(query: Optional[str] = None) -> List[Dict[str, Any]]:
    return get("/medications", {"q": query}) or []


# ============================= lab tests =============================
def get_lab_tests(ma_ho_so: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
    return get("/lab-tests", {"ma_ho_so": ma_ho_so, "status": status}) or []


def get_lab_test(lab_test_id: str) -> Dict[str, Any]:
    return get(f"/lab-tests/{lab_test_id}")


def create_lab_order(data: Dict[str, Any]) -> Dict[str, Any]:
    return post("/lab-tests", data)


def update_lab_test(lab_test_id: str, data: Dict[str, Any]) -> Any:
    return put(f"/lab-tests/{lab_test_id}", data)


def delete_lab_test(lab_test_id: str) -> Any:
    return delete(f"/lab-tests/{lab_test_id}")


def get_lab_test_types() -> List[str]:
    return get("/lab-test-types") or []


# ============================== clinics ==============================
def get_clinics() -> List[Dict[str, Any]]:
    return get("/clinics") or []


def get_clinic(clinic_id: str) -> Dict[str, Any]:
    return get(f"/clinics/{clinic_id}")


def get_clinic_doctors(clinic_id: str, specialty: Optional[str] = None) -> Any:
    """Either {"all_doctors", "previously_visited", "other_doctors"} or a bare list."""
    return get(f"/clinics/{clinic_id}/doctors", {"chuyen_khoa": specialty})


def get_specialties() -> List[str]:
    return get("/clinics/specialties") or []


def get_clinic_schedules(clinic_id: str, doctor_id: str, date: str) -> Dict[str, Any]:
    """Returns {"work_schedule", "available_slots", "booked_times"}."""
    return get(f"/clinics/{clinic_id}/schedules", {"doctor_id": doctor_id, "date": date}) or {}


# ============================= schedules =============================
def get_schedules(doctor_id: Optional[str] = None, clinic_id: Optional[str] = None,
                  date_from: Optional[str] = None, date_to: Optional[str] = None) -> List[Dict[str, Any]]:
    return get("/schedules", {"doctor_id": doctor_id, "clinic_id": clinic_id,
                              "date_from": date_from, "date_to": date_to}) or []


def get_schedule(schedule_id: str) -> Dict[str, Any]:
    return get(f"/schedules/{schedule_id}")


def create_schedule(data: Dict[str, Any]) -> Dict[str, Any]:
    return post("/schedules", data)


def update_schedule(schedule_id: str, data: Dict[str, Any]) -> Any:
    return put(f"/schedules/{schedule_id}", data)


def delete_schedule(schedule_id: str) -> Any:
    return delete(f"/schedules/{schedule_id}")


# ============================= customers =============================
def get_customers(search: Optional[str] = None) -> List[Dict[str, Any]]:
    return get("/customers", {"search": search}) or []


def get_customer(customer_id: str) -> Dict[str, Any]:
    return get(f"/customers/{customer_id}")


def create_customer(data: Dict[str, Any]) -> Dict[str, Any]:
    """Returns {"user_id"}."""
    return post("/customers", data)


# ============================== payments ==============================
def get_payments(page: int = 1, limit: int = 10, from_date: Optional[str] = None,
                 to_date: Optional[str] = None, status: Optional[str] = None) -> Any:
    """Either a bare list or {"payments", "pagination"}."""
    return get("/payments", {"page": page, "limit": limit, "from_date": from_date,
                             "to_date": to_date, "status": status})


def get_payment_summary(from_date: Optional[str] = None, to_date: Optional[str] = None) -> Dict[str, Any]:
    return get("/payments/summary", {"from_date": from_date, "to_date": to_date}) or {}


def create_payment(data: Dict[str, Any]) -> Dict[str, Any]:
    return post("/payments", data)
