import logging
import math
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from clinic_portal import api_client as api
from clinic_portal import config
from clinic_portal.api_client import ApiError
from clinic_portal.formatting import date_part, format_vnd, parse_datetime
from clinic_portal.validators import ValidationError, validate_customer_form

_logger = logging.getLogger(__name__)

NO_DATA = "no data found"
ALL = "all"
NO_DOCTORS = "no-doctors"

# ----------------------------- helpers -----------------------------
def _nz(x: Any) -> str:
    if x is None:
        return NO_DATA
    s = str(x).strip()
    return s if s else NO_DATA


def _rows(records: Iterable[Dict[str, Any]], fields: Iterable[str]) -> List[Tuple]:
    fields = list(fields)
    return [tuple(_nz(r.get(f)) for f in fields) for r in records]


def _contains(term: str, *values: Optional[str]) -> bool:
    t = (term or "").lower()
    return any(t in (v or "").lower() for v in values)


def _is_set(value: Optional[str]) -> bool:
    return bool(value) and value != ALL


def _require(form: Dict[str, Any], fields: Iterable[str], message: str):
    for f in fields:
        v = form.get(f)
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValidationError(message)


def _today() -> str:
    return date.today().isoformat()


# ===================================================================
#                         CLINICS & DOCTORS
# ===================================================================
DEFAULT_CLINICS = [
    {"ma_phong_kham": "PK001", "ten_phong_kham": "Downtown Clinic"},
    {"ma_phong_kham": "PK002", "ten_phong_kham": "Westside Clinic"},
    {"ma_phong_kham": "PK003", "ten_phong_kham": "Eastside Clinic"},
]


def clinic_view() -> List[Dict[str, Any]]:
    return api.get_clinics()


def clinics_or_default() -> List[Dict[str, Any]]:
    try:
        clinics = api.get_clinics()
    except ApiError as e:
        _logger.warning("Failed to load clinics: %s", e)
        clinics = []
    return clinics or list(DEFAULT_CLINICS)


def specialty_view() -> List[str]:
    return api.get_specialties()


def load_doctors(clinic_id: str, specialty: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
    """Doctors of one clinic, split into previously visited / other for the booking form."""
    empty = {"all_doctors": [], "previously_visited": [], "other_doctors": []}
    if not clinic_id:
        return empty
    data = api.get_clinic_doctors(clinic_id, specialty if _is_set(specialty) else None)
    if isinstance(data, dict) and "all_doctors" in data:
        return {
            "all_doctors": data.get("all_doctors") or [],
            "previously_visited": data.get("previously_visited") or [],
            "other_doctors": data.get("other_doctors") or [],
        }
    if isinstance(data, list):
        # older backends answer with a bare list
        return {"all_doctors": data, "previously_visited": [], "other_doctors": list(data)}
    return empty


def doctor_id(doctor: Dict[str, Any]) -> str:
    return doctor.get("userID") or doctor.get("ma_user") or ""


def all_doctors() -> List[Dict[str, Any]]:
    """Doctors of every clinic, first occurrence wins."""
    out: List[Dict[str, Any]] = []
    seen = set()
    for clinic in api.get_clinics():
        try:
            doctors = load_doctors(clinic.get("ma_phong_kham"))["all_doctors"]
        except ApiError as e:
            _logger.warning("Skipping doctors of clinic %s: %s", clinic.get("ma_phong_kham"), e)
            continue
        for d in doctors:
            did = doctor_id(d)
            if did in seen:
                continue
            seen.add(did)
            out.append(d)
    return out


def available_slots(clinic_id: str, doctor: str, day: str) -> List[str]:
    if not clinic_id or not doctor or doctor == NO_DOCTORS or not day:
        return []
    return api.get_clinic_schedules(clinic_id, doctor, day).get("available_slots") or []


# ===================================================================
#                            APPOINTMENTS
# ===================================================================
APPOINTMENT_STATUSES = ("SCHEDULED", "CONFIRMED", "COMPLETED", "CANCELLED", "NO_SHOW")
RESCHEDULE_TIMES = ("09:00", "10:00", "11:00", "14:00", "15:00", "16:00")
APPOINTMENT_FIELDS = ("ma_lich_kham", "ngay_gio_kham", "ten_khach_hang", "ten_bac_si",
                      "ten_phong_kham", "trang_thai", "ghi_chu")


def appointment_view(status: Optional[str] = None) -> List[Dict[str, Any]]:
    return api.get_appointments(status if _is_set(status) else None)


def appointment_rows(appointments: Iterable[Dict[str, Any]]) -> List[Tuple]:
    return _rows(appointments, APPOINTMENT_FIELDS)


def book_appointment(clinic_id: str, doctor: str, day: str, time: str, notes: str = "") -> Dict[str, Any]:
    """Customer self-booking."""
    if not clinic_id or not doctor or doctor == NO_DOCTORS or not day or not time:
        raise ValidationError("Please fill in all required fields")
    return api.create_appointment({
        "ma_bac_si": doctor,
        "ma_phong_kham": clinic_id,
        "ngay_gio_kham": f"{day} {time}:00",
        "ghi_chu": notes or None,
    })


def book_for_customer(customer_id: str, doctor: str, day: str, time: str,
                      clinic_id: Optional[str] = None) -> Dict[str, Any]:
    """Receptionist booking on behalf of a walk-in or phone customer."""
    clinic_id = clinic_id or config.DEFAULT_CLINIC_ID
    if not customer_id or not doctor or not day or not time or not clinic_id:
        raise ValidationError("Please fill in all fields")
    return api.create_appointment({
        "ma_bac_si": doctor,
        "ma_phong_kham": clinic_id,
        "ngay_gio_kham": f"{day}T{time}:00",
        "ghi_chu": f"Booked by receptionist for customer {customer_id}",
    })


def split_upcoming_past(appointments: Iterable[Dict[str, Any]],
                        now: Optional[datetime] = None) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    upcoming, past = [], []
    for a in appointments:
        when = parse_datetime(a.get("ngay_gio_kham"))
        cancelled = (a.get("trang_thai") or "").lower() == "cancelled"
        if when is not None and when >= now and not cancelled:
            upcoming.append(a)
        else:
            past.append(a)
    return upcoming, past


def cancel_appointment(appointment_id: str, reason: str):
    if not appointment_id or not (reason or "").strip():
        raise ValidationError("Please give a reason for cancelling")
    api.cancel_appointment(appointment_id)


def reschedule_appointment(appointment_id: str, new_date: str, new_time: str, reason: str = ""):
    if not appointment_id or not new_date or not new_time:
        raise ValidationError("Please choose a new date and time")
    api.update_appointment(appointment_id, {
        "ngay_gio_kham": f"{new_date} {new_time}:00",
        "ghi_chu": reason or None,
    })


def filter_appointments(appointments: Iterable[Dict[str, Any]], search: str = "", day: str = "",
                        status: str = ALL, doctor: str = ALL, clinic: str = ALL) -> List[Dict[str, Any]]:
    out = []
    for a in appointments:
        if search and not _contains(search, a.get("ten_khach_hang"), a.get("ten_bac_si"), a.get("ma_lich_kham")):
            continue
        if day:
            when = parse_datetime(a.get("ngay_gio_kham"))
            if when is None or when.date().isoformat() != date_part(day):
                continue
        if _is_set(status) and a.get("trang_thai") != status:
            continue
        if _is_set(doctor) and a.get("ma_bac_si") != doctor:
            continue
        if _is_set(clinic) and a.get("ma_phong_kham") != clinic:
            continue
        out.append(a)
    return out


def confirm_appointment(appointment_id: str):
    api.update_appointment(appointment_id, {"trang_thai": "CONFIRMED"})


def mark_cancelled(appointment_id: str):
    api.update_appointment(appointment_id, {"trang_thai": "CANCELLED"})


def edit_form(appointment: Dict[str, Any]) -> Dict[str, str]:
    when = parse_datetime(appointment.get("ngay_gio_kham"))
    return {
        "ngay_gio_kham": when.strftime("%Y-%m-%dT%H:%M") if when else "",
        "trang_thai": appointment.get("trang_thai") or "",
        "ghi_chu": appointment.get("ghi_chu") or "",
    }


def save_appointment_edit(appointment_id: str, form: Dict[str, str]):
    if not appointment_id:
        raise ValidationError("No appointment selected")
    _require(form, ("ngay_gio_kham", "trang_thai"), "Date/time and status are required")
    if form["trang_thai"] not in APPOINTMENT_STATUSES:
        raise ValidationError(f"Unknown status {form['trang_thai']}")
    api.update_appointment(appointment_id, {
        "ngay_gio_kham": form["ngay_gio_kham"],
        "trang_thai": form["trang_thai"],
        "ghi_chu": form.get("ghi_chu", ""),
    })


# ===================================================================
#                          MEDICAL RECORDS
# ===================================================================
COMMON_DIAGNOSES = [
    {"code": "J06.9", "name": "Upper Respiratory Tract Infection"},
    {"code": "E11.9", "name": "Type 2 Diabetes Mellitus"},
    {"code": "I10", "name": "Essential Hypertension"},
    {"code": "M79.3", "name": "Panniculitis"},
    {"code": "K21.9", "name": "Gastro-oesophageal reflux disease"},
]
RECORD_FIELDS = ("ma_ho_so", "ten_khach_hang", "ngay_kham", "trieu_chung", "chan_doan",
                 "ma_icd10", "ngay_tai_kham")


def record_view(customer_id: Optional[str] = None) -> List[Dict[str, Any]]:
    return api.get_medical_records(customer_id)


def record_rows(records: Iterable[Dict[str, Any]]) -> List[Tuple]:
    return _rows(({**r, "ngay_kham": date_part(r.get("ngay_kham")),
                   "ngay_tai_kham": date_part(r.get("ngay_tai_kham"))} for r in records), RECORD_FIELDS)


def patients_from_appointments(appointments: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    patients: Dict[str, Dict[str, str]] = {}
    for a in appointments:
        if not a.get("ten_khach_hang"):
            continue
        patients.setdefault(a.get("ma_customer"), {
            "ma_customer": a.get("ma_customer"),
            "ten_khach_hang": a["ten_khach_hang"],
        })
    return list(patients.values())


def new_record_form(today: Optional[str] = None) -> Dict[str, str]:
    return {
        "ma_customer": "", "ten_khach_hang": "", "ngay_kham": today or _today(),
        "trieu_chung": "", "chan_doan": "", "ma_icd10": "", "huong_dan_dieu_tri": "", "ngay_tai_kham": "",
    }


def record_form(record: Dict[str, Any]) -> Dict[str, str]:
    form = new_record_form()
    for k in form:
        if record.get(k):
            form[k] = record[k]
    form["ngay_kham"] = date_part(record.get("ngay_kham")) or _today()
    form["ngay_tai_kham"] = date_part(record.get("ngay_tai_kham"))
    return form


def apply_diagnosis(form: Dict[str, str], code: str) -> Dict[str, str]:
    for d in COMMON_DIAGNOSES:
        if d["code"] == code:
            form["chan_doan"] = d["name"]
            form["ma_icd10"] = d["code"]
            break
    return form


def save_record(form: Dict[str, str], record_id: Optional[str] = None,
                doctor_id: Optional[str] = None) -> Any:
    """Create a record, or update `record_id` when given."""
    _require(form, ("ma_customer", "trieu_chung", "chan_doan"),
             "Please fill in required fields: Patient, Symptoms, and Diagnosis")
    body: Dict[str, Any] = {
        "ma_customer": form["ma_customer"],
        "ma_bac_si": doctor_id or "",
        "ma_phong_kham": config.DEFAULT_CLINIC_ID,
        "ngay_kham": form.get("ngay_kham") or _today(),
        "trieu_chung": form["trieu_chung"],
        "chan_doan": form["chan_doan"],
        "huong_dan_dieu_tri": form.get("huong_dan_dieu_tri", ""),
        "ma_icd10": form.get("ma_icd10", ""),
    }
    if form.get("ngay_tai_kham"):
        body["ngay_tai_kham"] = form["ngay_tai_kham"]
    if record_id:
        return api.update_medical_record(record_id, body)
    return api.create_medical_record(body)


# ===================================================================
#                           PRESCRIPTIONS
# ===================================================================
COMMON_DOSAGES = ("1x daily", "2x daily", "3x daily", "4x daily", "PRN (as needed)",
                  "Every 6 hours", "Every 8 hours")
PRESCRIPTION_FIELDS = ("ma_don_thuoc", "ma_ho_so", "ten_khach_hang", "ngay_ke_don", "thuoc", "ghi_chu")


def prescription_view(record_id: Optional[str] = None) -> List[Dict[str, Any]]:
    return api.get_prescriptions(record_id)


def prescription_rows(prescriptions: Iterable[Dict[str, Any]]) -> List[Tuple]:
    def _flat(p):
        meds = ", ".join(f"{m.get('ten_thuoc')} x{m.get('so_luong')}" for m in p.get("medications") or [])
        return {**p, "ngay_ke_don": date_part(p.get("ngay_ke_don")), "thuoc": meds}
    return _rows((_flat(p) for p in prescriptions), PRESCRIPTION_FIELDS)


def medication_view(query: Optional[str] = None) -> List[Dict[str, Any]]:
    return api.get_medications(query)


def patients_from_records(records: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    patients: Dict[str, Dict[str, str]] = {}
    for r in records:
        patients.setdefault(r.get("ma_customer"), {
            "ma_customer": r.get("ma_customer"),
            "ho_ten": r.get("ten_khach_hang") or "Unknown Patient",
            "ma_ho_so": r.get("ma_ho_so"),
        })
    return list(patients.values())


def new_prescription_draft(record_id: str = "") -> Dict[str, Any]:
    return {"ma_ho_so": record_id, "medications": [], "ghi_chu": ""}


def prescription_draft(prescription: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "ma_ho_so": prescription.get("ma_ho_so") or "",
        "medications": [dict(m) for m in prescription.get("medications") or []],
        "ghi_chu": prescription.get("ghi_chu") or "",
    }


_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def _quantity(value: Any) -> int:
    """Leading integer of `value`; anything unparseable or below 1 becomes 1."""
    if isinstance(value, bool):
        return 1
    if isinstance(value, int):
        n = value
    else:
        m = _LEADING_INT.match(str(value or ""))
        n = int(m.group(1)) if m else 1
    return n if n >= 1 else 1


def add_medication(draft: Dict[str, Any], medication: Dict[str, Any]) -> Dict[str, Any]:
    _require(medication, ("ma_thuoc", "ten_thuoc", "cach_dung"), "Medication, name and usage are required")
    qty = _quantity(medication.get("so_luong"))
    draft["medications"].append({
        "ma_thuoc": medication["ma_thuoc"],
        "ten_thuoc": medication["ten_thuoc"],
        "so_luong": qty,
        "cach_dung": medication["cach_dung"],
        "ghi_chu": medication.get("ghi_chu") or "",
    })
    return draft


def remove_medication(draft: Dict[str, Any], ma_thuoc: str) -> Dict[str, Any]:
    draft["medications"] = [m for m in draft["medications"] if m.get("ma_thuoc") != ma_thuoc]
    return draft


def save_prescription(draft: Dict[str, Any], prescription_id: Optional[str] = None) -> Any:
    if not draft.get("ma_ho_so") or not draft.get("medications"):
        raise ValidationError("Choose a medical record and add at least one medication")
    body = {"ma_ho_so": draft["ma_ho_so"], "medications": draft["medications"],
            "ghi_chu": draft.get("ghi_chu", "")}
    if prescription_id:
        return api.update_prescription(prescription_id, body)
    return api.create_prescription(body)


def filter_prescriptions(prescriptions: Iterable[Dict[str, Any]], term: str) -> List[Dict[str, Any]]:
    return [p for p in prescriptions if _contains(term, p.get("ten_khach_hang"), p.get("ma_don_thuoc"))]


# ===================================================================
#                             LAB TESTS
# ===================================================================
DEFAULT_LAB_TEST_TYPES = (
    "Complete Blood Count", "Basic Metabolic Panel", "Hemoglobin A1c", "Lipid Panel",
    "Liver Function Tests", "Thyroid Function", "Troponin I", "CK-MB", "Blood Culture",
    "Urine Culture", "C-Reactive Protein", "ESR", "Prothrombin Time",
)
LAB_TEST_STATUSES = ("pending", "collected", "processing", "completed", "cancelled")
LAB_TEST_FIELDS = ("ma_xet_nghiem", "ma_ho_so", "ten_khach_hang", "loai_xet_nghiem",
                   "ngay_xet_nghiem", "status", "ket_qua")


def lab_test_view(record_id: Optional[str] = None, status: Optional[str] = None) -> List[Dict[str, Any]]:
    return api.get_lab_tests(record_id, status if _is_set(status) else None)


def lab_test_rows(lab_tests: Iterable[Dict[str, Any]]) -> List[Tuple]:
    return _rows(({**t, "ngay_xet_nghiem": date_part(t.get("ngay_xet_nghiem"))} for t in lab_tests),
                 LAB_TEST_FIELDS)


def lab_test_detail(lab_test_id: str) -> Dict[str, Any]:
    return api.get_lab_test(lab_test_id)


def lab_test_types() -> List[str]:
    try:
        types = api.get_lab_test_types()
    except ApiError as e:
        _logger.warning("Failed to load lab test types: %s", e)
        types = []
    return list(types) or list(DEFAULT_LAB_TEST_TYPES)


def new_lab_test_form(today: Optional[str] = None) -> Dict[str, str]:
    return {"ma_ho_so": "", "loai_xet_nghiem": "", "ngay_xet_nghiem": today or _today(),
            "ket_qua": "", "ghi_chu": "", "status": "pending"}


def lab_test_form(lab_test: Dict[str, Any]) -> Dict[str, str]:
    return {
        "ma_ho_so": lab_test.get("ma_ho_so") or "",
        "loai_xet_nghiem": lab_test.get("loai_xet_nghiem") or "",
        "ngay_xet_nghiem": date_part(lab_test.get("ngay_xet_nghiem")) or _today(),
        "ket_qua": lab_test.get("ket_qua") or "",
        "ghi_chu": lab_test.get("ghi_chu") or "",
        "status": lab_test.get("status") or "pending",
    }


def save_lab_test(form: Dict[str, str], lab_test_id: Optional[str] = None) -> Any:
    _require(form, ("ma_ho_so", "loai_xet_nghiem"), "Choose a medical record and a test type")
    if lab_test_id:
        return api.update_lab_test(lab_test_id, {
            "ket_qua": form.get("ket_qua"),
            "ghi_chu": form.get("ghi_chu"),
            "loai_xet_nghiem": form["loai_xet_nghiem"],
            "ngay_xet_nghiem": form.get("ngay_xet_nghiem"),
        })
    return api.create_lab_order({
        "ma_ho_so": form["ma_ho_so"],
        "loai_xet_nghiem": form["loai_xet_nghiem"],
        "ngay_xet_nghiem": form.get("ngay_xet_nghiem") or None,
        "ghi_chu": form.get("ghi_chu") or None,
    })


def delete_lab_test(lab_test_id: str):
    if not lab_test_id:
        raise ValidationError("lab test id is required")
    api.delete_lab_test(lab_test_id)


def filter_lab_tests(lab_tests: Iterable[Dict[str, Any]], term: str) -> List[Dict[str, Any]]:
    return [t for t in lab_tests
            if _contains(term, t.get("ten_khach_hang"), t.get("ma_xet_nghiem"), t.get("loai_xet_nghiem"))]


def filter_lab_results(lab_tests: Iterable[Dict[str, Any]], term: str) -> List[Dict[str, Any]]:
    return [t for t in lab_tests
            if _contains(term, t.get("loai_xet_nghiem"), t.get("ma_xet_nghiem"), t.get("ket_qua"))]


# ===================================================================
#                             SCHEDULES
# ===================================================================
TIME_SLOT_OPTIONS = ("09:00", "09:30", "10:00", "10:30", "11:00", "11:30",
                     "14:00", "14:30", "15:00", "15:30", "16:00", "16:30", "17:00")
SCHEDULE_STATUSES = ("active", "inactive", "cancelled")
SCHEDULE_FIELDS = ("ma_lich_lam_viec", "ngay_lam_viec", "ma_phong_kham", "gio_bat_dau", "gio_ket_thuc", "status")


def schedule_view(doctor: Optional[str] = None, clinic_id: Optional[str] = None,
                  date_from: Optional[str] = None, date_to: Optional[str] = None) -> List[Dict[str, Any]]:
    return api.get_schedules(doctor, clinic_id, date_from, date_to)


def schedule_rows(schedules: Iterable[Dict[str, Any]]) -> List[Tuple]:
    return _rows(({**s, "ngay_lam_viec": date_part(s.get("ngay_lam_viec"))} for s in schedules), SCHEDULE_FIELDS)


def schedule_detail(schedule_id: str) -> Dict[str, Any]:
    if not schedule_id:
        raise ValidationError("schedule id is required")
    return api.get_schedule(schedule_id)


def week_start(today: Optional[date] = None) -> str:
    today = today or date.today()
    return (today - timedelta(days=today.weekday())).isoformat()


def group_by_date(schedules: Iterable[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for s in schedules:
        grouped.setdefault(date_part(s.get("ngay_lam_viec")), []).append(s)
    return grouped


def new_schedule_form(doctor: str = "", today: Optional[str] = None) -> Dict[str, str]:
    return {"ma_bac_si": doctor, "ma_phong_kham": "", "ngay_lam_viec": today or _today(),
            "gio_bat_dau": "09:00", "gio_ket_thuc": "17:00", "status": "active"}


def schedule_form(schedule: Dict[str, Any]) -> Dict[str, str]:
    return {
        "ma_bac_si": schedule.get("ma_bac_si") or "",
        "ma_phong_kham": schedule.get("ma_phong_kham") or "",
        "ngay_lam_viec": date_part(schedule.get("ngay_lam_viec")) or _today(),
        "gio_bat_dau": schedule.get("gio_bat_dau") or "09:00",
        "gio_ket_thuc": schedule.get("gio_ket_thuc") or "17:00",
        "status": schedule.get("status") or "active",
    }


def save_schedule(form: Dict[str, str], schedule_id: Optional[str] = None) -> Any:
    _require(form, ("ma_bac_si", "ma_phong_kham", "ngay_lam_viec"), "Doctor, clinic and date are required")
    # compare HH:MM only, backend times can carry seconds
    if (form.get("gio_bat_dau") or "")[:5] >= (form.get("gio_ket_thuc") or "")[:5]:
        raise ValidationError("End time must be after start time")
    body = {k: form.get(k) for k in ("ma_bac_si", "ma_phong_kham", "ngay_lam_viec",
                                     "gio_bat_dau", "gio_ket_thuc", "status")}
    if schedule_id:
        return api.update_schedule(schedule_id, body)
    return api.create_schedule(body)


def delete_schedule(schedule_id: str):
    if not schedule_id:
        raise ValidationError("schedule id is required")
    api.delete_schedule(schedule_id)


# ===================================================================
#                             CUSTOMERS
# ===================================================================
CUSTOMER_FIELDS = ("user_id", "ho_ten", "ten_dang_nhap", "so_dien_thoai", "email", "ngay_sinh", "ma_bao_hiem")


def customer_view(search: Optional[str] = None) -> List[Dict[str, Any]]:
    return api.get_customers(search or None)


def customer_rows(customers: Iterable[Dict[str, Any]]) -> List[Tuple]:
    return _rows(({**c, "ngay_sinh": date_part(c.get("ngay_sinh"))} for c in customers), CUSTOMER_FIELDS)


def filter_customers(customers: Iterable[Dict[str, Any]], term: str) -> List[Dict[str, Any]]:
    return [c for c in customers if _contains(term, c.get("ho_ten"), c.get("user_id"))]


def save_customer(form: Dict[str, str], mode: str = "create") -> Dict[str, Any]:
    validate_customer_form(form, mode)
    if mode != "create":
        raise NotImplementedError("The backend has no customer update endpoint yet")
    return api.create_customer({
        "ho_ten": form["ho_ten"].strip(),
        "ten_dang_nhap": form["ten_dang_nhap"].strip(),
        "mat_khau": form.get("mat_khau") or "",
        "so_dien_thoai": form["so_dien_thoai"].strip(),
        "email": form["email"].strip(),
        "ngay_sinh": form.get("ngay_sinh") or "",
        "gioi_tinh": form.get("gioi_tinh") or "",
        "dia_chi": (form.get("dia_chi") or "").strip(),
        "ma_bao_hiem": (form.get("ma_bao_hiem") or "").strip(),
    })


# ===================================================================
#                              PAYMENTS
# ===================================================================
PAYMENT_METHODS = ("Tiền mặt", "Thẻ ATM", "Chuyển khoản", "Ví điện tử")
PAYMENT_STATUSES = ("COMPLETED", "PENDING", "FAILED")
PAYMENT_FIELDS = ("ma_thanh_toan", "ma_lich_kham", "ten_benh_nhan", "tong_tien",
                  "phuong_thuc_thanh_toan", "trang_thai", "ngay_thanh_toan")
SUMMARY_KEYS = ("tong_doanh_thu", "so_giao_dich", "tien_mat", "the_ngan_hang")


def payment_view(page: int = 1, limit: Optional[int] = None, date_from: str = "", date_to: str = "",
                 status: str = ALL) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
    """One page of payments plus {"page", "limit", "total", "total_pages"}."""
    limit = limit or config.PAYMENTS_PAGE_SIZE
    data = api.get_payments(page, limit, date_from or None, date_to or None,
                            status if _is_set(status) else None)
    if isinstance(data, dict) and "payments" in data and "pagination" in data:
        pagination = {"page": page, "limit": limit, "total": 0, "total_pages": 0}
        pagination.update(data["pagination"] or {})
        return data["payments"] or [], pagination
    payments = data if isinstance(data, list) else []
    return payments, {"page": page, "limit": limit, "total": len(payments), "total_pages": 1}


def payment_rows(payments: Iterable[Dict[str, Any]]) -> List[Tuple]:
    return _rows(({**p, "tong_tien": format_vnd(p.get("tong_tien"))} for p in payments), PAYMENT_FIELDS)


def page_window(page: int, total_pages: int, width: int = 5) -> List[int]:
    if total_pages <= width:
        return list(range(1, total_pages + 1))
    half = width // 2
    if page <= half + 1:
        return list(range(1, width + 1))
    if page >= total_pages - half:
        return list(range(total_pages - width + 1, total_pages + 1))
    return list(range(page - half, page - half + width))


def payment_summary(date_from: str = "", date_to: str = "") -> Dict[str, float]:
    data = api.get_payment_summary(date_from or None, date_to or None)
    return {k: data.get(k) or 0 for k in SUMMARY_KEYS}


def filter_payments(payments: Iterable[Dict[str, Any]], term: str) -> List[Dict[str, Any]]:
    return [p for p in payments
            if _contains(term, p.get("ten_benh_nhan"), p.get("ma_thanh_toan"), p.get("ma_lich_kham"))]


def create_payment(appointment_id: str, amount: str, method: str = PAYMENT_METHODS[0]) -> Any:
    if not appointment_id or amount in (None, ""):
        raise ValidationError("Please fill in all required fields")
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise ValidationError("Amount must be a number")
    if not math.isfinite(value) or value <= 0:
        raise ValidationError("Amount must be greater than zero")
    if method not in PAYMENT_METHODS:
        raise ValidationError(f"Unknown payment method {method}")
    return api.create_payment({
        "ma_lich_kham": appointment_id,
        "tong_tien": value,
        "phuong_thuc_thanh_toan": method,
    })
