"""
Sample datasets behind the overview dashboards (doctor, accountant,
manager, executive). The backend has no endpoints for these yet, so the
screens read the tables below and the helpers do the arithmetic.
"""
import csv
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

_logger = logging.getLogger(__name__)

# ===================================================================
#                               DOCTOR
# ===================================================================
TODAY_SCHEDULE = [
    {"time": "09:00", "patient": "John Smith", "type": "Checkup", "status": "confirmed"},
    {"time": "10:00", "patient": "Mary Johnson", "type": "Follow-up", "status": "confirmed"},
    {"time": "11:00", "patient": "David Wilson", "type": "Consultation", "status": "pending"},
    {"time": "14:00", "patient": "Sarah Brown", "type": "Treatment", "status": "confirmed"},
    {"time": "15:00", "patient": "Mike Davis", "type": "Emergency", "status": "urgent"},
    {"time": "16:00", "patient": "Lisa Garcia", "type": "Checkup", "status": "confirmed"},
]

PATIENT_RECORDS = [
    {"id": "P001", "name": "John Smith", "last_visit": "2024-01-15",
     "diagnosis": "Hypertension (I10)", "prescription": "Lisinopril 10mg daily",
     "notes": "Blood pressure controlled, continue medication"},
    {"id": "P002", "name": "Mary Johnson", "last_visit": "2024-01-12",
     "diagnosis": "Type 2 Diabetes (E11.9)", "prescription": "Metformin 500mg twice daily",
     "notes": "HbA1c improved, dietary counseling provided"},
    {"id": "P003", "name": "David Wilson", "last_visit": "2024-01-10",
     "diagnosis": "Acute Bronchitis (J20.9)", "prescription": "Albuterol inhaler as needed",
     "notes": "Symptoms resolving, follow up in 1 week"},
]


def search_patient_records(term: str, records: Optional[List[Dict]] = None) -> List[Dict]:
    t = (term or "").lower()
    records = PATIENT_RECORDS if records is None else records
    return [r for r in records if t in r["name"].lower() or t in r["id"].lower()]


def has_schedule_conflicts(schedule: Optional[Iterable[Dict]] = None) -> bool:
    schedule = TODAY_SCHEDULE if schedule is None else schedule
    return any(slot.get("status") == "urgent" for slot in schedule)


# ===================================================================
#                             ACCOUNTANT
# ===================================================================
PAYROLL_PERIODS = ("weekly", "monthly")

STAFF_PAYROLL = [
    {"id": "E001", "name": "Dr. Smith", "role": "Doctor", "base_salary": 8000, "bonus": 1200, "deductions": 800},
    {"id": "E002", "name": "Dr. Johnson", "role": "Doctor", "base_salary": 7500, "bonus": 1000, "deductions": 750},
    {"id": "E003", "name": "Sarah Wilson", "role": "Receptionist", "base_salary": 3000, "bonus": 200, "deductions": 300},
    {"id": "E004", "name": "Mike Brown", "role": "Nurse", "base_salary": 4000, "bonus": 300, "deductions": 400},
    {"id": "E005", "name": "Lisa Garcia", "role": "Technician", "base_salary": 3500, "bonus": 250, "deductions": 350},
]

PAYROLL_HEADERS = ("Employee ID", "Name", "Role", "Base Salary", "Bonus", "Deductions", "Net Salary")


def net_salary(staff: Dict) -> float:
    return staff["base_salary"] + staff["bonus"] - staff["deductions"]


def payroll_summary(staff: Optional[List[Dict]] = None) -> Dict[str, float]:
    staff = STAFF_PAYROLL if staff is None else staff
    return {
        "staff_count": len(staff),
        "total_payroll": sum(net_salary(s) for s in staff),
        "total_bonuses": sum(s["bonus"] for s in staff),
        "total_deductions": sum(s["deductions"] for s in staff),
    }


def payroll_rows(staff: Optional[List[Dict]] = None) -> List[tuple]:
    staff = STAFF_PAYROLL if staff is None else staff
    return [(s["id"], s["name"], s["role"], s["base_salary"], s["bonus"], s["deductions"], net_salary(s))
            for s in staff]


def export_payroll_csv(path, staff: Optional[List[Dict]] = None, period: str = "monthly") -> Path:
    if period not in PAYROLL_PERIODS:
        raise ValueError(f"unknown payroll period: {period}")
    path = Path(path)
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["Period", period])
        w.writerow(PAYROLL_HEADERS)
        w.writerows(payroll_rows(staff))
        w.writerow(["Total", "", "", "", "", "", payroll_summary(staff)["total_payroll"]])
    _logger.info("Exported %s payroll to %s", period, path)
    return path


# ===================================================================
#                               MANAGER
# ===================================================================
CLINICS = [
    {"id": "clinic1", "name": "Downtown Clinic"},
    {"id": "clinic2", "name": "Westside Clinic"},
    {"id": "clinic3", "name": "Eastside Clinic"},
    {"id": "clinic4", "name": "Northside Clinic"},
    {"id": "clinic5", "name": "Southside Clinic"},
]

TODAY_APPOINTMENTS = {
    "clinic1": [
        {"time": "09:00", "doctor": "Dr. Smith", "patient": "John Doe", "status": "confirmed"},
        {"time": "10:00", "doctor": "Dr. Johnson", "patient": "Mary Wilson", "status": "confirmed"},
        {"time": "11:00", "doctor": "Dr. Smith", "patient": "David Brown", "status": "pending"},
        {"time": "14:00", "doctor": "Dr. Williams", "patient": "Sarah Davis", "status": "confirmed"},
        {"time": "15:00", "doctor": "Dr. Johnson", "patient": "Mike Garcia", "status": "cancelled"},
    ],
}

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")

DOCTOR_SCHEDULES = [
    {"doctor": "Dr. Smith", "monday": "Downtown", "tuesday": "Westside", "wednesday": "Downtown",
     "thursday": "Eastside", "friday": "Downtown", "auto_assigned": True, "conflicts": False},
    {"doctor": "Dr. Johnson", "monday": "Westside", "tuesday": "Downtown", "wednesday": "Northside",
     "thursday": "Westside", "friday": "Southside", "auto_assigned": True, "conflicts": True},
    {"doctor": "Dr. Williams", "monday": "Eastside", "tuesday": "Northside", "wednesday": "Southside",
     "thursday": "Downtown", "friday": "Eastside", "auto_assigned": False, "conflicts": False},
]


def clinic_name(clinic_id: str) -> str:
    for c in CLINICS:
        if c["id"] == clinic_id:
            return c["name"]
    return "Unknown Clinic"


def appointments_for(clinic_id: str) -> List[Dict]:
    return list(TODAY_APPOINTMENTS.get(clinic_id, []))


def doctors_with_conflicts() -> List[str]:
    return [s["doctor"] for s in DOCTOR_SCHEDULES if s["conflicts"]]


# ===================================================================
#                              EXECUTIVE
# ===================================================================
PERFORMANCE_DATA = {
    "weekly": {"total_appointments": 1250, "total_revenue": 125000,
               "doctor_utilization": 85, "patient_satisfaction": 4.6},
    "monthly": {"total_appointments": 5400, "total_revenue": 540000,
                "doctor_utilization": 88, "patient_satisfaction": 4.7},
    "quarterly": {"total_appointments": 16200, "total_revenue": 1620000,
                  "doctor_utilization": 87, "patient_satisfaction": 4.6},
}

CLINIC_PERFORMANCE = [
    {"name": "Downtown Clinic", "appointments": 1200, "revenue": 120000, "utilization": 92},
    {"name": "Westside Clinic", "appointments": 1100, "revenue": 110000, "utilization": 89},
    {"name": "Eastside Clinic", "appointments": 980, "revenue": 98000, "utilization": 85},
    {"name": "Northside Clinic", "appointments": 1050, "revenue": 105000, "utilization": 87},
    {"name": "Southside Clinic", "appointments": 1070, "revenue": 107000, "utilization": 88},
]


def performance_for(period: str) -> Dict:
    try:
        return dict(PERFORMANCE_DATA[period])
    except KeyError:
        raise ValueError(f"unknown report period: {period}") from None


def network_totals(clinics: Optional[List[Dict]] = None) -> Dict[str, float]:
    """Sums across clinics; utilization is the plain average."""
    clinics = CLINIC_PERFORMANCE if clinics is None else clinics
    if not clinics:
        return {"appointments": 0, "revenue": 0, "utilization": 0}
    return {
        "appointments": sum(c["appointments"] for c in clinics),
        "revenue": sum(c["revenue"] for c in clinics),
        "utilization": round(sum(c["utilization"] for c in clinics) / len(clinics), 1),
    }


def export_performance_csv(path, period: str = "monthly") -> Path:
    data = performance_for(period)
    path = Path(path)
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["Period", period])
        for key, value in data.items():
            w.writerow([key, value])
        w.writerow([])
        w.writerow(["Clinic", "Appointments", "Revenue", "Utilization %"])
        for c in CLINIC_PERFORMANCE:
            w.writerow([c["name"], c["appointments"], c["revenue"], c["utilization"]])
    _logger.info("Exported %s performance report to %s", period, path)
    return path
