import csv

import pytest

from clinic_portal import dashboards


def test_search_patient_records_by_name_or_id():
    assert [r["id"] for r in dashboards.search_patient_records("mary")] == ["P002"]
    assert [r["id"] for r in dashboards.search_patient_records("p003")] == ["P003"]
    assert len(dashboards.search_patient_records("")) == 3


def test_schedule_conflicts():
    assert dashboards.has_schedule_conflicts() is True
    assert dashboards.has_schedule_conflicts([{"status": "confirmed"}]) is False


def test_net_salary_and_summary():
    assert dashboards.net_salary(dashboards.STAFF_PAYROLL[0]) == 8400
    assert dashboards.payroll_summary() == {
        "staff_count": 5,
        "total_payroll": 26350,
        "total_bonuses": 2950,
        "total_deductions": 2600,
    }


def test_export_payroll_csv(tmp_path):
    path = dashboards.export_payroll_csv(tmp_path / "payroll.csv", period="weekly")

    with path.open(newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Period", "weekly"]
    assert rows[1][0] == "Employee ID"
    assert rows[2][:2] == ["E001", "Dr. Smith"]
    assert rows[-1][-1] == "26350"


def test_export_payroll_rejects_unknown_period(tmp_path):
    with pytest.raises(ValueError):
        dashboards.export_payroll_csv(tmp_path / "p.csv", period="yearly")


def test_manager_helpers():
    assert dashboards.clinic_name("clinic4") == "Northside Clinic"
    assert dashboards.clinic_name("clinic99") == "Unknown Clinic"
    assert len(dashboards.appointments_for("clinic1")) == 5
    assert dashboards.appointments_for("clinic2") == []
    assert dashboards.doctors_with_conflicts() == ["Dr. Johnson"]


def test_performance_for():
    assert dashboards.performance_for("quarterly")["total_appointments"] == 16200
    with pytest.raises(ValueError):
        dashboards.performance_for("daily")


def test_network_totals():
    assert dashboards.network_totals() == {"appointments": 5400, "revenue": 540000, "utilization": 88.2}
    assert dashboards.network_totals([]) == {"appointments": 0, "revenue": 0, "utilization": 0}


def test_export_performance_csv(tmp_path):
    path = dashboards.export_performance_csv(tmp_path / "perf.csv", "weekly")
    text = path.read_text(encoding="utf-8")
    assert "total_revenue,125000" in text
    assert "Southside Clinic,1070,107000,88" in text


def test_performance_for_returns_a_copy():
    data = dashboards.performance_for("weekly")
    data["total_revenue"] = 0
    assert dashboards.PERFORMANCE_DATA["weekly"]["total_revenue"] == 125000
