from datetime import date, datetime, timezone

import pytest

from clinic_portal.formatting import (
    date_part,
    day_name,
    format_date,
    format_date_time,
    format_vnd,
    parse_datetime,
    table_lines,
)


@pytest.mark.parametrize("value,expected", [
    ("2024-01-15T09:00:00Z", "2024-01-15"),
    ("2024-01-15 09:00:00", "2024-01-15"),
    ("2024-01-15", "2024-01-15"),
    ("", ""),
    (None, ""),
])
def test_date_part(value, expected):
    assert date_part(value) == expected


def test_parse_datetime_variants():
    utc = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)
    assert parse_datetime("2024-01-15T09:30:00Z") == utc
    assert parse_datetime("2024-01-15 09:30:00") == utc
    assert parse_datetime(date(2024, 1, 15)) == datetime(2024, 1, 15, tzinfo=timezone.utc)
    assert parse_datetime("garbage") is None
    assert parse_datetime("") is None


def test_format_date_time_is_utc():
    assert format_date_time("2024-01-15T09:30:00Z") == ("15/01/2024", "09:30")
    assert format_date_time("2024-01-15T09:30:00+07:00") == ("15/01/2024", "02:30")
    assert format_date_time(None) == ("", "")


def test_format_date_and_day_name():
    assert format_date("2024-01-15") == "Jan 15, 2024"
    assert day_name("2024-01-15") == "Monday"
    assert format_date("nope") == ""


@pytest.mark.parametrize("amount,expected", [
    (1500000, "1.500.000 ₫"),
    ("250000", "250.000 ₫"),
    (999.6, "1.000 ₫"),
    (0, "0 ₫"),
    (None, "0 ₫"),
    (-20000, "-20.000 ₫"),
])
def test_format_vnd(amount, expected):
    assert format_vnd(amount) == expected


def test_table_lines_keep_identical_rows():
    lines = table_lines(["id", "name"], [("T1", "Paracetamol"), ("T1", "Paracetamol"), ("T2", None)])
    assert lines == ["id | name", "---------", "T1 | Paracetamol", "T1 | Paracetamol", "T2 | "]


def test_table_lines_empty():
    assert table_lines(["id"], []) == ["id", "--", "No results"]
