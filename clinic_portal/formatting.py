from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Sequence, Tuple, Union

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

DateLike = Union[str, date, datetime, None]


def date_part(value: Optional[str]) -> str:
    """'2024-01-15T09:00:00Z' -> '2024-01-15'; blank stays blank."""
    if not value:
        return ""
    return value.split("T", 1)[0].split(" ", 1)[0]


def parse_datetime(value: DateLike) -> Optional[datetime]:
    """Backend timestamps come as ISO strings with 'T' or ' ' and maybe a trailing Z."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_date_time(value: DateLike) -> Tuple[str, str]:
    dt = parse_datetime(value)
    if dt is None:
        return "", ""
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%d/%m/%Y"), dt.strftime("%H:%M")


def format_date(value: DateLike) -> str:
    dt = parse_datetime(value)
    if dt is None:
        return ""
    return f"{MONTHS[dt.month - 1]} {dt.day}, {dt.year}"


def day_name(value: DateLike) -> str:
    dt = parse_datetime(value)
    return dt.strftime("%A") if dt else ""


def format_vnd(amount) -> str:
    try:
        n = round(float(amount or 0))
    except (TypeError, ValueError):
        n = 0
    sign = "-" if n < 0 else ""
    return f"{sign}{abs(n):,}".replace(",", ".") + " ₫"


def table_lines(headers: Sequence[str], rows: Iterable[Sequence]) -> List[str]:
    """Header, rule and one ' | '-joined line per row; identical rows all stay."""
    header_line = " | ".join(headers)
    lines = [header_line, "-" * len(header_line)]
    body = [" | ".join("" if x is None else str(x) for x in r) for r in rows]
    return lines + (body or ["No results"])
