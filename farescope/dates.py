"""Calendar helpers: month enumeration and weekend detection."""

import calendar
from datetime import date


def parse_date(value: str) -> date:
    """Parse a 'YYYY-MM-DD' string. Lanza ValueError si el formato es inválido."""
    return date.fromisoformat(value.strip())


def month_dates(month: str) -> list[date]:
    """Every calendar day of a 'YYYY-MM' month, in order.

    Ej: "2024-02" → 29 fechas (año bisiesto).
    """
    try:
        year_str, month_str = month.strip().split("-")
        year, month_num = int(year_str), int(month_str)
    except ValueError:
        raise ValueError(f"Invalid month '{month}', expected YYYY-MM") from None

    if not 1 <= month_num <= 12:
        raise ValueError(f"Invalid month '{month}', expected YYYY-MM")

    _, last_day = calendar.monthrange(year, month_num)
    return [date(year, month_num, day) for day in range(1, last_day + 1)]


def is_weekend(day: date) -> bool:
    """Saturday or Sunday."""
    return day.weekday() >= 5
