# time_utils.py
"""
Clock-time and date helpers for OCR'd schedules.

Times come in as "7:00 AM", "15:00", "8:00 בבוקר", "3:30 אחה״צ" and so on.
Everything here is permissive: noisy input degrades to a neutral value
instead of raising, except where a caller explicitly asks for strictness.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from patterns import patterns

# Localized period markers -> English
_LOCALIZED_PERIODS = (
    ("אחרי הצהריים", "PM"),
    ("לפני הצהריים", "AM"),
    ("אחה״צ", "PM"),
    ('אחה"צ', "PM"),
    ("בבוקר", "AM"),
)

TimeValue = Union[str, int, float]


def _infer_period(hour: int) -> Optional[str]:
    # 0-5 is ambiguous; treated as early morning
    if 6 <= hour <= 11:
        return "AM"
    if 12 <= hour <= 23:
        return "PM"
    if 0 <= hour <= 5:
        return "AM"
    return None


def normalize_period(text: str) -> str:
    """Replace localized period markers with AM/PM and add one when missing."""
    converted = text
    for marker, period in _LOCALIZED_PERIODS:
        converted = converted.replace(marker, period)

    if not patterns.PERIOD.search(converted):
        m = patterns.HOUR.search(converted)
        if m:
            period = _infer_period(int(m.group(1)))
            if period:
                converted = f"{converted.rstrip()} {period}"

    return converted.strip()


def try_parse_clock_time(text: object) -> Optional[float]:
    """Hour on a 24h scale (minutes as a fraction), or None when unreadable."""
    if not isinstance(text, str):
        return None
    m = patterns.CLOCK_PARTS.search(normalize_period(text))
    if not m:
        return None

    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        return None

    period = (m.group(3) or "").upper()
    if period == "PM" and hours < 12:
        hours += 12
    elif period == "AM" and hours == 12:
        hours = 0

    return hours + minutes / 60


def parse_clock_time(text: object) -> float:
    """Like try_parse_clock_time but falls back to 0 on unreadable input."""
    value = try_parse_clock_time(text)
    return 0.0 if value is None else value


def as_hour(value: TimeValue) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    return parse_clock_time(value)


def shift_duration_hours(start: TimeValue, end: TimeValue) -> float:
    """
    Hours between two clock times. An end at or before the start means the
    shift crosses midnight; equal times therefore count as a full 24h shift.
    """
    s, e = as_hour(start), as_hour(end)
    if e > s:
        return e - s
    return (24 - s) + e


def resolve_year(token: Optional[str], default_year: int) -> int:
    if not token:
        return default_year
    if len(token) == 2:
        return 2000 + int(token)
    if len(token) == 4:
        return int(token)
    raise ValueError(f"unsupported year token: {token!r}")


def build_iso_date(day: int, month: int, year: int) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_shift_date(value: object, default_year: Optional[int] = None) -> date:
    """
    Accepts a date, "YYYY-MM-DD", "MM/DD" or "MM/DD/YYYY".
    Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"not a date: {value!r}")

    text = value.strip()
    m = patterns.ISO_DATE.match(text)
    if m:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = patterns.SLASH_DATE.match(text)
    if m:
        year = resolve_year(m.group(3), default_year or date.today().year)
        return date(year, int(m.group(1)), int(m.group(2)))

    raise ValueError(f"unrecognised date format: {value!r}")
