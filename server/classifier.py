# classifier.py
"""
Shift classification.

A date on a configured weekend day always wins over time of day: a night
shift on Friday is a weekend shift. Otherwise night stays night and every
other kind (morning, evening, day) is paid as a day shift.
"""
from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Union

from config import WEEKEND_DAYS
from models import ShiftType
from time_utils import TimeValue, as_hour, parse_shift_date

DateLike = Union[str, date]

NIGHT_STARTS_AT = 18
NIGHT_ENDS_AT = 6


def is_weekend_date(
    value: DateLike,
    weekend_days: Optional[Iterable[int]] = None,
    default_year: Optional[int] = None,
) -> bool:
    days = tuple(WEEKEND_DAYS if weekend_days is None else weekend_days)
    return parse_shift_date(value, default_year).weekday() in days


def classify_shift(
    shift_type: Union[str, ShiftType],
    value: DateLike,
    weekend_days: Optional[Iterable[int]] = None,
) -> ShiftType:
    """Collapse a shift kind + date into day / night / weekend."""
    if is_weekend_date(value, weekend_days):
        return ShiftType.WEEKEND
    if shift_type == ShiftType.NIGHT:
        return ShiftType.NIGHT
    return ShiftType.DAY


def classify_time_span(
    start: TimeValue,
    end: TimeValue,
    value: DateLike,
    weekend_days: Optional[Iterable[int]] = None,
) -> ShiftType:
    # only the start decides night vs day; end is accepted for symmetry
    s = as_hour(start)
    kind = ShiftType.NIGHT if s >= NIGHT_STARTS_AT or s < NIGHT_ENDS_AT else ShiftType.DAY
    return classify_shift(kind, value, weekend_days)
