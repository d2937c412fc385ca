"""
Tests for day / night / weekend classification.

Reference week (2025): Mon 4/8 ... Fri 8/8, Sat 9/8, Sun 10/8.
"""

import pytest

from classifier import classify_shift, classify_time_span, is_weekend_date
from models import ShiftType


class TestClassifyShift:
    """Weekend beats night, night stays night, everything else is day"""

    @pytest.mark.parametrize("kind", ["night", "morning", "evening", "day", ShiftType.NIGHT])
    def test_weekend_overrides_kind(self, kind):
        assert classify_shift(kind, "2025-08-08") is ShiftType.WEEKEND
        assert classify_shift(kind, "2025-08-09") is ShiftType.WEEKEND

    def test_night_on_weekday(self):
        assert classify_shift("night", "2025-08-04") is ShiftType.NIGHT

    @pytest.mark.parametrize("kind", ["morning", "evening", "day", "swing"])
    def test_other_kinds_are_day(self, kind):
        assert classify_shift(kind, "2025-08-04") is ShiftType.DAY

    def test_configurable_weekend(self):
        """Saturday + Sunday weekend instead of Friday + Saturday."""
        assert classify_shift("morning", "2025-08-10", weekend_days=(5, 6)) is ShiftType.WEEKEND
        assert classify_shift("night", "2025-08-08", weekend_days=(5, 6)) is ShiftType.NIGHT

    def test_unreadable_date_raises(self):
        with pytest.raises(ValueError):
            classify_shift("night", "someday")


class TestClassifyTimeSpan:
    """Night is decided by the start hour"""

    @pytest.mark.parametrize("start", ["11:00 PM", "6:00 PM", "5:00 AM", "22:00"])
    def test_night_starts(self, start):
        assert classify_time_span(start, "7:00 AM", "2025-08-04") is ShiftType.NIGHT

    @pytest.mark.parametrize("start", ["7:00 AM", "6:00 AM", "3:00 PM"])
    def test_day_starts(self, start):
        assert classify_time_span(start, "11:00 PM", "2025-08-04") is ShiftType.DAY

    def test_weekend_wins(self):
        assert classify_time_span("11:00 PM", "7:00 AM", "2025-08-08") is ShiftType.WEEKEND


class TestIsWeekendDate:
    def test_default_weekend(self):
        assert is_weekend_date("2025-08-09")
        assert not is_weekend_date("2025-08-10")
