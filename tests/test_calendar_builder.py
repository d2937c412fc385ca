"""
Tests for calendar event descriptors and reminders.
"""

from datetime import datetime

import pytest

from calendar_builder import (
    DEFAULT_REMINDER,
    build_calendar_events,
    build_calendar_events_report,
    build_reminders,
    calculate_display_rate,
    render_template,
)
from models import InvalidShiftInput, ShiftType


class TestReminders:
    def test_default_when_nothing_requested(self):
        reminders = build_reminders(None)

        assert [r.offset_seconds for r in reminders] == [1800]
        assert reminders[0].message == DEFAULT_REMINDER.message

    def test_hour_and_day(self):
        reminders = build_reminders({"reminder1Hour": True, "reminder1Day": True})
        assert [r.offset_seconds for r in reminders] == [3600, 86400]

    @pytest.mark.parametrize(
        "value, unit, seconds, message",
        [
            (2, "hours", 7200, "Work shift in 2 hours / משמרת בעוד 2 שעות"),
            (1, "days", 86400, "Work shift in 1 day / משמרת בעוד 1 יום"),
            (15, "minutes", 900, "Work shift in 15 minutes / משמרת בעוד 15 דקות"),
            (15, "weeks", 900, "Work shift in 15 minutes / משמרת בעוד 15 דקות"),
        ],
    )
    def test_custom(self, value, unit, seconds, message):
        reminders = build_reminders(
            {"customReminderEnabled": True, "customReminderValue": value, "customReminderUnit": unit}
        )

        assert len(reminders) == 1
        assert reminders[0].offset_seconds == seconds
        assert reminders[0].message == message

    @pytest.mark.parametrize(
        "settings",
        [
            {"customReminderEnabled": False, "customReminderValue": 10},
            {"customReminderEnabled": True, "customReminderValue": 0},
            {"customReminderEnabled": True, "customReminderValue": -5},
            {"customReminderEnabled": True},
        ],
    )
    def test_unusable_custom_falls_back_to_default(self, settings):
        assert [r.offset_seconds for r in build_reminders(settings)] == [1800]


class TestDisplayRate:
    """Single-tier rate shown in the description"""

    @pytest.mark.parametrize(
        "shift_type, hours, expected",
        [
            (ShiftType.DAY, 8, 50),
            (ShiftType.DAY, 9, 62.5),
            (ShiftType.DAY, 11, 75),
            (ShiftType.NIGHT, 8, 50),
            (ShiftType.WEEKEND, 8, 75),
            (ShiftType.WEEKEND, 12, 100),
        ],
    )
    def test_rates(self, shift_type, hours, expected):
        assert calculate_display_rate(shift_type, hours, 50) == pytest.approx(expected)


class TestBuildEvents:
    def test_day_shift(self, make_shift):
        events = build_calendar_events([make_shift()])

        assert len(events) == 1
        event = events[0]
        assert event.start.replace(tzinfo=None) == datetime(2025, 8, 4, 7, 0)
        assert event.end.replace(tzinfo=None) == datetime(2025, 8, 4, 15, 0)
        assert str(event.start.tzinfo) == "Asia/Jerusalem"
        assert event.hours == pytest.approx(8)
        assert event.summary == "בוקר - Work Shift"
        assert event.description == "Work shift\nType: בוקר\nDuration: 8.0 hours\nRate: ₪50.00/hour"
        assert event.categories == ["Work", "Shift"]
        assert [r.offset_seconds for r in event.reminders] == [1800]

    def test_overnight_rolls_into_next_day(self, make_shift):
        event = build_calendar_events(
            [make_shift(start="11:00 PM", end="7:00 AM", shift_type=ShiftType.NIGHT)]
        )[0]

        assert event.start.replace(tzinfo=None) == datetime(2025, 8, 4, 23, 0)
        assert event.end.replace(tzinfo=None) == datetime(2025, 8, 5, 7, 0)
        assert event.hours == pytest.approx(8)
        assert event.summary == "לילה - Work Shift"

    def test_dst_night_counts_elapsed_hours(self, make_shift):
        """Israel springs forward early on 2025-03-28, so this night is 7h long."""
        event = build_calendar_events(
            [make_shift(date="2025-03-27", start="11:00 PM", end="7:00 AM", shift_type=ShiftType.NIGHT)]
        )[0]

        assert event.end.replace(tzinfo=None) == datetime(2025, 3, 28, 7, 0)
        assert event.hours == pytest.approx(7.0)
        assert "Duration: 7.0 hours" in event.description

    def test_weekend_long_shift_rate(self, make_shift):
        event = build_calendar_events(
            [make_shift(date="2025-08-09", start="7:00 AM", end="7:00 PM", shift_type=ShiftType.WEEKEND)]
        )[0]

        assert event.rate == pytest.approx(100)
        assert "Type: סוף שבוע" in event.description

    def test_month_day_date_format(self, make_shift):
        event = build_calendar_events([make_shift(date="08/04/2025")])[0]
        assert event.start.date().isoformat() == "2025-08-04"

    def test_templates_and_location(self, make_shift):
        options = {
            "eventDescription": "At [LOCATION]\\n[HOURS]h @ [RATE]",
            "summaryTemplate": "Shift ([SHIFT_TYPE])",
            "displayBaseRate": 40,
        }
        event = build_calendar_events([make_shift()], options)[0]

        assert event.description == "At Workplace\n8.0h @ 40.00"
        assert event.summary == "Shift (בוקר)"
        assert event.location == ""

        event = build_calendar_events([make_shift()], {**options, "location": "Haifa"})[0]
        assert event.description.startswith("At Haifa\n")
        assert event.location == "Haifa"

    def test_reminders_applied_to_every_event(self, make_shift):
        events = build_calendar_events(
            [make_shift(), make_shift(date="2025-08-05")],
            {"reminders": {"reminder1Hour": True}},
        )
        assert [[r.offset_seconds for r in e.reminders] for e in events] == [[3600], [3600]]

    def test_other_timezone(self, make_shift):
        event = build_calendar_events([make_shift()], {"timezone": "Europe/London"})[0]
        assert str(event.start.tzinfo) == "Europe/London"

    def test_unknown_timezone_rejected(self, make_shift):
        with pytest.raises(InvalidShiftInput):
            build_calendar_events([make_shift()], {"timezone": "Not/AZone"})

    def test_bad_shifts_reported_not_raised(self, make_shift):
        report = build_calendar_events_report(
            [
                make_shift(),
                {"date": "not-a-date", "startTime": "7:00 AM", "endTime": "3:00 PM"},
                {"date": "2025-08-04", "endTime": "3:00 PM"},
                {"date": "2025-08-04", "startTime": "??", "endTime": "3:00 PM"},
                {"date": "9999-12-31", "startTime": "11:00 PM", "endTime": "7:00 AM", "type": "night"},
            ]
        )

        assert len(report.events) == 1
        assert [s.index for s in report.skipped] == [1, 2, 3, 4]

    @pytest.mark.parametrize("bad", [None, "shifts", {"date": "2025-08-04"}])
    def test_non_list_raises(self, bad):
        with pytest.raises(InvalidShiftInput):
            build_calendar_events(bad)


class TestRenderTemplate:
    def test_placeholders(self):
        text = render_template("[SHIFT_TYPE] [HOURS] [RATE] [LOCATION]", "ערב", 7.5, 62.5, None)
        assert text == "ערב 7.5 62.50 Workplace"
