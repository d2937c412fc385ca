"""
Tests for ICS rendering; output is parsed back with icalendar.
"""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from icalendar import Calendar

from calendar_builder import build_calendar_events
from calendar_export import calendar_filename, render_calendar
from models import ShiftType


class TestCalendarFilename:
    def test_spaces(self):
        assert calendar_filename("Work Shifts") == "Work-Shifts.ics"

    def test_unsafe_characters(self):
        assert calendar_filename("Dana's shifts/Aug") == "Dana-s-shifts-Aug.ics"

    def test_missing_name(self):
        assert calendar_filename(None) == "work-shifts.ics"
        assert calendar_filename("") == "work-shifts.ics"


class TestRenderCalendar:
    def _render(self, make_shift, options=None):
        events = build_calendar_events(
            [
                make_shift(),
                make_shift(date="2025-08-05", start="11:00 PM", end="7:00 AM", shift_type=ShiftType.NIGHT),
            ],
            options,
        )
        return events, Calendar.from_ical(render_calendar(events, calendar_name="Dana"))

    def test_calendar_properties(self, make_shift):
        _, cal = self._render(make_shift)

        assert str(cal.get("version")) == "2.0"
        assert str(cal.get("method")) == "PUBLISH"
        assert str(cal.get("x-wr-calname")) == "Dana"
        assert str(cal.get("x-wr-timezone")) == "Asia/Jerusalem"

    def test_events_round_trip(self, make_shift):
        events, cal = self._render(make_shift)
        vevents = cal.walk("VEVENT")

        assert len(vevents) == 2
        assert str(vevents[0].get("summary")) == events[0].summary
        assert str(vevents[0].get("description")) == events[0].description
        assert vevents[1].decoded("dtstart") == datetime(2025, 8, 5, 23, 0, tzinfo=ZoneInfo("Asia/Jerusalem"))
        assert vevents[1].decoded("dtend") == datetime(2025, 8, 6, 7, 0, tzinfo=ZoneInfo("Asia/Jerusalem"))
        assert str(vevents[0].get("transp")) == "OPAQUE"

    def test_uids_unique_and_stable(self, make_shift):
        events, cal = self._render(make_shift)
        uids = [str(e.get("uid")) for e in cal.walk("VEVENT")]

        assert len(set(uids)) == 2
        again = Calendar.from_ical(render_calendar(events))
        assert [str(e.get("uid")) for e in again.walk("VEVENT")] == uids

    def test_default_alarm(self, make_shift):
        _, cal = self._render(make_shift)
        alarms = cal.walk("VEVENT")[0].walk("VALARM")

        assert len(alarms) == 1
        assert str(alarms[0].get("action")) == "DISPLAY"
        assert alarms[0].decoded("trigger") == timedelta(minutes=-30)

    def test_requested_alarms(self, make_shift):
        _, cal = self._render(make_shift, {"reminders": {"reminder1Hour": True, "reminder1Day": True}})
        triggers = [a.decoded("trigger") for a in cal.walk("VEVENT")[0].walk("VALARM")]
        assert triggers == [timedelta(hours=-1), timedelta(days=-1)]

    def test_location_only_when_set(self, make_shift):
        _, cal = self._render(make_shift)
        assert cal.walk("VEVENT")[0].get("location") is None

        _, cal = self._render(make_shift, {"location": "Haifa"})
        assert str(cal.walk("VEVENT")[0].get("location")) == "Haifa"

    def test_timezone_definition_included(self, make_shift):
        body = render_calendar(build_calendar_events([make_shift()]))

        assert "BEGIN:VTIMEZONE" in body
        assert "TZID:Asia/Jerusalem" in body
        timezones = Calendar.from_ical(body).walk("VTIMEZONE")
        assert [str(tz.get("tzid")) for tz in timezones] == ["Asia/Jerusalem"]

    def test_empty_calendar(self):
        cal = Calendar.from_ical(render_calendar([]))
        assert cal.walk("VEVENT") == []
