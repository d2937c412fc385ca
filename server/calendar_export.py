# calendar_export.py
"""RFC 5545 rendering of calendar event descriptors (via icalendar)."""
from __future__ import annotations

import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from icalendar import Alarm, Calendar, Event

from config import CALENDAR_DESCRIPTION, CALENDAR_TIMEZONE
from logging_utils import get_logger
logger = get_logger("shiftintel.calendar_export")
from models import CalendarEventDescriptor

PRODID = "-//Shift-Intel//Work Shifts//EN"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


def calendar_filename(calendar_name: Optional[str]) -> str:
    """'Work Shifts' -> 'Work-Shifts.ics'"""
    stem = _UNSAFE_FILENAME_CHARS.sub("-", calendar_name or "work-shifts")
    return f"{stem}.ics"


def _event_uid(event: CalendarEventDescriptor) -> str:
    key = f"{event.start.isoformat()}|{event.end.isoformat()}|{event.summary}"
    return f"{uuid.uuid5(uuid.NAMESPACE_URL, key)}@shiftintel"


def _to_vevent(event: CalendarEventDescriptor, stamp: datetime) -> Event:
    vevent = Event()
    vevent.add("uid", _event_uid(event))
    vevent.add("dtstamp", stamp)
    vevent.add("dtstart", event.start)
    vevent.add("dtend", event.end)
    vevent.add("summary", event.summary)
    vevent.add("description", event.description)
    if event.location:
        vevent.add("location", event.location)
    if event.categories:
        vevent.add("categories", event.categories)
    vevent.add("transp", "OPAQUE")
    vevent.add("x-microsoft-cdo-busystatus", "BUSY")

    for reminder in event.reminders:
        alarm = Alarm()
        alarm.add("action", "DISPLAY")
        alarm.add("description", reminder.message)
        alarm.add("trigger", timedelta(seconds=-reminder.offset_seconds))
        vevent.add_component(alarm)

    return vevent


def render_calendar(
    events: Iterable[CalendarEventDescriptor],
    calendar_name: str = "Work Shifts",
    tz_name: str = CALENDAR_TIMEZONE,
    description: str = CALENDAR_DESCRIPTION,
) -> str:
    logger.start_timer("render_calendar")

    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", calendar_name)
    cal.add("x-wr-caldesc", description)
    cal.add("x-wr-timezone", tz_name)

    stamp = datetime.now(timezone.utc)
    count = 0
    for event in events:
        cal.add_component(_to_vevent(event, stamp))
        count += 1

    # one VTIMEZONE per TZID used by the events
    cal.add_missing_timezones()
    body = cal.to_ical().decode("utf-8")
    elapsed = logger.end_timer("render_calendar")
    logger.info(f"Rendered calendar '{calendar_name}' with {count} events in {elapsed:.3f}s")
    return body
