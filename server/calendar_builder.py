# calendar_builder.py
"""
Turn shift records into calendar event descriptors.

Each event carries its own resolved start/end instants (overnight shifts
roll the end into the next day), a localized summary and description built
from templates, and the reminder set requested by the caller.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Mapping, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationError

from config import CALENDAR_TIMEZONE, DEFAULT_DAY_RATE, SHIFT_LEXICON_PATH
from lexicon import ShiftLexicon, load_lexicon
from logging_utils import log_event
from models import (
    CalendarBuildReport,
    CalendarEventDescriptor,
    CalendarOptions,
    InvalidShiftInput,
    Reminder,
    ReminderSettings,
    ShiftRecord,
    ShiftType,
    SkippedShift,
)
from time_utils import parse_shift_date, try_parse_clock_time

logger = logging.getLogger("shiftintel.calendar")

DEFAULT_DESCRIPTION_TEMPLATE = (
    "Work shift\\nType: [SHIFT_TYPE]\\nDuration: [HOURS] hours\\nRate: ₪[RATE]/hour"
)
DEFAULT_SUMMARY_TEMPLATE = "[SHIFT_TYPE] - Work Shift"
DEFAULT_LOCATION_LABEL = "Workplace"

DEFAULT_REMINDER = Reminder(
    offset_seconds=30 * 60,
    message="Work shift starts in 30 minutes / המשמרת מתחילה בעוד 30 דקות",
)

_UNIT_SECONDS = {"minutes": 60, "hours": 60 * 60, "days": 24 * 60 * 60}

# unit -> ((singular en, singular he), (plural en, plural he))
_UNIT_LABELS = {
    "minutes": (("minute", "דקה"), ("minutes", "דקות")),
    "hours": (("hour", "שעה"), ("hours", "שעות")),
    "days": (("day", "יום"), ("days", "ימים")),
}


def build_reminders(settings: Union[ReminderSettings, Mapping[str, Any], None]) -> List[Reminder]:
    if settings is None:
        settings = ReminderSettings()
    elif not isinstance(settings, ReminderSettings):
        settings = ReminderSettings.model_validate(settings)

    reminders: List[Reminder] = []

    if settings.reminder_1_hour:
        reminders.append(
            Reminder(
                offset_seconds=60 * 60,
                message="Work shift starts in 1 hour / המשמרת מתחילה בעוד שעה",
            )
        )

    if settings.reminder_1_day:
        reminders.append(
            Reminder(
                offset_seconds=24 * 60 * 60,
                message="Work shift tomorrow / משמרת מחר",
            )
        )

    value = settings.custom_reminder_value
    if settings.custom_reminder_enabled and value and value > 0:
        unit = settings.custom_reminder_unit if settings.custom_reminder_unit in _UNIT_SECONDS else "minutes"
        singular, plural = _UNIT_LABELS[unit]
        en_label, he_label = singular if value == 1 else plural
        reminders.append(
            Reminder(
                offset_seconds=value * _UNIT_SECONDS[unit],
                message=f"Work shift in {value} {en_label} / משמרת בעוד {value} {he_label}",
            )
        )

    if not reminders:
        reminders.append(DEFAULT_REMINDER.model_copy())

    return reminders


def calculate_display_rate(shift_type: Union[str, ShiftType], hours: float, base_rate: float) -> float:
    """
    Single-tier hourly rate shown in the event description.

    Presentation only: payroll amounts come from earnings.EarningsEngine,
    which bands each shift hour by hour. The two are kept apart so a
    change to one never alters the other.
    """
    if shift_type == ShiftType.WEEKEND:
        if hours > 10:
            return base_rate * 2.0
        return base_rate * 1.5

    if hours > 10:
        return base_rate * 1.5
    if hours > 8:
        return base_rate * 1.25
    return base_rate


def resolve_shift_instant(
    date_text: Union[str, date], time_text: str, tz: ZoneInfo, default_year: Optional[int] = None
) -> datetime:
    day = parse_shift_date(date_text, default_year)
    hour_value = try_parse_clock_time(time_text)
    if hour_value is None:
        raise ValueError(f"unreadable time: {time_text!r}")

    hours = int(hour_value)
    minutes = round((hour_value - hours) * 60)
    return datetime(day.year, day.month, day.day, hours, minutes, tzinfo=tz)


def render_template(template: str, label: str, hours: float, rate: float, location: Optional[str]) -> str:
    return (
        template.replace("[SHIFT_TYPE]", label)
        .replace("[HOURS]", f"{hours:.1f}")
        .replace("[RATE]", f"{rate:.2f}")
        .replace("[LOCATION]", location or DEFAULT_LOCATION_LABEL)
        .replace("\\n", "\n")
    )


class CalendarEventBuilder:
    def __init__(
        self,
        options: Union[CalendarOptions, Mapping[str, Any], None] = None,
        lexicon: Optional[ShiftLexicon] = None,
    ) -> None:
        if options is None:
            options = CalendarOptions()
        elif not isinstance(options, CalendarOptions):
            try:
                options = CalendarOptions.model_validate(options)
            except ValidationError as e:
                raise InvalidShiftInput(f"invalid calendar options: {e}") from e

        tz_name = options.timezone or CALENDAR_TIMEZONE
        try:
            self.tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise InvalidShiftInput(f"unknown timezone: {tz_name}") from e

        self.options = options
        self.lexicon = lexicon or load_lexicon(SHIFT_LEXICON_PATH)
        self.base_rate = options.display_base_rate or DEFAULT_DAY_RATE
        self.reminders = build_reminders(options.reminders)

    def build_event(self, shift: ShiftRecord) -> CalendarEventDescriptor:
        start = resolve_shift_instant(shift.date, shift.start_time, self.tz)
        end = resolve_shift_instant(shift.date, shift.end_time, self.tz)

        # overnight shift
        if end <= start:
            end += timedelta(days=1)

        # real elapsed time; a DST switch makes it differ from the wall-clock span
        hours = (end.astimezone(timezone.utc) - start.astimezone(timezone.utc)).total_seconds() / 3600
        rate = calculate_display_rate(shift.type, hours, self.base_rate)
        label = self.lexicon.label_for(shift.type.value)
        location = self.options.location

        return CalendarEventDescriptor(
            start=start,
            end=end,
            summary=render_template(
                self.options.summary_template or DEFAULT_SUMMARY_TEMPLATE, label, hours, rate, location
            ),
            description=render_template(
                self.options.event_description or DEFAULT_DESCRIPTION_TEMPLATE, label, hours, rate, location
            ),
            location=location or "",
            hours=hours,
            rate=rate,
            reminders=[r.model_copy() for r in self.reminders],
            shift=shift,
        )

    def build(self, shifts: Sequence[Union[ShiftRecord, Mapping[str, Any]]]) -> CalendarBuildReport:
        if isinstance(shifts, (str, bytes, Mapping)) or not isinstance(shifts, Sequence):
            raise InvalidShiftInput("shifts must be a list of shift records")

        report = CalendarBuildReport()
        for index, raw in enumerate(shifts):
            try:
                shift = raw if isinstance(raw, ShiftRecord) else ShiftRecord.model_validate(raw)
                report.events.append(self.build_event(shift))
            except (ValidationError, ValueError, OverflowError) as e:
                log_event(
                    logger,
                    "calendar_event_skipped",
                    level=logging.WARNING,
                    index=index,
                    error=str(e),
                )
                report.skipped.append(SkippedShift(index=index, shift=raw, reason=str(e)))

        log_event(
            logger,
            "calendar_events_built",
            events=len(report.events),
            skipped=len(report.skipped),
            reminders_per_event=len(self.reminders),
        )
        return report


def build_calendar_events_report(
    shifts: Sequence[Union[ShiftRecord, Mapping[str, Any]]],
    options: Union[CalendarOptions, Mapping[str, Any], None] = None,
    **builder_options,
) -> CalendarBuildReport:
    return CalendarEventBuilder(options, **builder_options).build(shifts)


def build_calendar_events(
    shifts: Sequence[Union[ShiftRecord, Mapping[str, Any]]],
    options: Union[CalendarOptions, Mapping[str, Any], None] = None,
    **builder_options,
) -> List[CalendarEventDescriptor]:
    return build_calendar_events_report(shifts, options, **builder_options).events
