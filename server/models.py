# models.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InvalidShiftInput(ValueError):
    """Top-level input the core refuses to work with (caller-visible)."""


class ShiftType(str, Enum):
    DAY = "day"
    MORNING = "morning"
    EVENING = "evening"
    NIGHT = "night"
    WEEKEND = "weekend"


class ShiftRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    date: str = Field(..., description="YYYY-MM-DD (MM/DD and MM/DD/YYYY also accepted)")
    start_time: str = Field(..., alias="startTime", description="e.g. 7:00 AM")
    end_time: str = Field(..., alias="endTime", description="e.g. 3:00 PM")
    type: ShiftType = ShiftType.DAY
    holiday: bool = False

    @field_validator("date", "start_time", "end_time")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()

    @field_validator("holiday", mode="before")
    @classmethod
    def _none_is_not_holiday(cls, v: Any) -> Any:
        return False if v is None else v


class DateHeaderEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day: int
    month: int
    # None when the token is not a real calendar date (e.g. 31/2)
    full_date: Optional[str] = Field(None, alias="fullDate")


class PayRateConfig(BaseModel):
    """Hourly pay rates; a missing, null or zero field falls back to the default."""

    model_config = ConfigDict(populate_by_name=True)

    day: Optional[float] = Field(None, ge=0)
    night_differential: Optional[float] = Field(None, alias="nightDifferential", ge=0)


BAND_NAMES = (
    "regular",
    "night",
    "overtime125",
    "overtime150",
    "weekend150",
    "weekend187",
    "weekend225",
    "holiday150",
    "holiday187",
    "holiday225",
)


class EarningsBreakdown(BaseModel):
    regular: float = 0.0
    night: float = 0.0
    overtime125: float = 0.0
    overtime150: float = 0.0
    weekend150: float = 0.0
    weekend187: float = 0.0
    weekend225: float = 0.0
    holiday150: float = 0.0
    holiday187: float = 0.0
    holiday225: float = 0.0

    def total(self) -> float:
        return sum(getattr(self, band) for band in BAND_NAMES)


class ShiftEarnings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: Optional[str] = None
    hours: float = 0.0
    category: str = Field(..., description="regular | night | weekend | holiday | skipped")
    effective_rate: float = Field(0.0, alias="effectiveRate")
    amounts: Dict[str, float] = Field(default_factory=dict)
    band_hours: Dict[str, float] = Field(default_factory=dict, alias="bandHours")
    skipped_reason: Optional[str] = Field(None, alias="skippedReason")


class EarningsResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_earnings: float = Field(0.0, alias="totalEarnings")
    total_hours: float = Field(0.0, alias="totalHours")
    breakdown: EarningsBreakdown = Field(default_factory=EarningsBreakdown)
    shifts: List[ShiftEarnings] = Field(default_factory=list)


class ReminderSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reminder_1_hour: bool = Field(False, alias="reminder1Hour")
    reminder_1_day: bool = Field(False, alias="reminder1Day")
    custom_reminder_enabled: bool = Field(False, alias="customReminderEnabled")
    custom_reminder_value: Optional[int] = Field(None, alias="customReminderValue")
    # minutes | hours | days; anything else counts as minutes
    custom_reminder_unit: str = Field("minutes", alias="customReminderUnit")


class Reminder(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    offset_seconds: int = Field(..., alias="offsetSeconds")
    message: str


class CalendarOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    calendar_name: str = Field("Work Shifts", alias="calendarName")
    event_description: Optional[str] = Field(None, alias="eventDescription")
    summary_template: Optional[str] = Field(None, alias="summaryTemplate")
    location: Optional[str] = None
    reminders: ReminderSettings = Field(default_factory=ReminderSettings)
    display_base_rate: Optional[float] = Field(None, alias="displayBaseRate", gt=0)
    timezone: Optional[str] = None


class CalendarEventDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: datetime
    end: datetime
    summary: str
    description: str
    location: str = ""
    categories: List[str] = Field(default_factory=lambda: ["Work", "Shift"])
    hours: float
    rate: float
    reminders: List[Reminder] = Field(default_factory=list)
    shift: ShiftRecord


class SkippedShift(BaseModel):
    index: int
    shift: Any = None
    reason: str


class CalendarBuildReport(BaseModel):
    events: List[CalendarEventDescriptor] = Field(default_factory=list)
    skipped: List[SkippedShift] = Field(default_factory=list)


class LineStatus(str, Enum):
    HEADER = "header"
    SHIFT = "shift"
    SKIPPED = "skipped"


class ExtractionStrategy(str, Enum):
    STRUCTURED = "structured"
    UNSTRUCTURED = "unstructured"
    NONE = "none"


class LineOutcome(BaseModel):
    line_no: int
    text: str
    strategy: ExtractionStrategy
    status: LineStatus
    reason: str
    shifts: List[ShiftRecord] = Field(default_factory=list)
    # indicators paired onto header columns that are not real dates
    skipped_pairs: int = 0


class ExtractionReport(BaseModel):
    shifts: List[ShiftRecord] = Field(default_factory=list)
    strategy: ExtractionStrategy = ExtractionStrategy.NONE
    outcomes: List[LineOutcome] = Field(default_factory=list)

    def skipped(self) -> List[LineOutcome]:
        return [o for o in self.outcomes if o.status is LineStatus.SKIPPED]


class ErrorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    error: bool = True
    user_message: str = Field(..., alias="userMessage")
    technical_reason: str = Field(..., alias="technicalReason")
    suggestions: List[str] = Field(default_factory=list)


class ScheduleResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    shifts: List[ShiftRecord] = Field(default_factory=list)
    strategy: ExtractionStrategy = ExtractionStrategy.NONE
    earnings: EarningsResult = Field(default_factory=EarningsResult)
    processing_time: Dict[str, float] = Field(default_factory=dict, alias="processingTime")
