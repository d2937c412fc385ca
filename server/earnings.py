# earnings.py
"""
Per-shift tiered earnings.

Every shift is banded on its own duration (no weekly or monthly
aggregation): the first 8 hours, the next 2 hours, then everything above
10 hours. Holiday beats weekend, weekend beats the regular weekday table.

    regular  100% / 125% / 150%  -> regular|night, overtime125, overtime150
    weekend  150% / 175% / 200%  -> weekend150, weekend187, weekend225
    holiday  150% / 175% / 200%  -> holiday150, holiday187, holiday225

Band names keep their historical labels (187/225) even though the
multipliers are 175%/200%.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from classifier import classify_shift
from config import DEFAULT_DAY_RATE, DEFAULT_NIGHT_DIFFERENTIAL, WEEKEND_DAYS
from logging_utils import log_event
from models import (
    BAND_NAMES,
    EarningsBreakdown,
    EarningsResult,
    InvalidShiftInput,
    PayRateConfig,
    ShiftEarnings,
    ShiftRecord,
    ShiftType,
)
from time_utils import shift_duration_hours, try_parse_clock_time

logger = logging.getLogger("shiftintel.earnings")

# (band, multiplier, hours in tier); None = all remaining hours
Tier = Tuple[str, float, Optional[float]]

REGULAR_TIERS: Tuple[Tier, ...] = (
    ("regular", 1.0, 8),
    ("overtime125", 1.25, 2),
    ("overtime150", 1.5, None),
)
NIGHT_TIERS: Tuple[Tier, ...] = (("night", 1.0, 8),) + REGULAR_TIERS[1:]
WEEKEND_TIERS: Tuple[Tier, ...] = (
    ("weekend150", 1.5, 8),
    ("weekend187", 1.75, 2),
    ("weekend225", 2.0, None),
)
HOLIDAY_TIERS: Tuple[Tier, ...] = (
    ("holiday150", 1.5, 8),
    ("holiday187", 1.75, 2),
    ("holiday225", 2.0, None),
)

ShiftInput = Union[ShiftRecord, Mapping[str, Any]]


def allocate_tiers(
    hours: float, effective_rate: float, tiers: Sequence[Tier]
) -> List[Tuple[str, float, float]]:
    """Split hours across tiers in order -> [(band, hours, amount)]."""
    allocation: List[Tuple[str, float, float]] = []
    remaining = hours
    for band, multiplier, size in tiers:
        if remaining <= 0:
            break
        taken = remaining if size is None else min(remaining, size)
        allocation.append((band, taken, taken * effective_rate * multiplier))
        remaining -= taken
    return allocation


class EarningsEngine:
    def __init__(
        self,
        rates: Union[PayRateConfig, Mapping[str, Any], None] = None,
        weekend_days: Optional[Iterable[int]] = None,
    ) -> None:
        if rates is None:
            rates = PayRateConfig()
        elif not isinstance(rates, PayRateConfig):
            try:
                rates = PayRateConfig.model_validate(rates)
            except ValidationError as e:
                raise InvalidShiftInput(f"invalid pay rates: {e}") from e

        self.base_rate = rates.day or DEFAULT_DAY_RATE
        self.night_differential = rates.night_differential or DEFAULT_NIGHT_DIFFERENTIAL
        self.weekend_days = tuple(WEEKEND_DAYS if weekend_days is None else weekend_days)

    def _category(self, shift: ShiftRecord) -> ShiftType:
        if shift.type is ShiftType.WEEKEND:
            return ShiftType.WEEKEND
        try:
            return classify_shift(shift.type, shift.date, self.weekend_days)
        except ValueError:
            log_event(
                logger,
                "shift_date_unreadable",
                level=logging.WARNING,
                shift_date=shift.date,
            )
            return ShiftType.NIGHT if shift.type is ShiftType.NIGHT else ShiftType.DAY

    def shift_earnings(self, shift: ShiftRecord) -> ShiftEarnings:
        start = try_parse_clock_time(shift.start_time)
        end = try_parse_clock_time(shift.end_time)
        if start is None or end is None:
            log_event(
                logger,
                "shift_times_unreadable",
                level=logging.WARNING,
                shift_date=shift.date,
                start_time=shift.start_time,
                end_time=shift.end_time,
            )
            return ShiftEarnings(
                date=shift.date, category="skipped", skipped_reason="unreadable_times"
            )

        hours = shift_duration_hours(start, end)
        category = self._category(shift)

        effective_rate = self.base_rate
        if category is ShiftType.NIGHT:
            effective_rate += self.night_differential

        if shift.holiday:
            tiers, label = HOLIDAY_TIERS, "holiday"
        elif category is ShiftType.WEEKEND:
            tiers, label = WEEKEND_TIERS, "weekend"
        elif category is ShiftType.NIGHT:
            tiers, label = NIGHT_TIERS, "night"
        else:
            tiers, label = REGULAR_TIERS, "regular"

        amounts: Dict[str, float] = {}
        band_hours: Dict[str, float] = {}
        for band, band_h, amount in allocate_tiers(hours, effective_rate, tiers):
            amounts[band] = amount
            band_hours[band] = band_h

        return ShiftEarnings(
            date=shift.date,
            hours=hours,
            category=label,
            effective_rate=effective_rate,
            amounts=amounts,
            band_hours=band_hours,
        )

    def compute(self, shifts: Sequence[ShiftInput]) -> EarningsResult:
        if isinstance(shifts, (str, bytes, Mapping)) or not isinstance(shifts, Sequence):
            raise InvalidShiftInput("shifts must be a list of shift records")

        totals: Dict[str, float] = {band: 0.0 for band in BAND_NAMES}
        total_hours = 0.0
        details: List[ShiftEarnings] = []

        for index, raw in enumerate(shifts):
            try:
                shift = raw if isinstance(raw, ShiftRecord) else ShiftRecord.model_validate(raw)
            except ValidationError as e:
                log_event(
                    logger,
                    "shift_record_invalid",
                    level=logging.WARNING,
                    index=index,
                    errors=e.error_count(),
                )
                details.append(ShiftEarnings(category="skipped", skipped_reason="invalid_record"))
                continue

            earned = self.shift_earnings(shift)
            for band, amount in earned.amounts.items():
                totals[band] += amount
            total_hours += earned.hours
            details.append(earned)

        breakdown = EarningsBreakdown(**totals)
        result = EarningsResult(
            total_earnings=breakdown.total(),
            total_hours=total_hours,
            breakdown=breakdown,
            shifts=details,
        )
        log_event(
            logger,
            "earnings_computed",
            shifts=len(details),
            skipped=sum(1 for d in details if d.skipped_reason),
            total_hours=round(total_hours, 2),
            total_earnings=round(result.total_earnings, 2),
        )
        return result


def compute_earnings(
    shifts: Sequence[ShiftInput],
    rates: Union[PayRateConfig, Mapping[str, Any], None] = None,
    **engine_options,
) -> EarningsResult:
    return EarningsEngine(rates, **engine_options).compute(shifts)
