# extraction_engine.py
from __future__ import annotations

import logging
import re
from datetime import date
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from classifier import classify_shift, classify_time_span
from config import SHIFT_LEXICON_PATH, WEEKEND_DAYS
from lexicon import ShiftLexicon, load_lexicon
from logging_utils import get_logger, log_event
logger = get_logger("shiftintel.extraction")
from models import (
    DateHeaderEntry,
    ExtractionReport,
    ExtractionStrategy,
    InvalidShiftInput,
    LineOutcome,
    LineStatus,
    ShiftRecord,
)
from patterns import patterns
from time_utils import build_iso_date, normalize_period, resolve_year

# a row with at least this many day/month tokens is a week header
HEADER_MIN_DATES = 3


class PairingStrategy(Protocol):
    def pair(
        self, kinds: Sequence[str], dates: Sequence[DateHeaderEntry]
    ) -> List[Tuple[str, DateHeaderEntry]]:
        ...


class PositionalPairing:
    """
    Nth shift indicator in an employee row takes the Nth date of the active
    header, whatever words sit between the indicators. Extra indicators
    beyond the last header date are dropped.
    """

    def pair(
        self, kinds: Sequence[str], dates: Sequence[DateHeaderEntry]
    ) -> List[Tuple[str, DateHeaderEntry]]:
        return list(zip(kinds, dates))


def build_name_pattern(employee_name: str) -> re.Pattern[str]:
    """'Dana  Levi' matches 'danalevi', 'Dana Levi', 'DANA   LEVI'."""
    words = employee_name.split()
    return re.compile(r"\s*".join(re.escape(w) for w in words), re.IGNORECASE)


class ShiftExtractionEngine:
    """Two-tier text-to-shift extractor: weekly table first, line scan second."""

    def __init__(
        self,
        lexicon: Optional[ShiftLexicon] = None,
        pairing: Optional[PairingStrategy] = None,
        weekend_days: Optional[Iterable[int]] = None,
        reference_year: Optional[int] = None,
    ) -> None:
        self.lexicon = lexicon or load_lexicon(SHIFT_LEXICON_PATH)
        self.pairing: PairingStrategy = pairing or PositionalPairing()
        self.weekend_days = tuple(WEEKEND_DAYS if weekend_days is None else weekend_days)
        self.reference_year = reference_year or date.today().year

    # ---------------- core helpers ----------------

    @staticmethod
    def _name_pattern(text: object, employee_name: object) -> re.Pattern[str]:
        if not isinstance(text, str):
            raise InvalidShiftInput("schedule text must be a string")
        if not isinstance(employee_name, str) or not employee_name.strip():
            raise InvalidShiftInput("employee name is required")
        return build_name_pattern(employee_name)

    def parse_header(self, line: str) -> List[DateHeaderEntry]:
        matches = patterns.HEADER_DATE.findall(line)
        if len(matches) < HEADER_MIN_DATES:
            return []
        entries: List[DateHeaderEntry] = []
        for day_s, month_s in matches:
            day, month = int(day_s), int(month_s)
            entries.append(
                DateHeaderEntry(
                    day=day,
                    month=month,
                    full_date=build_iso_date(day, month, self.reference_year),
                )
            )
        return entries

    def row_shift_kinds(self, line: str) -> List[str]:
        kinds: List[str] = []
        for word in line.split():
            kind = self.lexicon.shift_kind(word)
            if kind:
                kinds.append(kind)
        return kinds

    def _table_shift(self, kind: str, entry: DateHeaderEntry) -> ShiftRecord:
        start, end = self.lexicon.times_for(kind)
        return ShiftRecord(
            date=entry.full_date,
            start_time=start,
            end_time=end,
            type=classify_shift(kind, entry.full_date, self.weekend_days),
        )

    def _outcome(
        self,
        line_no: int,
        line: str,
        strategy: ExtractionStrategy,
        status: LineStatus,
        reason: str,
        shifts: Optional[List[ShiftRecord]] = None,
        skipped_pairs: int = 0,
    ) -> LineOutcome:
        if status is LineStatus.SKIPPED:
            log_event(
                logger.logger,
                "schedule_line_skipped",
                level=logging.DEBUG,
                line_no=line_no,
                strategy=strategy.value,
                reason=reason,
            )
        return LineOutcome(
            line_no=line_no,
            text=line,
            strategy=strategy,
            status=status,
            reason=reason,
            shifts=shifts or [],
            skipped_pairs=skipped_pairs,
        )

    # ---------------- strategy A: weekly table ----------------

    def extract_structured(
        self, lines: Sequence[str], name_re: re.Pattern[str]
    ) -> Tuple[List[ShiftRecord], List[LineOutcome]]:
        strategy = ExtractionStrategy.STRUCTURED
        shifts: List[ShiftRecord] = []
        outcomes: List[LineOutcome] = []
        active_dates: List[DateHeaderEntry] = []

        for line_no, raw in enumerate(lines, 1):
            line = raw.strip()
            if not line:
                continue

            header = self.parse_header(line)
            if header:
                active_dates = header
                outcomes.append(
                    self._outcome(line_no, line, strategy, LineStatus.HEADER, "date_header")
                )
                continue

            if not name_re.search(line):
                continue

            if not active_dates:
                outcomes.append(
                    self._outcome(line_no, line, strategy, LineStatus.SKIPPED, "no_active_dates")
                )
                continue

            pairs = self.pairing.pair(self.row_shift_kinds(line), active_dates)
            if not pairs:
                outcomes.append(
                    self._outcome(line_no, line, strategy, LineStatus.SKIPPED, "no_shift_indicators")
                )
                continue

            row_shifts = [
                self._table_shift(kind, entry)
                for kind, entry in pairs
                if entry.full_date is not None
            ]
            invalid_pairs = len(pairs) - len(row_shifts)
            if row_shifts:
                outcomes.append(
                    self._outcome(
                        line_no,
                        line,
                        strategy,
                        LineStatus.SHIFT,
                        "shifts_paired",
                        row_shifts,
                        skipped_pairs=invalid_pairs,
                    )
                )
                shifts.extend(row_shifts)
            else:
                outcomes.append(
                    self._outcome(
                        line_no,
                        line,
                        strategy,
                        LineStatus.SKIPPED,
                        "invalid_date",
                        skipped_pairs=invalid_pairs,
                    )
                )

        return shifts, outcomes

    # ---------------- strategy B: free-text line scan ----------------

    def extract_unstructured(
        self, lines: Sequence[str], name_re: re.Pattern[str]
    ) -> Tuple[List[ShiftRecord], List[LineOutcome]]:
        strategy = ExtractionStrategy.UNSTRUCTURED
        shifts: List[ShiftRecord] = []
        outcomes: List[LineOutcome] = []

        for line_no, line in enumerate(lines, 1):
            if not name_re.search(line):
                continue

            times = list(patterns.CLOCK_TIME.finditer(line))
            dates = list(patterns.LINE_DATE.finditer(line))
            if len(times) < 2:
                outcomes.append(
                    self._outcome(line_no, line, strategy, LineStatus.SKIPPED, "fewer_than_two_times")
                )
                continue
            if not dates:
                outcomes.append(
                    self._outcome(line_no, line, strategy, LineStatus.SKIPPED, "no_date")
                )
                continue

            start = normalize_period(times[0].group(0))
            end = normalize_period(times[1].group(0))
            day_s, month_s, year_s = dates[0].groups()
            try:
                year = resolve_year(year_s, self.reference_year)
            except ValueError:
                iso_date = None
            else:
                iso_date = build_iso_date(int(day_s), int(month_s), year)

            if iso_date is None:
                outcomes.append(
                    self._outcome(line_no, line, strategy, LineStatus.SKIPPED, "invalid_date")
                )
                continue

            shift = ShiftRecord(
                date=iso_date,
                start_time=start,
                end_time=end,
                type=classify_time_span(start, end, iso_date, self.weekend_days),
            )
            outcomes.append(
                self._outcome(line_no, line, strategy, LineStatus.SHIFT, "shift_extracted", [shift])
            )
            shifts.append(shift)

        return shifts, outcomes

    # ---------------- orchestrator ----------------

    def extract(self, text: str, employee_name: str) -> ExtractionReport:
        """Run the table strategy, falling back to the line scan when it finds nothing."""
        name_re = self._name_pattern(text, employee_name)
        lines = text.splitlines()

        logger.start_timer("extract_shifts")
        shifts, outcomes = self.extract_structured(lines, name_re)
        strategy = ExtractionStrategy.STRUCTURED

        if not shifts:
            log_event(
                logger.logger,
                "structured_extraction_empty",
                lines=len(lines),
                employee_rows=sum(1 for o in outcomes if o.status is not LineStatus.HEADER),
            )
            shifts, fallback_outcomes = self.extract_unstructured(lines, name_re)
            outcomes.extend(fallback_outcomes)
            strategy = ExtractionStrategy.UNSTRUCTURED if shifts else ExtractionStrategy.NONE

        elapsed = logger.end_timer("extract_shifts")
        logger.log_extraction(len(shifts), strategy.value)
        log_event(
            logger.logger,
            "shift_extraction_finished",
            strategy=strategy.value,
            shifts_found=len(shifts),
            lines_skipped=sum(1 for o in outcomes if o.status is LineStatus.SKIPPED),
            duration_ms=int(elapsed * 1000),
        )

        return ExtractionReport(shifts=shifts, strategy=strategy, outcomes=outcomes)


def extract_shifts_report(text: str, employee_name: str, **engine_options) -> ExtractionReport:
    return ShiftExtractionEngine(**engine_options).extract(text, employee_name)


def extract_shifts(text: str, employee_name: str, **engine_options) -> List[ShiftRecord]:
    return extract_shifts_report(text, employee_name, **engine_options).shifts
