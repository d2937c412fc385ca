"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add server to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "server"))

from extraction_engine import ShiftExtractionEngine  # noqa: E402
from models import ShiftRecord, ShiftType  # noqa: E402


@pytest.fixture
def engine():
    """Extractor pinned to 2025 so header dates are reproducible."""
    return ShiftExtractionEngine(reference_year=2025)


@pytest.fixture
def weekly_table_text():
    """Header row + employee row from a Hebrew weekly roster."""
    return "3/8 4/8 5/8\nDana בוקר ערב"


@pytest.fixture
def make_shift():
    """Factory for shift records; 2025-08-04 is a Monday."""

    def _make(
        date="2025-08-04",
        start="7:00 AM",
        end="3:00 PM",
        shift_type=ShiftType.DAY,
        holiday=False,
    ):
        return ShiftRecord(
            date=date,
            start_time=start,
            end_time=end,
            type=shift_type,
            holiday=holiday,
        )

    return _make
