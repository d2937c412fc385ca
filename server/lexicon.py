# lexicon.py
# ---------------------------------------------------------------------
# Shift vocabulary used to read schedule rows. The built-in table covers
# the Hebrew rosters we see most; swap it with a JSON file
# (SHIFT_LEXICON_PATH) for other locales, the parser never needs to change.
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Tuple

from patterns import patterns

NAME_MARKER = "name"

# token -> shift kind ("name" marks tokens that are people, not shifts)
DEFAULT_SHIFT_INDICATORS: dict[str, str] = {
    "בוקר": "morning",
    "ערב": "evening",
    "לילה": "night",
    "morning": "morning",
    "evening": "evening",
    "night": "night",
    # names that show up inside roster rows
    "מחמוד": NAME_MARKER,
    "הראל": NAME_MARKER,
    "אריאל": NAME_MARKER,
}

STANDARD_SHIFT_TIMES: dict[str, Tuple[str, str]] = {
    "morning": ("7:00 AM", "3:00 PM"),
    "evening": ("3:00 PM", "11:00 PM"),
    "night": ("11:00 PM", "7:00 AM"),
}
FALLBACK_SHIFT_TIMES: Tuple[str, str] = ("9:00 AM", "5:00 PM")

SHIFT_TYPE_LABELS: dict[str, str] = {
    "day": "בוקר",
    "morning": "בוקר",
    "evening": "ערב",
    "night": "לילה",
    "weekend": "סוף שבוע",
}


class ShiftLexicon:
    """Indicator tokens, standard hours and display labels for one locale."""

    def __init__(
        self,
        indicators: Mapping[str, str],
        standard_times: Optional[Mapping[str, Tuple[str, str]]] = None,
        labels: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._indicators: Dict[str, str] = {
            self._normalize(token): kind for token, kind in indicators.items()
        }
        self.standard_times: Dict[str, Tuple[str, str]] = dict(
            standard_times or STANDARD_SHIFT_TIMES
        )
        self.labels: Dict[str, str] = dict(labels or SHIFT_TYPE_LABELS)

    @staticmethod
    def _normalize(word: str) -> str:
        return word.strip().strip(patterns.TABLE_PUNCTUATION).strip().lower()

    def shift_kind(self, word: str) -> Optional[str]:
        """Shift kind for a row word, or None for names and unknown words."""
        kind = self._indicators.get(self._normalize(word))
        if kind is None or kind == NAME_MARKER:
            return None
        return kind

    def is_name(self, word: str) -> bool:
        return self._indicators.get(self._normalize(word)) == NAME_MARKER

    def times_for(self, kind: str) -> Tuple[str, str]:
        return self.standard_times.get(kind, FALLBACK_SHIFT_TIMES)

    def label_for(self, shift_type: str) -> str:
        return self.labels.get(shift_type, shift_type)

    @property
    def tokens(self) -> Iterable[str]:
        return self._indicators.keys()

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "ShiftLexicon":
        """
        Build from a plain mapping:
            {
              "indicators": {"בוקר": "morning", ...},
              "names": ["הראל", ...],
              "standardTimes": {"morning": ["7:00 AM", "3:00 PM"], ...},
              "labels": {"night": "לילה", ...}
            }
        """
        indicators = dict(data.get("indicators") or {})  # type: ignore[arg-type]
        for name in data.get("names") or []:  # type: ignore[union-attr]
            indicators[str(name)] = NAME_MARKER
        if not indicators:
            raise ValueError("lexicon has no indicator tokens")

        raw_times = data.get("standardTimes") or {}
        times = {
            kind: (str(pair[0]), str(pair[1]))
            for kind, pair in raw_times.items()  # type: ignore[union-attr]
        }
        return cls(indicators, times or None, data.get("labels") or None)  # type: ignore[arg-type]

    @classmethod
    def from_file(cls, path: str | Path) -> "ShiftLexicon":
        with open(path, encoding="utf-8") as fh:
            return cls.from_mapping(json.load(fh))


DEFAULT_LEXICON = ShiftLexicon(DEFAULT_SHIFT_INDICATORS)


def load_lexicon(path: Optional[str] = None) -> ShiftLexicon:
    if not path:
        return DEFAULT_LEXICON
    return ShiftLexicon.from_file(path)
