# config.py
import os
from dotenv import load_dotenv
load_dotenv()

from concurrent.futures import ThreadPoolExecutor

import logging
from logging_utils import configure_logging

configure_logging()
logger = logging.getLogger("shiftintel.config")

# Pay rates (reference currency: ILS)
DEFAULT_DAY_RATE = float(os.getenv("DEFAULT_DAY_RATE", "50"))
DEFAULT_NIGHT_DIFFERENTIAL = float(os.getenv("DEFAULT_NIGHT_DIFFERENTIAL", "5"))


def _parse_weekend_days(raw: str) -> tuple[int, ...]:
    """'4,5' -> (4, 5); Monday is 0 as in datetime.weekday()."""
    days = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        day = int(part)
        if not 0 <= day <= 6:
            raise RuntimeError(f"WEEKEND_DAYS entry out of range: {day}")
        days.append(day)
    return tuple(days)


# Friday + Saturday (Israel)
WEEKEND_DAYS = _parse_weekend_days(os.getenv("WEEKEND_DAYS", "4,5"))

# Calendar export
CALENDAR_TIMEZONE = os.getenv("CALENDAR_TIMEZONE", "Asia/Jerusalem")
CALENDAR_DESCRIPTION = os.getenv(
    "CALENDAR_DESCRIPTION", "Work shift schedule generated by Shift-Intel"
)

# Optional JSON file replacing the built-in shift vocabulary
SHIFT_LEXICON_PATH = os.getenv("SHIFT_LEXICON_PATH") or None

# OCR
TESSERACT_CMD = os.getenv("TESSERACT_CMD") or None
OCR_TIMEOUT = int(os.getenv("OCR_TIMEOUT", "30"))
OCR_MAX_ATTEMPTS = int(os.getenv("OCR_MAX_ATTEMPTS", "3"))
MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", "10"))
MAX_UPLOAD_SIZE_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024

MAX_WORKERS = min(32, (os.cpu_count() or 4) * 2)
thread_pool = ThreadPoolExecutor(max_workers=MAX_WORKERS)

logger.info(
    f"Config: weekend_days={WEEKEND_DAYS}, timezone={CALENDAR_TIMEZONE}, "
    f"ocr_timeout={OCR_TIMEOUT}s, workers={MAX_WORKERS}"
)
