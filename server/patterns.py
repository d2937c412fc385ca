# patterns.py
import re


class Patterns:
    # "3/8" tokens in a weekly header row (day/month)
    HEADER_DATE = re.compile(r"(\d{1,2})/(\d{1,2})")
    # day/month with optional 2- or 4-digit year, "/" or "." separated
    LINE_DATE = re.compile(r"(\d{1,2})[/.](\d{1,2})(?:[/.](\d{2,4}))?")
    CLOCK_TIME = re.compile(
        r"(\d{1,2}):(\d{2})\s*(AM|PM|אחה״צ|אחה\"צ|בבוקר)?", re.IGNORECASE
    )
    CLOCK_PARTS = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)?", re.IGNORECASE)
    PERIOD = re.compile(r"AM|PM", re.IGNORECASE)
    HOUR = re.compile(r"(\d{1,2})")
    ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
    SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?$")
    TABLE_PUNCTUATION = "|,;"


patterns = Patterns()
