# logging_utils.py
# Structured JSON logging for Shift-Intel: one object per line on stdout
# (and LOG_FILE when set), request id pulled from a context variable.

import json
import logging
import os
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

# Set per request by the middleware in api.py
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

SERVICE_NAME = os.getenv("SERVICE_NAME", "shiftintel")
ENV = os.getenv("APP_ENV", "dev")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "")

# Attributes every LogRecord already has; extra fields may not reuse them
_RESERVED_LOG_FIELDS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JSONLineFormatter(logging.Formatter):
    """
    Render a record as one JSON line:

        {"ts": "2025-08-03T07:00:00.000Z", "level": "INFO",
         "logger": "shiftintel.extraction", "service": "shiftintel",
         "env": "dev", "message": "shift_extraction_finished",
         "request_id": "...", "strategy": "structured", "shifts_found": 2}
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "ts": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "env": ENV,
            "message": record.getMessage(),
        }

        rid = _request_id.get()
        if rid:
            payload["request_id"] = rid

        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if not key.startswith("_")
            and key not in payload
            and key not in _RESERVED_LOG_FIELDS
        )

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        # Hebrew labels stay readable in the log
        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging() -> None:
    """Install the JSON handlers on the root logger (idempotent)."""
    root = logging.getLogger()
    if getattr(root, "_shiftintel_configured", False):
        return

    root.setLevel(LOG_LEVEL)
    formatter = JSONLineFormatter()

    handlers = [logging.StreamHandler(sys.stdout)]
    if LOG_FILE:
        try:
            log_dir = os.path.dirname(LOG_FILE)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            handlers.append(logging.FileHandler(LOG_FILE, encoding="utf-8"))
        except OSError as e:
            root.error(f"Failed to set up file logging: {e}")

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    root._shiftintel_configured = True  # type: ignore[attr-defined]


def new_request_id() -> str:
    rid = uuid.uuid4().hex
    _request_id.set(rid)
    return rid


def set_request_id(rid: Optional[str]) -> None:
    _request_id.set(rid)


def log_event(
    logger: logging.Logger,
    event: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """
    Log `event` as the message with `fields` attached as structured data.

    Field names that clash with LogRecord attributes get a `field_` prefix
    (filename -> field_filename, module -> field_module).
    """
    extra = {
        (f"field_{key}" if key in _RESERVED_LOG_FIELDS else key): value
        for key, value in fields.items()
    }
    extra["event"] = event
    logger.log(level, event, extra=extra)


class ShiftIntelLogger:
    """Logger wrapper with named stage timers scoped to the current request."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.timers: Dict[str, float] = {}

    def info(self, msg, *args, **kwargs):
        self.logger.info(msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        self.logger.warning(msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        self.logger.error(msg, *args, **kwargs)

    @staticmethod
    def _timer_key(name: str) -> str:
        return f"{_request_id.get() or 'global'}:{name}"

    def start_timer(self, name: str) -> None:
        self.timers[self._timer_key(name)] = time.perf_counter()

    def end_timer(self, name: str) -> float:
        """Seconds since start_timer(name); 0.0 if it was never started."""
        start = self.timers.pop(self._timer_key(name), None)
        if start is None:
            return 0.0
        return time.perf_counter() - start

    @contextmanager
    def timed(self, name: str) -> Iterator[None]:
        self.start_timer(name)
        try:
            yield
        finally:
            elapsed = self.end_timer(name)
            self.logger.debug(f"{name} took {elapsed * 1000:.1f}ms")

    def log_extraction(self, count: int, strategy: str) -> None:
        if count:
            self.logger.info(f"Extraction: {count} shifts via {strategy} strategy")
        else:
            self.logger.warning(f"Extraction: no shifts found ({strategy})")


def get_logger(name: str) -> ShiftIntelLogger:
    return ShiftIntelLogger(name)
