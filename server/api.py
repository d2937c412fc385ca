from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytesseract
from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from calendar_builder import build_calendar_events_report
from calendar_export import calendar_filename, render_calendar
from config import CALENDAR_DESCRIPTION, CALENDAR_TIMEZONE, MAX_UPLOAD_SIZE_BYTES
from earnings import compute_earnings
from extraction_engine import extract_shifts_report
from logging_utils import configure_logging, log_event, new_request_id, set_request_id
from models import CalendarOptions, ErrorResponse, InvalidShiftInput
from pipeline import ShiftPipeline

# ------------------------------------------------------------------------------
# APP + LOGGING SETUP
# ------------------------------------------------------------------------------

configure_logging()
logger = logging.getLogger("shiftintel.api")

app = FastAPI(title="Shift-Intel", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_origin_regex=r"http://localhost:\d+",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Request-ID"],
)

logger.info("Starting Shift-Intel server")

_pipeline: Optional[ShiftPipeline] = None


def get_pipeline() -> ShiftPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = ShiftPipeline()
    return _pipeline


# ------------------------------------------------------------------------------
# REQUEST MODELS
# ------------------------------------------------------------------------------

class ParseShiftsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    employee_name: Optional[str] = Field(None, alias="employeeName")


class CalculateEarningsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    shifts: List[Any]
    pay_rates: Optional[Dict[str, Any]] = Field(None, alias="payRates")


class GenerateCalendarRequest(BaseModel):
    shifts: List[Any]
    options: Optional[Dict[str, Any]] = None


# ------------------------------------------------------------------------------
# REQUEST LOGGING MIDDLEWARE
# ------------------------------------------------------------------------------

@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    rid = request.headers.get("x-request-id") or new_request_id()
    set_request_id(rid)
    started = time.perf_counter()
    log_event(
        logger,
        "http_request_started",
        method=request.method,
        path=request.url.path,
        client_ip=request.client.host if request.client else None,
    )

    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        response.headers["X-Request-ID"] = rid
        return response
    finally:
        log_event(
            logger,
            "http_request_finished",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=int((time.perf_counter() - started) * 1000),
        )
        set_request_id(None)


# ------------------------------------------------------------------------------
# ERROR HANDLING
# ------------------------------------------------------------------------------

def _error_response(status_code: int, user_message: str, reason: str) -> JSONResponse:
    body = ErrorResponse(user_message=user_message, technical_reason=reason)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


@app.exception_handler(InvalidShiftInput)
async def invalid_input_handler(request: Request, exc: InvalidShiftInput) -> JSONResponse:
    log_event(logger, "invalid_input", level=logging.WARNING, path=request.url.path, error=str(exc))
    return _error_response(HTTP_400_BAD_REQUEST, "The request could not be processed", str(exc))


@app.exception_handler(pytesseract.TesseractNotFoundError)
async def ocr_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    log_event(logger, "ocr_engine_missing", level=logging.ERROR, error=str(exc))
    return _error_response(HTTP_503_SERVICE_UNAVAILABLE, "Text recognition is unavailable", str(exc))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return _error_response(HTTP_500_INTERNAL_SERVER_ERROR, "Processing failed", type(exc).__name__)


async def _read_upload(upload: UploadFile) -> bytes:
    data = await upload.read()
    if not data:
        raise InvalidShiftInput("No file uploaded")
    if len(data) > MAX_UPLOAD_SIZE_BYTES:
        raise HTTPException(HTTP_413_REQUEST_ENTITY_TOO_LARGE, "File too large")
    return data


# ------------------------------------------------------------------------------
# ROUTES
# ------------------------------------------------------------------------------

@app.get("/health")
async def health() -> Dict[str, Any]:
    return {
        "status": "ok",
        "version": app.version,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }


@app.post("/ocr")
async def ocr(
    schedule: UploadFile = File(...),
    language: str = Form("both"),
    pipeline: ShiftPipeline = Depends(get_pipeline),
) -> Dict[str, str]:
    image_bytes = await _read_upload(schedule)
    log_event(
        logger,
        "ocr_upload_received",
        field_filename=schedule.filename,
        content_type=schedule.content_type,
        size=len(image_bytes),
        language=language,
    )
    return await pipeline.recognizer.recognize_async(image_bytes, language)


@app.post("/parse-shifts")
def parse_shifts(body: ParseShiftsRequest) -> Dict[str, Any]:
    report = extract_shifts_report(body.text, body.employee_name)
    return {
        "shifts": [s.model_dump(by_alias=True, mode="json") for s in report.shifts],
        "strategy": report.strategy.value,
        "skipped": [
            {"line": o.line_no, "reason": o.reason} for o in report.skipped()
        ],
    }


@app.post("/calculate-earnings")
def calculate_earnings(body: CalculateEarningsRequest) -> Dict[str, Any]:
    earnings = compute_earnings(body.shifts, body.pay_rates)
    return {"earnings": earnings.model_dump(by_alias=True, mode="json")}


@app.post("/generate-calendar")
def generate_calendar(body: GenerateCalendarRequest) -> Response:
    try:
        options = CalendarOptions.model_validate(body.options or {})
    except ValidationError as e:
        raise InvalidShiftInput(f"invalid calendar options: {e.error_count()} error(s)") from e
    report = build_calendar_events_report(body.shifts, options)
    ics = render_calendar(
        report.events,
        calendar_name=options.calendar_name,
        tz_name=options.timezone or CALENDAR_TIMEZONE,
        description=CALENDAR_DESCRIPTION,
    )
    filename = calendar_filename(options.calendar_name)
    return Response(
        content=ics,
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.post("/process-schedule")
async def process_schedule(
    schedule: UploadFile = File(...),
    employee_name: str = Form(..., alias="employeeName"),
    language: str = Form("both"),
    pipeline: ShiftPipeline = Depends(get_pipeline),
) -> Dict[str, Any]:
    image_bytes = await _read_upload(schedule)
    result = await pipeline.process(image_bytes, employee_name, language)
    return result.model_dump(by_alias=True, mode="json")


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        app,
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "8001")),
        log_level="info",
        access_log=True,
    )
