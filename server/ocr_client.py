# ocr_client.py
"""
Text recognition for schedule images (Tesseract).

The rest of the system only sees `{"text": ...}`; swapping the engine means
replacing this module.
"""
from __future__ import annotations

import asyncio
import functools as _functools
import time
from typing import Dict, Optional, Tuple

import pytesseract
from PIL import Image
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from config import OCR_MAX_ATTEMPTS, OCR_TIMEOUT, TESSERACT_CMD, thread_pool
from image_processing import ScheduleImageProcessor
from logging_utils import get_logger, log_event

logger = get_logger("shiftintel.ocr")

_DIGITS_AND_MARKS = "0123456789:/-."
_LATIN = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
_HEBREW = "אבגדהוזחטיכךלמםנןסעפףצץקרשת"

# language hint -> (tesseract languages, character whitelist)
LANGUAGE_PROFILES: Dict[str, Tuple[str, str]] = {
    "hebrew": ("heb", _HEBREW + _DIGITS_AND_MARKS),
    "english": ("eng", _DIGITS_AND_MARKS + _LATIN),
    "both": ("heb+eng", _HEBREW + _DIGITS_AND_MARKS + _LATIN),
}
DEFAULT_LANGUAGE = "both"


def ocr_profile(language: Optional[str]) -> Tuple[str, str]:
    return LANGUAGE_PROFILES.get((language or "").strip().lower(), LANGUAGE_PROFILES[DEFAULT_LANGUAGE])


def build_tesseract_config(whitelist: str) -> str:
    # psm 6: a single uniform block of text (table rows)
    return f"--psm 6 -c preserve_interword_spaces=1 -c tessedit_char_whitelist={whitelist}"


class TesseractRecognizer:
    def __init__(self, tesseract_cmd: Optional[str] = TESSERACT_CMD, timeout: int = OCR_TIMEOUT) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.timeout = timeout

    @retry(
        stop=stop_after_attempt(OCR_MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        retry=retry_if_exception_type((pytesseract.TesseractError, RuntimeError)),
        reraise=True,
    )
    def _image_to_string(self, image: Image.Image, lang: str, config: str) -> str:
        return pytesseract.image_to_string(image, lang=lang, config=config, timeout=self.timeout)

    def recognize(self, image_bytes: bytes, language: Optional[str] = None) -> Dict[str, str]:
        t0 = time.time()
        img = ScheduleImageProcessor.decode(image_bytes)
        prepared = ScheduleImageProcessor.prepare_for_ocr(img)
        lang, whitelist = ocr_profile(language)

        log_event(logger.logger, "ocr_started", lang=lang, size_bytes=len(image_bytes))
        with logger.timed("tesseract"):
            text = self._image_to_string(Image.fromarray(prepared), lang, build_tesseract_config(whitelist))
        log_event(
            logger.logger,
            "ocr_finished",
            lang=lang,
            chars=len(text),
            lines=len(text.splitlines()),
            duration_ms=int((time.time() - t0) * 1000),
        )
        return {"text": text}

    async def recognize_async(self, image_bytes: bytes, language: Optional[str] = None) -> Dict[str, str]:
        return await asyncio.get_running_loop().run_in_executor(
            thread_pool,
            _functools.partial(self.recognize, image_bytes, language),
        )
