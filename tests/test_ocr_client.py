"""
Tests for image preparation and the Tesseract adapter.

pytesseract.image_to_string is replaced, so no Tesseract binary is needed.
"""

import cv2
import numpy as np
import pytesseract
import pytest

import ocr_client
from image_processing import ScheduleImageProcessor
from models import InvalidShiftInput
from ocr_client import TesseractRecognizer, build_tesseract_config, ocr_profile


def _schedule_png() -> bytes:
    img = np.full((80, 320, 3), 255, dtype=np.uint8)
    cv2.putText(img, "3/8 4/8 5/8", (10, 50), cv2.FONT_HERSHEY_SIMPLEX, 1.0, (0, 0, 0), 2)
    ok, buf = cv2.imencode(".png", img)
    assert ok
    return buf.tobytes()


class FakeTesseract:
    def __init__(self, text="Dana בוקר", failures=0):
        self.text = text
        self.failures = failures
        self.calls = []

    def __call__(self, image, lang=None, config=None, timeout=None):
        self.calls.append({"lang": lang, "config": config, "size": image.size})
        if self.failures:
            self.failures -= 1
            raise pytesseract.TesseractError(1, "engine hiccup")
        return self.text


class TestProfiles:
    @pytest.mark.parametrize(
        "language, lang",
        [("hebrew", "heb"), ("english", "eng"), ("both", "heb+eng"), (" HEBREW ", "heb"), (None, "heb+eng"), ("klingon", "heb+eng")],
    )
    def test_language_mapping(self, language, lang):
        assert ocr_profile(language)[0] == lang

    def test_whitelists(self):
        assert "ם" in ocr_profile("hebrew")[1]
        assert "A" not in ocr_profile("hebrew")[1]
        assert ":" in ocr_profile("english")[1]

    def test_config(self):
        config = build_tesseract_config("0123")
        assert config.startswith("--psm 6")
        assert "preserve_interword_spaces=1" in config
        assert config.endswith("tessedit_char_whitelist=0123")


class TestImageProcessing:
    def test_empty_upload(self):
        with pytest.raises(InvalidShiftInput):
            ScheduleImageProcessor.decode(b"")

    def test_not_an_image(self):
        with pytest.raises(InvalidShiftInput):
            ScheduleImageProcessor.decode(b"definitely not a png")

    def test_prepared_image_is_grayscale(self):
        img = ScheduleImageProcessor.decode(_schedule_png())
        prepared = ScheduleImageProcessor.prepare_for_ocr(img)

        assert prepared.ndim == 2
        assert prepared.shape == img.shape[:2]

    def test_analysis_fields(self):
        info = ScheduleImageProcessor.analyze_image(ScheduleImageProcessor.decode(_schedule_png()))
        assert info["width"] == 320
        assert info["height"] == 80
        assert {"sharpness", "contrast", "needs_enhancement"} <= set(info)


class TestRecognizer:
    def test_recognize(self, monkeypatch):
        fake = FakeTesseract()
        monkeypatch.setattr(ocr_client.pytesseract, "image_to_string", fake)

        result = TesseractRecognizer().recognize(_schedule_png(), "english")

        assert result == {"text": "Dana בוקר"}
        assert fake.calls[0]["lang"] == "eng"
        assert fake.calls[0]["size"] == (320, 80)

    def test_transient_failure_retried(self, monkeypatch):
        fake = FakeTesseract(failures=1)
        monkeypatch.setattr(ocr_client.pytesseract, "image_to_string", fake)

        result = TesseractRecognizer().recognize(_schedule_png(), "hebrew")

        assert result["text"] == "Dana בוקר"
        assert len(fake.calls) == 2

    def test_bad_bytes_not_sent_to_engine(self, monkeypatch):
        fake = FakeTesseract()
        monkeypatch.setattr(ocr_client.pytesseract, "image_to_string", fake)

        with pytest.raises(InvalidShiftInput):
            TesseractRecognizer().recognize(b"nope")
        assert fake.calls == []
