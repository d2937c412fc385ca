# pipeline.py
from typing import Dict, Optional, Union

from earnings import EarningsEngine
from extraction_engine import ShiftExtractionEngine
from logging_utils import get_logger
logger = get_logger("shiftintel.pipeline")
from models import PayRateConfig, ScheduleResult
from ocr_client import TesseractRecognizer


class ShiftPipeline:
    """Schedule image -> recognized text -> shifts -> earnings, for one employee."""

    def __init__(
        self,
        recognizer: Optional[TesseractRecognizer] = None,
        extractor: Optional[ShiftExtractionEngine] = None,
    ) -> None:
        self.recognizer = recognizer or TesseractRecognizer()
        self.extractor = extractor or ShiftExtractionEngine()

    async def process(
        self,
        image_bytes: bytes,
        employee_name: str,
        language: Optional[str] = None,
        rates: Union[PayRateConfig, Dict, None] = None,
    ) -> ScheduleResult:
        timing: Dict[str, float] = {}
        logger.start_timer("complete_pipeline")

        logger.start_timer("ocr")
        recognized = await self.recognizer.recognize_async(image_bytes, language)
        timing["ocr"] = logger.end_timer("ocr")

        logger.start_timer("extract")
        report = self.extractor.extract(recognized["text"], employee_name)
        timing["extract"] = logger.end_timer("extract")

        logger.start_timer("earnings")
        earnings = EarningsEngine(rates, weekend_days=self.extractor.weekend_days).compute(report.shifts)
        timing["earnings"] = logger.end_timer("earnings")

        timing["total"] = logger.end_timer("complete_pipeline")
        logger.info(
            f"Schedule processed: {len(report.shifts)} shifts via {report.strategy.value}, "
            f"{earnings.total_hours:.1f}h, total {earnings.total_earnings:.2f}"
        )

        return ScheduleResult(
            text=recognized["text"],
            shifts=report.shifts,
            strategy=report.strategy,
            earnings=earnings,
            processing_time=timing,
        )
