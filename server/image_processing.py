# image_processing.py
from typing import Any, Dict

import cv2
import numpy as np

import logging
logger = logging.getLogger("shiftintel.image_processing")

from models import InvalidShiftInput


class ScheduleImageProcessor:
    """Clean up a photographed or scanned schedule before text recognition."""

    @staticmethod
    def decode(image_bytes: bytes) -> np.ndarray:
        if not image_bytes:
            raise InvalidShiftInput("empty image upload")
        arr = np.frombuffer(image_bytes, dtype=np.uint8)
        img = cv2.imdecode(arr, cv2.IMREAD_COLOR)
        if img is None:
            raise InvalidShiftInput("upload is not a readable image")
        return img

    @staticmethod
    def analyze_image(img: np.ndarray) -> Dict[str, Any]:
        gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY) if img.ndim == 3 else img
        lap_var = cv2.Laplacian(gray, cv2.CV_64F).var()
        contrast = gray.std()
        h, w = gray.shape[:2]
        info = {
            "sharpness": float(lap_var),
            "contrast": float(contrast),
            "width": int(w),
            "height": int(h),
            "needs_enhancement": lap_var < 100 or contrast < 35,
            "is_very_blurry": lap_var < 50,
            "is_low_contrast": contrast < 25,
        }
        logger.info(
            f"Image analysis: sharp={info['sharpness']:.1f}, "
            f"contrast={info['contrast']:.1f}, size={w}x{h}"
        )
        return info

    @staticmethod
    def prepare_for_ocr(img: np.ndarray) -> np.ndarray:
        """Grayscale, then CLAHE / denoise+sharpen / Otsu as the image needs."""
        analysis = ScheduleImageProcessor.analyze_image(img)
        gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY) if img.ndim == 3 else img

        if not analysis["needs_enhancement"]:
            return gray

        clahe = cv2.createCLAHE(clipLimit=3.0, tileGridSize=(8, 8))
        prepared = clahe.apply(gray)

        if analysis["is_very_blurry"]:
            denoised = cv2.fastNlMeansDenoising(prepared, None, 10, 7, 21)
            kernel = np.array([[-1, -1, -1], [-1, 9, -1], [-1, -1, -1]])
            prepared = cv2.filter2D(denoised, -1, kernel)

        if analysis["is_low_contrast"]:
            _, prepared = cv2.threshold(
                prepared, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU
            )

        return prepared
