"""Image extractor: OCR via Tesseract (pytesseract + Pillow)."""

from __future__ import annotations

import io

import pytesseract
from PIL import Image

from moderation_engine.exceptions import ExtractionFailed


class ImageOCRExtractor:
    def __init__(self, language: str = "eng") -> None:
        self._language = language

    @property
    def supported_types(self) -> list[str]:
        return ["image/png", "image/jpeg", ".png", ".jpg", ".jpeg"]

    def extract(self, content: bytes) -> str:
        try:
            with Image.open(io.BytesIO(content)) as image:
                text = pytesseract.image_to_string(image, lang=self._language)
        except Exception as e:
            raise ExtractionFailed(f"OCR failed: {e}") from e
        # An image without legible text is not a recognizer error.
        return (text or "").strip()
