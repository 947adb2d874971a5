"""Registry mapping content types and file extensions to extractors."""

from __future__ import annotations

import asyncio
from pathlib import Path

from moderation_engine.exceptions import UnsupportedFormat
from moderation_engine.extraction.parser_image import ImageOCRExtractor
from moderation_engine.extraction.parser_pdf import PDFExtractor
from moderation_engine.extraction.parser_text import PlainTextExtractor
from moderation_engine.models.domain import Blob
from moderation_engine.observability.logger import get_logger
from moderation_engine.protocols.extractor import TextExtractor

logger = get_logger("extraction")


class ExtractorRegistry:
    def __init__(self) -> None:
        self._extractors: dict[str, TextExtractor] = {}

    def register(self, content_type: str, extractor: TextExtractor) -> None:
        self._extractors[content_type.lower()] = extractor

    def get_extractor(self, content_type: str | None, file_name: str | None = None) -> TextExtractor:
        """Resolve by declared MIME type first, then by file extension."""
        if content_type:
            mime = content_type.split(";", 1)[0].strip().lower()
            extractor = self._extractors.get(mime)
            if extractor is not None:
                return extractor

        ext = Path(file_name).suffix.lower() if file_name else ""
        extractor = self._extractors.get(ext) if ext else None
        if extractor is None:
            raise UnsupportedFormat(
                f"Unsupported file format (content type '{content_type}', extension '{ext}'). "
                f"Supported: {self.supported_types()}"
            )
        return extractor

    def supported_types(self) -> list[str]:
        return list(self._extractors.keys())

    async def extract(self, blob: Blob) -> str:
        extractor = self.get_extractor(blob.content_type, blob.file_name)
        text = await asyncio.to_thread(extractor.extract, blob.content)
        logger.info(
            "extracted",
            file_name=blob.file_name,
            extractor=type(extractor).__name__,
            chars=len(text),
        )
        return text


def create_default_registry(ocr_language: str = "eng") -> ExtractorRegistry:
    """Create a registry with all built-in extractors."""
    registry = ExtractorRegistry()
    extractors: list[TextExtractor] = [
        PlainTextExtractor(),
        PDFExtractor(),
        ImageOCRExtractor(language=ocr_language),
    ]
    for extractor in extractors:
        for content_type in extractor.supported_types:
            registry.register(content_type, extractor)
    return registry
