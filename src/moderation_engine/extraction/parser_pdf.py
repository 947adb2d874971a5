"""PDF text extractor using PyMuPDF."""

from __future__ import annotations

import pymupdf

from moderation_engine.exceptions import ExtractionFailed


class PDFExtractor:
    @property
    def supported_types(self) -> list[str]:
        return ["application/pdf", ".pdf"]

    def extract(self, content: bytes) -> str:
        try:
            with pymupdf.open(stream=content, filetype="pdf") as doc:
                text = "\n".join(page.get_text() for page in doc)
        except Exception as e:
            raise ExtractionFailed(f"PDF parsing failed: {e}") from e

        if not text.strip():
            raise ExtractionFailed("PDF parsing produced no text")
        return text
