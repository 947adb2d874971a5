"""Protocol for per-format text extractors."""

from __future__ import annotations

from typing import Protocol


class TextExtractor(Protocol):
    def extract(self, content: bytes) -> str:
        """Returns the UTF-8 text carried by ``content``."""
        ...

    @property
    def supported_types(self) -> list[str]:
        """MIME types and file extensions this extractor handles."""
        ...
