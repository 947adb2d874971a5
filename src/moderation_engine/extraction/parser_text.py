"""Plain text extractor."""

from __future__ import annotations

from moderation_engine.exceptions import UnsupportedEncoding


class PlainTextExtractor:
    @property
    def supported_types(self) -> list[str]:
        return ["text/plain", ".txt"]

    def extract(self, content: bytes) -> str:
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise UnsupportedEncoding(f"Text payload is not valid UTF-8: {e}") from e
