"""Tests for text extractors and the extractor registry."""

from __future__ import annotations

import io

import pymupdf
import pytest
from PIL import Image

from moderation_engine.exceptions import ExtractionFailed, UnsupportedEncoding, UnsupportedFormat
from moderation_engine.extraction import parser_image
from moderation_engine.extraction.extractor_registry import create_default_registry
from moderation_engine.extraction.parser_image import ImageOCRExtractor
from moderation_engine.extraction.parser_pdf import PDFExtractor
from moderation_engine.extraction.parser_text import PlainTextExtractor
from moderation_engine.models.domain import Blob


def _pdf_bytes(text: str | None) -> bytes:
    doc = pymupdf.open()
    page = doc.new_page()
    if text:
        page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), "white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def registry():
    return create_default_registry()


def test_plain_text_decodes_utf8():
    assert PlainTextExtractor().extract("naïve café".encode("utf-8")) == "naïve café"


def test_plain_text_rejects_invalid_utf8():
    with pytest.raises(UnsupportedEncoding):
        PlainTextExtractor().extract(b"\xff\xfe\xfa bad bytes")


def test_pdf_extracts_page_text():
    text = PDFExtractor().extract(_pdf_bytes("You are a loser"))
    assert "You are a loser" in text


def test_pdf_without_text_fails():
    with pytest.raises(ExtractionFailed, match="no text"):
        PDFExtractor().extract(_pdf_bytes(None))


def test_corrupt_pdf_fails():
    with pytest.raises(ExtractionFailed):
        PDFExtractor().extract(b"%PDF-1.4 this is not really a pdf")


def test_ocr_returns_recognized_text(monkeypatch):
    calls = []

    def fake_image_to_string(image, lang=None):
        calls.append((image.size, lang))
        return "  go away loser \n"

    monkeypatch.setattr(parser_image.pytesseract, "image_to_string", fake_image_to_string)

    text = ImageOCRExtractor(language="eng").extract(_png_bytes())

    assert text == "go away loser"
    assert calls == [((40, 20), "eng")]


def test_ocr_blank_image_is_empty_text(monkeypatch):
    monkeypatch.setattr(parser_image.pytesseract, "image_to_string", lambda image, lang=None: "")
    assert ImageOCRExtractor().extract(_png_bytes()) == ""


def test_ocr_rejects_non_image_bytes():
    with pytest.raises(ExtractionFailed, match="OCR failed"):
        ImageOCRExtractor().extract(b"definitely not an image")


@pytest.mark.parametrize(
    "content_type, file_name, expected",
    [
        ("text/plain", "notes.txt", PlainTextExtractor),
        ("text/plain; charset=utf-8", None, PlainTextExtractor),
        ("application/pdf", "report.pdf", PDFExtractor),
        ("image/png", "shot.png", ImageOCRExtractor),
        ("image/jpeg", "photo.jpg", ImageOCRExtractor),
        ("application/octet-stream", "photo.JPEG", ImageOCRExtractor),
        (None, "essay.txt", PlainTextExtractor),
    ],
)
def test_registry_resolution(registry, content_type, file_name, expected):
    assert isinstance(registry.get_extractor(content_type, file_name), expected)


@pytest.mark.parametrize(
    "content_type, file_name",
    [
        ("application/msword", "letter.doc"),
        ("application/zip", "archive.zip"),
        (None, None),
        ("application/octet-stream", "README"),
    ],
)
def test_registry_rejects_unsupported(registry, content_type, file_name):
    with pytest.raises(UnsupportedFormat, match="Unsupported file format"):
        registry.get_extractor(content_type, file_name)


async def test_registry_extract_runs_parser(registry):
    blob = Blob(content=b"hello there", file_name="hi.txt", content_type="text/plain")
    assert await registry.extract(blob) == "hello there"


def test_supported_types(registry):
    types = registry.supported_types()
    for expected in ("text/plain", "application/pdf", "image/png", "image/jpeg", ".txt", ".pdf"):
        assert expected in types
