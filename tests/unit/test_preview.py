import asyncio

import fitz
import pytest

from app.core.config import Settings
from app.services.preview import PdfPreviewConverter, build_preview_converter
from app.services.storage import FileBlob


def _pdf_bytes(pages: int = 2) -> bytes:
    doc = fitz.open()
    for number in range(pages):
        page = doc.new_page(width=200, height=300)
        page.insert_text((20, 40), f"Page {number + 1}")
    content = doc.tobytes()
    doc.close()
    return content


def test_first_page_is_rendered_as_png():
    converter = PdfPreviewConverter(scale=2.0)
    blob = FileBlob(filename="Jordan_Lee.pdf", content=_pdf_bytes(), content_type="application/pdf")

    result = asyncio.run(converter.convert(blob))

    assert result.ok
    assert result.file.filename == "Jordan_Lee.png"
    assert result.file.content_type == "image/png"
    assert result.file.content.startswith(b"\x89PNG")

    rendered = fitz.Pixmap(result.file.content)
    assert (rendered.width, rendered.height) == (400, 600)


def test_invalid_pdf_is_reported_not_raised():
    blob = FileBlob(filename="broken.pdf", content=b"%PDF-1.7 truncated", content_type="application/pdf")

    result = asyncio.run(PdfPreviewConverter().convert(blob))

    assert not result.ok
    assert result.file is None
    assert result.error.startswith("Failed to convert PDF")


def test_scale_must_be_positive():
    with pytest.raises(ValueError):
        PdfPreviewConverter(scale=0)


def test_builder_uses_configured_scale():
    converter = build_preview_converter(Settings(preview_scale=1.5))

    assert converter.scale == 1.5
