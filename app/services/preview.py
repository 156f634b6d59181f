import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import fitz  # PyMuPDF

from app.core.config import Settings
from app.services.storage import FileBlob


@dataclass(frozen=True)
class ConversionResult:
    file: FileBlob | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.file is not None and not self.error


class PreviewConverter(ABC):
    @abstractmethod
    async def convert(self, file: FileBlob) -> ConversionResult:
        raise NotImplementedError


def render_first_page_png(pdf_bytes: bytes, *, scale: float) -> bytes:
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        if doc.page_count == 0:
            raise ValueError("PDF has no pages to render")
        page = doc.load_page(0)
        pixmap = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
        return pixmap.tobytes("png")


class PdfPreviewConverter(PreviewConverter):
    """Renders the first page of a PDF to PNG. Failures are reported in the result, never raised."""

    def __init__(self, *, scale: float = 4.0) -> None:
        if scale <= 0:
            raise ValueError("Preview scale must be positive")
        self.scale = scale

    async def convert(self, file: FileBlob) -> ConversionResult:
        try:
            png_bytes = await asyncio.to_thread(render_first_page_png, file.content, scale=self.scale)
        except Exception as exc:
            return ConversionResult(error=f"Failed to convert PDF: {exc}")

        if not png_bytes:
            return ConversionResult(error="Failed to create image blob")

        stem = Path(file.filename).stem or "resume"
        return ConversionResult(file=FileBlob(filename=f"{stem}.png", content=png_bytes, content_type="image/png"))


def build_preview_converter(settings: Settings) -> PreviewConverter:
    return PdfPreviewConverter(scale=settings.preview_scale)
