"""In-process page toolkit backed by PyPDF2."""

from __future__ import annotations

from pathlib import Path

from pageflow.core.errors import ToolError
from pageflow_io.pdf_io import HAS_PYPDF2, PdfProcessingError, prepend_page, read_info

from .base import PdfToolkit, ToolResult


class PyPdfToolkit(PdfToolkit):
    """Same contract as the qpdf toolkit without an external executable."""

    name = "pypdf"

    def is_available(self) -> bool:
        return HAS_PYPDF2

    def page_count(self, document: Path) -> int:
        try:
            return read_info(document).page_count
        except (PdfProcessingError, FileNotFoundError) as exc:
            raise ToolError(f"PyPDF2 failed: {exc}", diagnostics=str(exc)) from exc

    def merge(self, source: Path, page_number: int, target: Path, output: Path) -> ToolResult:
        try:
            prepend_page(source, page_number, target, output)
        except (PdfProcessingError, FileNotFoundError) as exc:
            return ToolResult(False, f"Failed to merge PDFs with PyPDF2: {exc}")
        return ToolResult(True)

    def install_hint(self) -> str:
        return "PyPDF2 is not installed. Install PyPDF2>=3.0."


__all__ = ["PyPdfToolkit"]
