"""`pageflow_io` top-level package exports the IO helpers for Excel and PDF flows."""

# Module responsibilities:
# - Re-export high-level interfaces for worksheet row reading and PDF page composition.
# - Provide package version placeholder for future packaging.

from __future__ import annotations

from .excel_reader import read_rows
from .pdf_io import (
    HAS_PYPDF2,
    PdfInfo,
    PdfProcessingError,
    prepend_page,
    read_info,
)

__all__ = [
    "read_rows",
    "HAS_PYPDF2",
    "PdfInfo",
    "PdfProcessingError",
    "read_info",
    "prepend_page",
]

__version__ = "0.1.0"
