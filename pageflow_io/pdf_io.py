"""PDF basic read/write utilities."""

# Module responsibilities:
# - Surface page counts and metadata through PyPDF2.
# - Compose a new PDF from one page of a source document followed by a whole target document.
# - Guard against encrypted or malformed PDFs with explicit failures.

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict

try:  # PyPDF2 is required for the in-process backend only.
    from PyPDF2 import PdfReader, PdfWriter
    from PyPDF2.errors import PdfReadError

    HAS_PYPDF2 = True
except ModuleNotFoundError:  # pragma: no cover - handled by runtime checks
    PdfReader = PdfWriter = None  # type: ignore
    PdfReadError = Exception  # type: ignore
    HAS_PYPDF2 = False

from .utils.log import get_logger

logger = get_logger("pdf_io")


class PdfProcessingError(RuntimeError):
    """Raised when PDF operations fail."""


@dataclass(frozen=True)
class PdfInfo:
    """Metadata summary for a PDF file."""

    path: Path
    page_count: int
    metadata: Dict[str, str]
    encrypted: bool


def _resolve_pdf_reader(path: Path):  # type: ignore[no-untyped-def]
    if not HAS_PYPDF2:
        raise PdfProcessingError("PyPDF2 is required for this operation. Install PyPDF2>=3.0.")
    if not path.exists():
        raise FileNotFoundError(f"PDF file not found: {path}")
    try:
        reader = PdfReader(path)  # type: ignore[operator]
    except (PdfReadError, ValueError) as exc:  # type: ignore[misc]
        raise PdfProcessingError(f"Failed to open PDF: {exc}") from exc
    if reader.is_encrypted:  # type: ignore[union-attr]
        raise PdfProcessingError("Encrypted PDFs are not supported")
    return reader


def read_info(path: Path) -> PdfInfo:
    """Read metadata and page count for a PDF file."""

    reader = _resolve_pdf_reader(path)
    try:
        metadata = {k.lstrip("/"): str(v) for k, v in (reader.metadata or {}).items()}
        page_count = len(reader.pages)
    except PdfReadError as exc:  # type: ignore[misc]
        raise PdfProcessingError(f"Failed to read PDF structure: {exc}") from exc

    logger.info(
        "PDF info read",
        extra={"path": str(path), "page_count": page_count},
    )
    return PdfInfo(
        path=path,
        page_count=page_count,
        metadata=metadata,
        encrypted=False,
    )


def prepend_page(source: Path, page_number: int, target: Path, out_path: Path) -> Path:
    """Write ``out_path`` holding 1-based ``page_number`` of ``source`` then every page of ``target``."""

    source_reader = _resolve_pdf_reader(source)
    target_reader = _resolve_pdf_reader(target)
    writer = PdfWriter()  # type: ignore[operator]

    try:
        total_pages = len(source_reader.pages)
        if page_number < 1 or page_number > total_pages:
            raise PdfProcessingError(
                f"Page {page_number} out of range (document has {total_pages} pages)"
            )
        writer.add_page(source_reader.pages[page_number - 1])  # type: ignore[index]
        for page in target_reader.pages:
            writer.add_page(page)
    except PdfReadError as exc:  # type: ignore[misc]
        raise PdfProcessingError(f"Failed to read PDF pages: {exc}") from exc

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("wb") as fh:
        writer.write(fh)

    logger.info(
        "Prepended page",
        extra={"source": str(source), "page": page_number, "target": str(target), "output": str(out_path)},
    )
    return out_path
