from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep log files and work directories out of the user's home during tests.
_SESSION_HOME = Path(tempfile.mkdtemp(prefix="pageflow-tests-"))
os.environ.setdefault("PAGEFLOW_HOME", str(_SESSION_HOME))
os.environ.setdefault("PAGEFLOW_LOG_DIR", str(_SESSION_HOME / "logs"))

_PAGEFLOW_ENV = (
    "PAGEFLOW_SOURCE_DIR",
    "PAGEFLOW_BACKEND",
    "PAGEFLOW_QPDF",
    "PAGEFLOW_TOOL_TIMEOUT_SEC",
)


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", r"\(").replace(")", r"\)")


def build_pdf_bytes(page_texts: Sequence[str]) -> bytes:
    """Return a minimal PDF with one Helvetica text line per page."""

    page_count = len(page_texts)
    kids = " ".join(f"{4 + 2 * idx} 0 R" for idx in range(page_count))
    objects = [
        b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n",
        f"2 0 obj\n<< /Type /Pages /Kids [{kids}] /Count {page_count} >>\nendobj\n".encode("utf-8"),
        b"3 0 obj\n<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>\nendobj\n",
    ]
    for idx, text in enumerate(page_texts):
        page_id = 4 + 2 * idx
        content_id = page_id + 1
        stream = f"BT\n/F1 14 Tf\n72 720 Td\n({_escape(text)}) Tj\nET\n".encode("utf-8")
        objects.append(
            f"{page_id} 0 obj\n"
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792]"
            f" /Contents {content_id} 0 R /Resources << /Font << /F1 3 0 R >> >> >>\n"
            "endobj\n".encode("utf-8")
        )
        objects.append(
            f"{content_id} 0 obj\n<< /Length {len(stream)} >>\nstream\n".encode("utf-8")
            + stream
            + b"endstream\nendobj\n"
        )

    data = bytearray(b"%PDF-1.4\n")
    offsets = []
    for obj in objects:
        offsets.append(len(data))
        data.extend(obj)
    xref_offset = len(data)
    size = len(objects) + 1
    data.extend(f"xref\n0 {size}\n".encode("utf-8"))
    data.extend(b"0000000000 65535 f \n")
    for offset in offsets:
        data.extend(f"{offset:010d} 00000 n \n".encode("utf-8"))
    data.extend(f"trailer\n<< /Size {size} /Root 1 0 R >>\n".encode("utf-8"))
    data.extend(f"startxref\n{xref_offset}\n%%EOF\n".encode("utf-8"))
    return bytes(data)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _PAGEFLOW_ENV:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_pdf() -> Callable[[Path, Sequence[str]], Path]:
    def _make(path: Path, page_texts: Sequence[str]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(build_pdf_bytes(page_texts))
        return path

    return _make


@pytest.fixture
def make_workbook() -> Callable[[Path, Sequence[Sequence[object]]], Path]:
    from openpyxl import Workbook

    def _make(path: Path, rows: Sequence[Sequence[object]]) -> Path:
        wb = Workbook()
        ws = wb.active
        ws.title = "Mapping"
        for row in rows:
            ws.append(list(row))
        path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(path)
        return path

    return _make
