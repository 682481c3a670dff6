"""Excel input helpers."""

# Module responsibilities:
# - Provide a thin wrapper around openpyxl that yields raw, typed worksheet rows.
# - Emit structured logs for traceability and future auditing.

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import List, Optional, Tuple, Union

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .utils.log import get_logger

logger = get_logger("excel_reader")

SheetType = Union[str, int, None]
RawRow = Tuple[object, ...]


def read_rows(path: Path, sheet: SheetType = None, max_columns: Optional[int] = None) -> List[RawRow]:
    """Load every row of a worksheet as a tuple of raw cell values.

    Cell values keep the types openpyxl reports (``str``, ``int``, ``float``,
    ``bool``, ``datetime`` or ``None``); formulas are read as their cached
    values. No header row is assumed.

    Args:
        path: Path to the workbook.
        sheet: Sheet name or index; defaults to the first sheet.
        max_columns: Optional number of leading columns to keep per row.

    Returns:
        List of row tuples in worksheet order.

    Raises:
        FileNotFoundError: When the Excel file does not exist.
        ValueError: When the workbook cannot be parsed or the sheet is missing.
    """

    if not path.exists():
        raise FileNotFoundError(f"Source workbook not found: {path}")

    logger.info("Reading Excel workbook", extra={"path": str(path), "sheet": sheet})

    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        logger.error("Failed to read Excel workbook", extra={"error": str(exc)})
        raise ValueError(f"Failed to open workbook {path.name}: {exc}") from exc

    try:
        worksheet = _select_sheet(workbook, sheet)
        rows: List[RawRow] = []
        for values in worksheet.iter_rows(values_only=True, max_col=max_columns):
            rows.append(tuple(values))
    finally:
        workbook.close()

    logger.info("Excel workbook loaded", extra={"rows": len(rows), "sheet": worksheet.title})
    return rows


def _select_sheet(workbook, sheet: SheetType):  # type: ignore[no-untyped-def]
    names = workbook.sheetnames
    if not names:
        raise ValueError("Workbook contains no worksheets")
    if sheet is None:
        return workbook[names[0]]
    if isinstance(sheet, int):
        if sheet < 0 or sheet >= len(names):
            raise ValueError(f"Sheet index {sheet} out of range (workbook has {len(names)} sheets)")
        return workbook[names[sheet]]
    if sheet not in names:
        raise ValueError(f"Sheet not found: {sheet}")
    return workbook[sheet]
