"""Reporting utilities for insertion runs."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from .orchestrator import RunSummary

REPORT_FORMATS = (".csv", ".xlsx")
REPORT_COLUMNS = ["file", "status", "page", "rule", "message"]


def summary_frame(summary: RunSummary) -> pd.DataFrame:
    return pd.DataFrame([item.to_dict() for item in summary.outcomes], columns=REPORT_COLUMNS)


def check_report_path(path: Path) -> str:
    """Return the lower-cased report suffix; raise ``ValueError`` for unsupported formats."""

    suffix = path.suffix.lower()
    if suffix not in REPORT_FORMATS:
        raise ValueError(f"Unsupported report format: {path.suffix or '<none>'} (use .csv or .xlsx)")
    return suffix


def export_report(summary: RunSummary, path: Path) -> Path:
    """Write per-file outcomes to ``.csv`` or ``.xlsx``."""

    suffix = check_report_path(path)

    frame = summary_frame(summary)
    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        frame.to_csv(path, index=False, encoding="utf-8")
    else:
        frame.to_excel(path, index=False, sheet_name="outcomes", engine="openpyxl")
    return path


__all__ = ["REPORT_COLUMNS", "REPORT_FORMATS", "check_report_path", "export_report", "summary_frame"]
