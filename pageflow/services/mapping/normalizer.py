"""File name normalization used by the mapping table and the matcher."""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[\\/]")
_PDF_SUFFIXES = (".pdf", ".PDF")


def final_segment(name: str) -> str:
    """Return the last path segment of ``name``; both slash kinds separate segments."""

    parts = [part for part in _SEPARATORS.split(name) if part]
    if not parts:
        return name
    return parts[-1]


def normalize(name: str) -> str:
    """Drop directories and a trailing ``.pdf``/``.PDF`` suffix.

    Only those two casings are recognized: ``"a/b/report.pdf" -> "report"``,
    ``"report.Pdf"`` stays ``"report.Pdf"``.
    """

    segment = final_segment(name)
    for suffix in _PDF_SUFFIXES:
        if segment.endswith(suffix):
            return segment[: -len(suffix)]
    return segment


def extract_base_identity(name: str) -> str:
    """Collapse duplicate-suffix variants to their shared base.

    ``"report (1).pdf"``, ``"report(2).pdf"`` and ``"report.pdf"`` all give
    ``"report"``. The cut happens at the first ``" ("``, otherwise at the
    first ``"("``.
    """

    normalized = normalize(name)
    pos = normalized.find(" (")
    if pos < 0:
        pos = normalized.find("(")
    if pos >= 0:
        normalized = normalized[:pos]
    return normalized.strip()


__all__ = ["extract_base_identity", "final_segment", "normalize"]
