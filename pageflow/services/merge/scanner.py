"""Discover target PDFs one directory level below a root."""

from __future__ import annotations

from pathlib import Path

from pageflow.core.errors import MissingInputError


def is_pdf(path: Path) -> bool:
    return path.suffix.lower() == ".pdf"


def scan_targets(root: Path) -> list[Path]:
    """Return PDFs inside the direct child directories of ``root``, sorted by path.

    Files directly in ``root`` and anything deeper than one level are ignored.
    """

    if not root.is_dir():
        raise MissingInputError(f"Directory does not exist: {root}")
    found: list[Path] = []
    try:
        for child in root.iterdir():
            if not child.is_dir():
                continue
            for entry in child.iterdir():
                if entry.is_file() and is_pdf(entry):
                    found.append(entry)
    except OSError as exc:
        raise MissingInputError(f"Failed to scan directories under {root}: {exc}") from exc
    return sorted(found)


__all__ = ["is_pdf", "scan_targets"]
