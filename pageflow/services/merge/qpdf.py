"""qpdf command line adapter for page counting and page merging."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Sequence

from pageflow.core.errors import ToolError
from pageflow.core.logger import get_logger

from .base import PdfToolkit, ToolResult

LOGGER = get_logger()

QPDF_INSTALL_HINT = (
    "qpdf is not installed or not in PATH. Install it from "
    "https://github.com/qpdf/qpdf/releases (Windows: `choco install qpdf` or "
    "`winget install qpdf`; Debian/Ubuntu: `apt install qpdf`; macOS: "
    "`brew install qpdf`) and make sure the executable is on PATH."
)

_STDERR_TAIL = 2000


class QpdfToolkit(PdfToolkit):
    """Run qpdf as a subprocess.

    ``tolerate_warnings`` passes ``--warning-exit-0`` so that warnings, which
    are common with non-standard PDFs, do not count as failures.
    """

    name = "qpdf"

    def __init__(
        self,
        binary: str = "qpdf",
        *,
        tolerate_warnings: bool = True,
        timeout_sec: float | None = None,
        logger=None,
    ) -> None:
        self.binary = binary
        self.tolerate_warnings = tolerate_warnings
        self.timeout_sec = timeout_sec
        self.logger = logger or LOGGER

    def is_available(self) -> bool:
        try:
            proc = self._run(["--version"])
        except (OSError, subprocess.TimeoutExpired):
            return False
        return proc.returncode == 0

    def page_count(self, document: Path) -> int:
        try:
            proc = self._run(["--show-npages", str(document)])
        except FileNotFoundError as exc:
            raise ToolError(f"{self.binary} not found", diagnostics=str(exc)) from exc
        except subprocess.TimeoutExpired as exc:
            raise ToolError(f"qpdf timed out reading {document.name}") from exc
        if proc.returncode != 0:
            stderr = _tail(proc.stderr)
            raise ToolError(f"qpdf failed: {stderr}", diagnostics=stderr)
        text = (proc.stdout or "").strip()
        try:
            return int(text)
        except ValueError as exc:
            raise ToolError(f"qpdf returned an unreadable page count: {text!r}", diagnostics=text) from exc

    def merge(self, source: Path, page_number: int, target: Path, output: Path) -> ToolResult:
        args = self.merge_args(source, page_number, target, output)
        self.logger.debug("qpdf merge args=%s", args)
        try:
            proc = self._run(args)
        except FileNotFoundError as exc:
            return ToolResult(False, f"{self.binary} not found: {exc}")
        except subprocess.TimeoutExpired:
            return ToolResult(False, f"qpdf timed out after {self.timeout_sec}s")
        if proc.returncode != 0:
            return ToolResult(False, f"Failed to merge PDFs with qpdf: {_tail(proc.stderr)}")
        return ToolResult(True, _tail(proc.stderr))

    def merge_args(self, source: Path, page_number: int, target: Path, output: Path) -> list[str]:
        """``qpdf --empty --pages <source> <n> <target> -- <output>``"""

        args: list[str] = []
        if self.tolerate_warnings:
            args.append("--warning-exit-0")
        args.extend(
            [
                "--empty",
                "--pages",
                str(source),
                str(page_number),
                str(target),
                "--",
                str(output),
            ]
        )
        return args

    def install_hint(self) -> str:
        return QPDF_INSTALL_HINT

    def _run(self, args: Sequence[str]) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            [self.binary, *args],
            capture_output=True,
            text=True,
            errors="replace",
            timeout=self.timeout_sec,
        )


def _tail(text: str | None) -> str:
    return (text or "").strip()[-_STDERR_TAIL:]


__all__ = ["QPDF_INSTALL_HINT", "QpdfToolkit"]
