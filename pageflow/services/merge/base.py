from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pageflow.core.errors import ConfigError

if TYPE_CHECKING:  # pragma: no cover
    from pageflow.core.settings import RunConfig


@dataclass(frozen=True)
class ToolResult:
    """Result of a merge call; ``message`` carries diagnostics on failure."""

    ok: bool
    message: str = ""


class PdfToolkit(ABC):
    """Interface for the page-count and page-merge capability."""

    name: str = "toolkit"

    @abstractmethod
    def is_available(self) -> bool:
        """Return True when the backing tool can be used."""

    @abstractmethod
    def page_count(self, document: Path) -> int:
        """Return the total page count of ``document`` or raise ``ToolError``."""

    @abstractmethod
    def merge(self, source: Path, page_number: int, target: Path, output: Path) -> ToolResult:
        """Write ``output`` = page ``page_number`` of ``source`` followed by all pages of ``target``."""

    def install_hint(self) -> str:
        return ""


def toolkit_from_config(config: "RunConfig") -> PdfToolkit:
    backend = (config.backend or "qpdf").lower()
    if backend == "qpdf":
        from .qpdf import QpdfToolkit

        return QpdfToolkit(
            binary=config.qpdf_binary,
            tolerate_warnings=config.tolerate_warnings,
            timeout_sec=config.tool_timeout_sec,
        )
    if backend in {"pypdf", "pypdf2"}:
        from .pypdf import PyPdfToolkit

        return PyPdfToolkit()
    raise ConfigError(f"Unknown page toolkit backend: {backend}")
