"""Per-file merge orchestration with validation, replacement and reporting."""

from __future__ import annotations

import os
import shutil
import tempfile
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Literal

from pageflow.core.errors import MergeError, ToolError
from pageflow.core.logger import get_logger
from pageflow.services.mapping import MappingTable, MatchResult, match_filename

from .base import PdfToolkit

OutcomeStatus = Literal["inserted", "skipped", "failed"]
OutcomeCB = Callable[["FileOutcome"], None]


@dataclass(slots=True)
class FileOutcome:
    """Terminal state for one target file."""

    path: Path
    status: OutcomeStatus
    page_number: int | None = None
    rule: str = "none"
    message: str = ""

    @property
    def name(self) -> str:
        return self.path.name

    def to_dict(self) -> dict[str, object]:
        return {
            "file": str(self.path),
            "status": self.status,
            "page": self.page_number,
            "rule": self.rule,
            "message": self.message,
        }


@dataclass(slots=True)
class RunSummary:
    """Counts and per-file outcomes for a run."""

    outcomes: list[FileOutcome] = field(default_factory=list)
    duration: float = 0.0

    def add(self, outcome: FileOutcome) -> None:
        self.outcomes.append(outcome)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for item in self.outcomes if item.status == status)

    @property
    def inserted(self) -> int:
        return self._count("inserted")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def failed(self) -> int:
        return self._count("failed")

    @property
    def planned(self) -> int:
        """Dry-run files that resolved to a valid page (counted within ``skipped``)."""

        return sum(1 for item in self.outcomes if item.status == "skipped" and item.page_number is not None)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def as_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "inserted": self.inserted,
            "skipped": self.skipped,
            "failed": self.failed,
            "planned": self.planned,
            "duration": round(self.duration, 3),
            "files": [item.to_dict() for item in self.outcomes],
        }


class MergeOrchestrator:
    """Insert the mapped reference page at the front of each target PDF.

    Target files are only replaced after the toolkit produced a merged copy
    in a temporary location; every failure before that leaves them untouched.
    """

    def __init__(
        self,
        toolkit: PdfToolkit,
        reference_path: Path,
        reference_page_count: int,
        table: MappingTable,
        *,
        temp_dir: Path | None = None,
        dry_run: bool = False,
        logger=None,
    ) -> None:
        self.toolkit = toolkit
        self.reference_path = reference_path
        self.reference_page_count = reference_page_count
        self.table = table
        self.temp_dir = temp_dir
        self.dry_run = dry_run
        self.logger = logger or get_logger()

    # ------------------------------------------------------------------
    def run(self, targets: Iterable[Path], outcome_cb: OutcomeCB | None = None) -> RunSummary:
        start = time.monotonic()
        summary = RunSummary()
        for path in targets:
            outcome = self.process(path)
            summary.add(outcome)
            if outcome_cb:
                outcome_cb(outcome)
        summary.duration = time.monotonic() - start
        self.logger.info(
            "merge.summary inserted=%s skipped=%s failed=%s",
            summary.inserted,
            summary.skipped,
            summary.failed,
        )
        return summary

    def process(self, path: Path) -> FileOutcome:
        match = match_filename(path.name, self.table)
        if not match.resolved:
            self.logger.warning("merge.skip file=%s reason=no_match", path)
            return FileOutcome(path, "skipped", message="no match in mapping table")

        page_number = match.page_number
        try:
            message = self._insert(path, match)
        except Exception as exc:  # noqa: BLE001
            self.logger.error("merge.failed file=%s page=%s reason=%s", path, page_number, exc)
            return FileOutcome(path, "failed", page_number, match.rule, str(exc))

        if self.dry_run:
            return FileOutcome(path, "skipped", page_number, match.rule, message)
        self.logger.info("merge.inserted file=%s page=%s rule=%s", path, page_number, match.rule)
        return FileOutcome(path, "inserted", page_number, match.rule, message)

    # ------------------------------------------------------------------
    def _insert(self, path: Path, match: MatchResult) -> str:
        page_number = match.page_index + 1  # type: ignore[operator]
        if page_number > self.reference_page_count:
            raise MergeError(
                f"Page number {page_number} exceeds {self.reference_path.name} page count "
                f"({self.reference_page_count})"
            )
        if self.dry_run:
            return f"dry run: would insert page {page_number}"

        temp_output = self._temp_output_path()
        try:
            result = self.toolkit.merge(self.reference_path, page_number, path, temp_output)
            if not result.ok:
                raise ToolError(result.message or f"{self.toolkit.name} merge failed")
            if not temp_output.exists():
                raise MergeError("Failed to create merged PDF")
            shutil.copyfile(temp_output, path)
        finally:
            self._cleanup(temp_output)
        return f"inserted page {page_number}"

    def _temp_output_path(self) -> Path:
        base = self.temp_dir or Path(tempfile.gettempdir())
        base.mkdir(parents=True, exist_ok=True)
        return base / f"merged_output_{os.getpid()}_{uuid.uuid4().hex[:8]}.pdf"

    def _cleanup(self, temp_output: Path) -> None:
        try:
            temp_output.unlink(missing_ok=True)
        except OSError as exc:
            self.logger.warning("merge.cleanup_failed temp=%s reason=%s", temp_output, exc)


__all__ = ["FileOutcome", "MergeOrchestrator", "OutcomeStatus", "RunSummary"]
