from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .errors import MappingSourceError, MissingInputError, ToolError, ToolUnavailableError
from .logger import get_logger
from .settings import RunConfig
from pageflow.services.mapping import MappingTable, build_mapping_table
from pageflow.services.merge import (
    MergeOrchestrator,
    PdfToolkit,
    RunSummary,
    scan_targets,
    toolkit_from_config,
)
from pageflow.services.merge.orchestrator import OutcomeCB
from pageflow_io.excel_reader import read_rows


ProgressCB = Callable[[str, str], None]


@dataclass
class PreparedRun:
    """Inputs validated once before any target file is touched."""

    reference_page_count: int
    table: MappingTable


def load_mapping_table(config: RunConfig) -> MappingTable:
    """Read the first two columns of the mapping sheet and build the lookup table."""

    mapping_path = config.mapping_path
    if not mapping_path.is_file():
        raise MissingInputError(f"{mapping_path.name} not found in directory: {mapping_path.parent}")
    try:
        rows = read_rows(mapping_path, sheet=config.mapping_sheet, max_columns=2)
    except (ValueError, OSError) as exc:
        raise MappingSourceError(f"Failed to read {mapping_path.name}: {exc}") from exc
    return build_mapping_table(rows)


class Pipeline:
    """Coordinates Check -> Load mapping -> Scan -> Merge steps."""

    def __init__(
        self,
        config: RunConfig,
        *,
        toolkit: PdfToolkit | None = None,
        logger=None,
        progress_cb: ProgressCB | None = None,
    ) -> None:
        self.config = config
        self.toolkit = toolkit or toolkit_from_config(config)
        self.logger = logger or get_logger()
        self.progress_cb = progress_cb

    def _progress(self, stage: str, detail: str = "") -> None:
        if self.progress_cb:
            self.progress_cb(stage, detail)
        self.logger.info("%s - %s", stage, detail)

    # ------------------------------------------------------------------
    def check_tool(self) -> None:
        if not self.toolkit.is_available():
            raise ToolUnavailableError(self.toolkit.install_hint() or f"{self.toolkit.name} is not available")

    def check_inputs(self) -> None:
        mapping_path = self.config.mapping_path
        reference_path = self.config.reference_path
        if not mapping_path.is_file():
            raise MissingInputError(f"{mapping_path.name} not found in directory: {mapping_path.parent}")
        if not reference_path.is_file():
            raise MissingInputError(f"{reference_path.name} not found in directory: {reference_path.parent}")

    def reference_page_count(self) -> int:
        reference_path = self.config.reference_path
        try:
            count = self.toolkit.page_count(reference_path)
        except ToolError as exc:
            raise ToolError(
                f"Failed to get page count from {reference_path.name}: {exc}",
                diagnostics=exc.diagnostics,
            ) from exc
        self._progress("reference", f"{reference_path.name} has {count} pages")
        return count

    def load_table(self) -> MappingTable:
        mapping_path = self.config.mapping_path
        table = load_mapping_table(self.config)
        self._progress("mapping", f"Found {len(table)} mappings in {mapping_path.name}")
        return table

    def prepare(self) -> PreparedRun:
        """Run every fatal check; raises before any target file is processed."""

        self.check_tool()
        self._progress("check", f"{self.toolkit.name} found")
        self.check_inputs()
        count = self.reference_page_count()
        table = self.load_table()
        return PreparedRun(reference_page_count=count, table=table)

    def run(
        self,
        target_root: Path,
        *,
        dry_run: bool = False,
        outcome_cb: OutcomeCB | None = None,
    ) -> RunSummary:
        prepared = self.prepare()
        if not target_root.is_dir():
            raise MissingInputError(f"Directory does not exist: {target_root}")

        targets = scan_targets(target_root)
        if not targets:
            self.logger.warning("No PDF files found in child directories of %s", target_root)
            return RunSummary()
        self._progress("scan", f"Found {len(targets)} PDF files in subdirectories")

        orchestrator = MergeOrchestrator(
            self.toolkit,
            self.config.reference_path,
            prepared.reference_page_count,
            prepared.table,
            temp_dir=self.config.temp_dir,
            dry_run=dry_run,
            logger=self.logger,
        )
        return orchestrator.run(targets, outcome_cb=outcome_cb)
