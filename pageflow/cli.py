"""Typer based command line entry points for PageFlow."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer

from pageflow.core.errors import PageFlowError
from pageflow.core.logger import get_logger
from pageflow.core.pipeline import Pipeline, load_mapping_table
from pageflow.core.settings import RunConfig, load_config
from pageflow.services.mapping import match_filename
from pageflow.services.merge import FileOutcome, RunSummary, check_report_path, export_report
from pageflow_io.utils.log import PACKAGE_LOGGER as IO_LOGGER_NAME

app = typer.Typer(help="Insert a mapped reference page at the front of PDF files.")

_STATUS_MARKS = {"inserted": "✓", "skipped": "⊘", "failed": "✗"}
_STATUS_COLORS = {
    "inserted": typer.colors.GREEN,
    "skipped": typer.colors.YELLOW,
    "failed": typer.colors.RED,
}


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    logger = get_logger()

    level_value = getattr(logging, log_level.upper(), None)
    if not isinstance(level_value, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")

    logging.getLogger().setLevel(level_value)
    logger.setLevel(level_value)
    logging.getLogger(IO_LOGGER_NAME).setLevel(level_value)


def _handle_error(exc: Exception) -> NoReturn:
    get_logger().error("pageflow operation failed: %s", exc, exc_info=True)
    typer.secho(f"ERROR: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _resolve_config(
    source_dir: Optional[Path],
    config_path: Optional[Path],
    **overrides: object,
) -> RunConfig:
    try:
        return load_config(config_path, source_dir=source_dir, overrides=overrides)
    except PageFlowError as exc:
        _handle_error(exc)


def _echo_progress(stage: str, detail: str) -> None:
    if detail:
        typer.echo(detail)


def _echo_outcome(outcome: FileOutcome) -> None:
    mark = _STATUS_MARKS[outcome.status]
    if outcome.status == "inserted":
        line = f"{mark} {outcome.name} (page {outcome.page_number})"
    elif outcome.status == "skipped":
        reason = outcome.message or "no match in Excel"
        line = f"{mark} {outcome.name} (skipped - {reason})"
    else:
        line = f"{mark} {outcome.name} - Error: {outcome.message}"
    typer.secho(line, fg=_STATUS_COLORS[outcome.status])


def _echo_summary(summary: RunSummary) -> None:
    typer.echo("\n=== Summary ===")
    typer.echo(f"Processed: {summary.inserted}")
    if summary.planned:
        typer.echo(f"Would insert: {summary.planned}")
    typer.echo(f"Skipped: {summary.skipped - summary.planned}")
    typer.echo(f"Errors: {summary.failed}")


def _write_report(summary: RunSummary, report: Path) -> None:
    # Targets are already rewritten at this point, so report errors only warn.
    try:
        export_report(summary, report)
    except (OSError, ValueError) as exc:
        get_logger().warning("report.failed path=%s reason=%s", report, exc)
        typer.secho(f"WARNING: could not write report {report}: {exc}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.echo(f"Report written to {report}")


@app.command("run")
def cmd_run(
    target_root: Optional[Path] = typer.Argument(
        None,
        help="Directory whose child folders hold the PDFs to update (prompted when omitted).",
    ),
    source_dir: Optional[Path] = typer.Option(None, "--source-dir", help="Directory holding the workbook and reference PDF."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to a pageflow.yaml file."),
    backend: Optional[str] = typer.Option(None, "--backend", help="Page toolkit: qpdf or pypdf."),
    qpdf_binary: Optional[str] = typer.Option(None, "--qpdf", help="qpdf executable to use."),
    strict_warnings: bool = typer.Option(False, "--strict-warnings", help="Treat qpdf warnings as failures."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Timeout in seconds for each tool call."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Match and validate only; do not modify files."),
    report: Optional[Path] = typer.Option(None, "--report", help="Write per-file outcomes to a .csv or .xlsx file."),
    as_json: bool = typer.Option(False, "--json", help="Print the summary as JSON."),
    pause: bool = typer.Option(False, "--pause", help="Wait for Enter before exiting."),
) -> None:
    """Insert the mapped reference page into every PDF below TARGET_ROOT."""

    config = _resolve_config(
        source_dir,
        config_path,
        backend=backend,
        qpdf_binary=qpdf_binary,
        tolerate_warnings=False if strict_warnings else None,
        tool_timeout_sec=timeout,
    )
    if target_root is None:
        entered = typer.prompt("Enter directory path").strip()
        if not entered:
            _handle_error(ValueError("Directory path cannot be empty"))
        target_root = Path(entered)

    try:
        if report is not None:
            check_report_path(report)
        pipeline = Pipeline(config, progress_cb=_echo_progress)
        summary = pipeline.run(target_root.expanduser(), dry_run=dry_run, outcome_cb=_echo_outcome)
    except (PageFlowError, ValueError) as exc:
        _handle_error(exc)
    else:
        if summary.total == 0:
            typer.secho("No PDF files found in child directories!", fg=typer.colors.YELLOW)
        if as_json:
            typer.echo(json.dumps(summary.as_dict(), ensure_ascii=False, indent=2))
        else:
            _echo_summary(summary)
        if report is not None:
            _write_report(summary, report)
    finally:
        if pause:
            typer.prompt("\nPress Enter to close", default="", show_default=False)


@app.command("match")
def cmd_match(
    names: List[str] = typer.Argument(..., help="PDF file names to resolve."),
    source_dir: Optional[Path] = typer.Option(None, "--source-dir", help="Directory holding the workbook."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to a pageflow.yaml file."),
) -> None:
    """Show which reference page each file name resolves to."""

    config = _resolve_config(source_dir, config_path)
    try:
        table = load_mapping_table(config)
    except PageFlowError as exc:
        _handle_error(exc)
    else:
        for name in names:
            result = match_filename(name, table)
            if result.resolved:
                typer.echo(f"{name}: page {result.page_number} ({result.rule}, key={result.matched_key})")
            else:
                typer.secho(f"{name}: no match", fg=typer.colors.YELLOW)


@app.command("check")
def cmd_check(
    source_dir: Optional[Path] = typer.Option(None, "--source-dir", help="Directory holding the workbook and reference PDF."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to a pageflow.yaml file."),
    backend: Optional[str] = typer.Option(None, "--backend", help="Page toolkit: qpdf or pypdf."),
    qpdf_binary: Optional[str] = typer.Option(None, "--qpdf", help="qpdf executable to use."),
) -> None:
    """Verify the page tool, the workbook and the reference PDF."""

    config = _resolve_config(source_dir, config_path, backend=backend, qpdf_binary=qpdf_binary)
    try:
        pipeline = Pipeline(config)
        prepared = pipeline.prepare()
    except PageFlowError as exc:
        _handle_error(exc)
    else:
        typer.secho(
            f"✓ {pipeline.toolkit.name} ready, {config.reference_file} has "
            f"{prepared.reference_page_count} pages, {len(prepared.table)} mappings loaded",
            fg=typer.colors.GREEN,
        )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
