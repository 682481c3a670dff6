"""Page toolkits, target discovery and merge orchestration."""

from .base import PdfToolkit, ToolResult, toolkit_from_config
from .orchestrator import FileOutcome, MergeOrchestrator, RunSummary
from .report import check_report_path, export_report
from .scanner import scan_targets

__all__ = [
    "FileOutcome",
    "MergeOrchestrator",
    "PdfToolkit",
    "RunSummary",
    "ToolResult",
    "check_report_path",
    "export_report",
    "scan_targets",
    "toolkit_from_config",
]
