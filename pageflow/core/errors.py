"""Custom exceptions used across PageFlow."""


class PageFlowError(Exception):
    """Base error for the application."""


class ConfigError(PageFlowError):
    """Configuration related error."""


class ToolUnavailableError(PageFlowError):
    """Raised when the external page tool cannot be found or started."""


class MissingInputError(PageFlowError):
    """Raised when the mapping workbook, reference PDF or target root is absent."""


class MappingSourceError(PageFlowError):
    """Raised when the mapping workbook exists but cannot be read."""


class ToolError(PageFlowError):
    """Raised when the external page tool reports a failure."""

    def __init__(self, message: str, *, diagnostics: str | None = None) -> None:
        super().__init__(message)
        self.diagnostics = diagnostics or ""


class MergeError(PageFlowError):
    """Raised when a single target file cannot be merged."""
