from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .errors import ConfigError


load_dotenv(override=False)

CONFIG_FILENAME = "pageflow.yaml"
ROOT_MARKERS = (CONFIG_FILENAME, "pyproject.toml")

HOME_ENV = "PAGEFLOW_HOME"
SOURCE_DIR_ENV = "PAGEFLOW_SOURCE_DIR"
BACKEND_ENV = "PAGEFLOW_BACKEND"
QPDF_ENV = "PAGEFLOW_QPDF"
TOOL_TIMEOUT_ENV = "PAGEFLOW_TOOL_TIMEOUT_SEC"

DEFAULT_MAPPING_FILE = "compare.xlsx"
DEFAULT_REFERENCE_FILE = "bia.pdf"
DEFAULT_BACKEND = "qpdf"
DEFAULT_QPDF_BINARY = "qpdf"


@dataclass(frozen=True)
class RunConfig:
    """Settings for one insertion run, resolved once at startup.

    Attributes:
        source_dir: Directory holding the mapping workbook and reference PDF.
        mapping_file: Workbook name (or absolute path) inside ``source_dir``.
        reference_file: Reference PDF name (or absolute path) inside ``source_dir``.
        mapping_sheet: Sheet index or name read from the workbook.
        backend: Page toolkit name (``qpdf`` or ``pypdf``).
        qpdf_binary: Executable used by the qpdf toolkit.
        tolerate_warnings: Treat qpdf warnings as success.
        tool_timeout_sec: Optional timeout for each external tool call.
        temp_dir: Directory for merge outputs; ``None`` uses the system temp dir.
    """

    source_dir: Path
    mapping_file: str = DEFAULT_MAPPING_FILE
    reference_file: str = DEFAULT_REFERENCE_FILE
    mapping_sheet: int | str = 0
    backend: str = DEFAULT_BACKEND
    qpdf_binary: str = DEFAULT_QPDF_BINARY
    tolerate_warnings: bool = True
    tool_timeout_sec: float | None = None
    temp_dir: Path | None = None

    @property
    def mapping_path(self) -> Path:
        return self.source_dir / self.mapping_file

    @property
    def reference_path(self) -> Path:
        return self.source_dir / self.reference_file

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, source_dir: Path) -> "RunConfig":
        """Create a configuration from a mapping such as a parsed YAML document."""

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        values: dict[str, Any] = {"source_dir": Path(data.get("source_dir") or source_dir).expanduser()}
        for key in ("mapping_file", "reference_file", "backend", "qpdf_binary"):
            if data.get(key) is not None:
                text = str(data[key]).strip()
                if not text:
                    raise ConfigError(f"Configuration value must not be empty: {key}")
                values[key] = text
        if data.get("mapping_sheet") is not None:
            sheet = data["mapping_sheet"]
            values["mapping_sheet"] = sheet if isinstance(sheet, int) else str(sheet)
        if data.get("tolerate_warnings") is not None:
            values["tolerate_warnings"] = _parse_bool(data["tolerate_warnings"], "tolerate_warnings")
        if data.get("tool_timeout_sec") is not None:
            values["tool_timeout_sec"] = _parse_timeout(data["tool_timeout_sec"])
        if data.get("temp_dir") is not None:
            values["temp_dir"] = Path(str(data["temp_dir"])).expanduser()
        values["backend"] = values.get("backend", DEFAULT_BACKEND).lower()
        return cls(**values)


def _pageflow_home() -> Path:
    env = os.getenv(HOME_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / "PageFlow"


def _work_dir() -> Path:
    return _pageflow_home() / "work"


def find_source_dir(start: Path | None = None) -> Path:
    """Return the nearest ancestor of ``start`` holding a project marker, else ``start``."""

    origin = (start or Path.cwd()).resolve()
    for candidate in (origin, *origin.parents):
        if any((candidate / marker).exists() for marker in ROOT_MARKERS):
            return candidate
    return origin


def load_config(
    path: str | Path | None = None,
    *,
    source_dir: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> RunConfig:
    """Resolve the run configuration.

    Later sources win: defaults, the YAML file, ``PAGEFLOW_*`` environment
    variables, then ``overrides`` (CLI flags; ``None`` values are ignored).
    """

    env_source = os.getenv(SOURCE_DIR_ENV)
    if source_dir is not None:
        base_dir = Path(source_dir).expanduser()
    elif env_source:
        base_dir = Path(env_source).expanduser()
    else:
        base_dir = find_source_dir()

    cfg_path = Path(path) if path else base_dir / CONFIG_FILENAME
    if path and not cfg_path.exists():
        raise ConfigError(f"Configuration file not found: {cfg_path}")
    data: dict[str, Any] = _load_yaml(cfg_path) if cfg_path.exists() else {}
    if source_dir is not None or env_source:
        data.pop("source_dir", None)

    config = RunConfig.from_mapping(data, source_dir=base_dir)
    config = _apply_env(config)
    if overrides:
        cleaned = {key: value for key, value in overrides.items() if value is not None}
        config = RunConfig.from_mapping({**_as_mapping(config), **cleaned}, source_dir=config.source_dir)
    return config


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the top level")
    return data


def _apply_env(config: RunConfig) -> RunConfig:
    changes: dict[str, Any] = {}
    backend = os.getenv(BACKEND_ENV)
    if backend:
        changes["backend"] = backend.strip().lower()
    qpdf = os.getenv(QPDF_ENV)
    if qpdf:
        changes["qpdf_binary"] = qpdf.strip()
    timeout = os.getenv(TOOL_TIMEOUT_ENV)
    if timeout:
        changes["tool_timeout_sec"] = _parse_timeout(timeout)
    return replace(config, **changes) if changes else config


def _as_mapping(config: RunConfig) -> dict[str, Any]:
    return {f.name: getattr(config, f.name) for f in fields(config)}


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    raise ConfigError(f"Invalid boolean for {key}: {value!r}")


def _parse_timeout(value: Any) -> float | None:
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid tool timeout: {value!r}") from exc
    if seconds <= 0:
        return None
    return seconds
