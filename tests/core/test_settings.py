from __future__ import annotations

from pathlib import Path

import pytest

from pageflow.core.errors import ConfigError
from pageflow.core.settings import RunConfig, find_source_dir, load_config


def test_defaults(tmp_path: Path) -> None:
    config = load_config(source_dir=tmp_path)

    assert config.mapping_path == tmp_path / "compare.xlsx"
    assert config.reference_path == tmp_path / "bia.pdf"
    assert config.backend == "qpdf"
    assert config.tolerate_warnings is True
    assert config.tool_timeout_sec is None


def test_yaml_file_in_source_dir(tmp_path: Path) -> None:
    (tmp_path / "pageflow.yaml").write_text(
        "mapping_file: pages.xlsx\n"
        "reference_file: reference.pdf\n"
        "backend: PyPDF\n"
        "tolerate_warnings: 'no'\n"
        "tool_timeout_sec: 45\n",
        encoding="utf-8",
    )

    config = load_config(source_dir=tmp_path)

    assert config.mapping_file == "pages.xlsx"
    assert config.reference_file == "reference.pdf"
    assert config.backend == "pypdf"
    assert config.tolerate_warnings is False
    assert config.tool_timeout_sec == 45.0


def test_env_then_overrides_win(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "pageflow.yaml").write_text("qpdf_binary: /usr/bin/qpdf\n", encoding="utf-8")
    monkeypatch.setenv("PAGEFLOW_SOURCE_DIR", str(tmp_path))
    monkeypatch.setenv("PAGEFLOW_QPDF", "/opt/qpdf/bin/qpdf")
    monkeypatch.setenv("PAGEFLOW_TOOL_TIMEOUT_SEC", "10")

    config = load_config()
    assert config.source_dir == tmp_path
    assert config.qpdf_binary == "/opt/qpdf/bin/qpdf"
    assert config.tool_timeout_sec == 10.0

    overridden = load_config(overrides={"qpdf_binary": "qpdf-cli", "backend": None, "tool_timeout_sec": 0})
    assert overridden.qpdf_binary == "qpdf-cli"
    assert overridden.backend == "qpdf"
    assert overridden.tool_timeout_sec is None


def test_explicit_config_path_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml", source_dir=tmp_path)


@pytest.mark.parametrize(
    "payload",
    ["- just\n- a list\n", "mapping_file: ''\n", "unknown_key: 1\n", "tool_timeout_sec: soon\n", "tolerate_warnings: maybe\n"],
)
def test_invalid_yaml_values(tmp_path: Path, payload: str) -> None:
    (tmp_path / "pageflow.yaml").write_text(payload, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(source_dir=tmp_path)


def test_find_source_dir_walks_up(tmp_path: Path) -> None:
    (tmp_path / "pageflow.yaml").write_text("{}\n", encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_source_dir(nested) == tmp_path.resolve()


def test_config_is_frozen(tmp_path: Path) -> None:
    config = RunConfig(source_dir=tmp_path)
    with pytest.raises(AttributeError):
        config.backend = "pypdf"  # type: ignore[misc]
