"""Build the file name -> page index table from raw worksheet rows."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Sequence

from pageflow.core.logger import get_logger

from .normalizer import final_segment

LOGGER = get_logger()


@dataclass(frozen=True)
class TableStats:
    """Row accounting collected while building a table."""

    rows_seen: int = 0
    rows_accepted: int = 0
    rows_dropped: int = 0
    keys_overwritten: int = 0


@dataclass(frozen=True)
class MappingTable:
    """Read-only mapping of file name keys to 0-based reference page indexes."""

    entries: Mapping[str, int] = field(default_factory=dict)
    stats: TableStats = field(default_factory=TableStats, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def get(self, key: str) -> int | None:
        return self.entries.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def items(self):  # type: ignore[no-untyped-def]
        return self.entries.items()


def filename_from_cell(value: object) -> str | None:
    """Column A: text is stripped, numbers are rendered as text, anything else is rejected."""

    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return None


def page_number_from_cell(value: object) -> int | None:
    """Column B: integers and finite floats (truncated toward zero) only."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return math.trunc(value)
    return None


def build_mapping_table(rows: Iterable[Sequence[object]]) -> MappingTable:
    """Convert raw ``(filename, page_number, ...)`` rows into a :class:`MappingTable`.

    Unusable rows are dropped without raising. Later rows overwrite earlier
    rows that normalize to the same key.
    """

    entries: dict[str, int] = {}
    seen = accepted = overwritten = 0
    for row_number, row in enumerate(rows, start=1):
        seen += 1
        entry = _parse_row(row)
        if entry is None:
            LOGGER.debug("mapping.table drop row=%s values=%r", row_number, row)
            continue
        key, page_index = entry
        if key in entries:
            overwritten += 1
        entries[key] = page_index
        accepted += 1

    stats = TableStats(
        rows_seen=seen,
        rows_accepted=accepted,
        rows_dropped=seen - accepted,
        keys_overwritten=overwritten,
    )
    LOGGER.info(
        "mapping.table built keys=%s accepted=%s dropped=%s overwritten=%s",
        len(entries),
        accepted,
        stats.rows_dropped,
        overwritten,
    )
    return MappingTable(entries=entries, stats=stats)


def _parse_row(row: object) -> tuple[str, int] | None:
    if isinstance(row, (str, bytes)) or not isinstance(row, Sequence) or len(row) < 2:
        return None
    filename = filename_from_cell(row[0])
    if not filename:
        return None
    page_number = page_number_from_cell(row[1])
    if page_number is None or page_number <= 0:
        return None
    return final_segment(filename), page_number - 1


__all__ = [
    "MappingTable",
    "TableStats",
    "build_mapping_table",
    "filename_from_cell",
    "page_number_from_cell",
]
