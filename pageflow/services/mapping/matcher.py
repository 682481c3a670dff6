"""Resolve a target PDF file name to a reference page index."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pageflow.core.logger import get_logger

from .normalizer import extract_base_identity, normalize
from .table import MappingTable

LOGGER = get_logger()

MatchRule = Literal["exact", "with_extension", "duplicate_base", "duplicate_scan", "none"]

# Only the first duplicate ("name (1).pdf") is matched; (2), (3), ... are ignored.
FIRST_DUPLICATE_MARKER = "(1)"


@dataclass(frozen=True)
class MatchResult:
    """Outcome of one lookup: a resolved page index or no match."""

    page_index: int | None
    rule: MatchRule = "none"
    matched_key: str | None = None

    @property
    def resolved(self) -> bool:
        return self.page_index is not None

    @property
    def page_number(self) -> int | None:
        return None if self.page_index is None else self.page_index + 1

    @classmethod
    def no_match(cls) -> "MatchResult":
        return cls(page_index=None)


def match_filename(filename: str, table: MappingTable) -> MatchResult:
    """Look ``filename`` up in ``table``; the first rule that succeeds wins.

    1. the normalized name itself,
    2. the normalized name plus ``.pdf``,
    3. for names containing ``(1)`` only: the base identity, then any key
       sharing that base identity (keys visited in sorted order).
    """

    identity = normalize(filename)
    page = table.get(identity)
    if page is not None:
        return MatchResult(page, "exact", identity)

    with_ext = f"{identity}.pdf"
    page = table.get(with_ext)
    if page is not None:
        return MatchResult(page, "with_extension", with_ext)

    if FIRST_DUPLICATE_MARKER not in filename:
        return MatchResult.no_match()

    base = extract_base_identity(filename)
    page = table.get(base)
    if page is not None:
        return MatchResult(page, "duplicate_base", base)

    candidates = [key for key in sorted(table) if extract_base_identity(key) == base]
    if not candidates:
        return MatchResult.no_match()

    chosen = candidates[0]
    pages = {table.get(key) for key in candidates}
    if len(pages) > 1:
        LOGGER.warning(
            "mapping.matcher ambiguous base=%s candidates=%s chosen=%s",
            base,
            ",".join(candidates),
            chosen,
        )
    return MatchResult(table.get(chosen), "duplicate_scan", chosen)


__all__ = ["FIRST_DUPLICATE_MARKER", "MatchResult", "MatchRule", "match_filename"]
