from __future__ import annotations

from pageflow.services.mapping.matcher import MatchResult, match_filename
from pageflow.services.mapping.table import MappingTable


def _table(entries: dict[str, int]) -> MappingTable:
    return MappingTable(entries=entries)


def test_exact_identity_match() -> None:
    result = match_filename("report.pdf", _table({"report": 2}))

    assert result == MatchResult(2, "exact", "report")
    assert result.page_number == 3


def test_key_with_extension_matches() -> None:
    result = match_filename("report.PDF", _table({"report.pdf": 4}))

    assert result.page_index == 4
    assert result.rule == "with_extension"


def test_exact_match_wins_over_extension_key() -> None:
    result = match_filename("report.pdf", _table({"report": 1, "report.pdf": 9}))

    assert result.page_index == 1


def test_first_duplicate_uses_base_identity() -> None:
    result = match_filename("report (1).pdf", _table({"report": 2}))

    assert result.page_index == 2
    assert result.rule == "duplicate_base"


def test_first_duplicate_without_space() -> None:
    result = match_filename("report(1).pdf", _table({"report": 5}))

    assert result.page_index == 5


def test_other_duplicates_are_ignored() -> None:
    table = _table({"report": 2})

    assert match_filename("report (2).pdf", table) == MatchResult.no_match()
    assert not match_filename("report(3).pdf", table).resolved


def test_first_duplicate_scans_keys_by_base_identity() -> None:
    result = match_filename("hoa (1).pdf", _table({"hoa.pdf": 3, "other.pdf": 8}))

    # "hoa.pdf" is found by the extension rule before the duplicate rule
    assert result.rule == "with_extension"

    result = match_filename("hoa (1).pdf", _table({"hoa (copy).pdf": 6, "other.pdf": 8}))
    assert result.page_index == 6
    assert result.rule == "duplicate_scan"
    assert result.matched_key == "hoa (copy).pdf"


def test_ambiguous_scan_picks_smallest_key() -> None:
    table = _table({"hoa(9).pdf": 7, "hoa (2).pdf": 1, "hoa (5)": 4})

    result = match_filename("hoa (1).pdf", table)

    assert result.matched_key == "hoa (2).pdf"
    assert result.page_index == 1


def test_duplicate_gate_is_a_substring_test() -> None:
    result = match_filename("report (10).pdf", _table({"report": 2}))

    # "(10)" does not contain "(1)", but "x(1)y" anywhere does
    assert not result.resolved
    assert match_filename("report(1)-scan.pdf", _table({"report": 2})).page_index == 2


def test_no_match() -> None:
    result = match_filename("unknown.pdf", _table({"report": 2}))

    assert result.page_index is None
    assert result.page_number is None
    assert result.rule == "none"
