"""Mapping table construction and file name matching."""

from .matcher import MatchResult, match_filename
from .normalizer import extract_base_identity, final_segment, normalize
from .table import MappingTable, TableStats, build_mapping_table

__all__ = [
    "MappingTable",
    "MatchResult",
    "TableStats",
    "build_mapping_table",
    "extract_base_identity",
    "final_segment",
    "match_filename",
    "normalize",
]
