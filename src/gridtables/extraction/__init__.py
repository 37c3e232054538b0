"""Merge normalization and row materialization."""

from .merge_processor import MergeProcessor, ParsedMerge
from .row_parser import RowParser, filter_rows, get_column_values, map_rows

__all__ = [
    "MergeProcessor",
    "ParsedMerge",
    "RowParser",
    "filter_rows",
    "map_rows",
    "get_column_values",
]
