"""Spreadsheet access layer: sources of raw sheet grids."""

from .base_reader import MergeRegionInfo, SpreadsheetSource
from .excel_reader import ExcelSource
from .memory_reader import InMemorySource
from .named_range_reader import (
    NamedRangeReader,
    get_global_named_ranges,
    get_named_range_by_name,
    get_named_ranges_by_scope,
)

__all__ = [
    "SpreadsheetSource",
    "MergeRegionInfo",
    "ExcelSource",
    "InMemorySource",
    "NamedRangeReader",
    "get_named_range_by_name",
    "get_named_ranges_by_scope",
    "get_global_named_ranges",
]
