"""Data models for GridTables."""

from .cell import Cell, CellType, Grid, MergeRange, MergeRegionInfo
from .diff import CellDiff, DiffResult, RowDiff, diff_tables
from .table import ColumnStats, DuplicateGroup, Row, Table, TableBoundary
from .workbook import NamedRange, Sheet, Workbook

__all__ = [
    "Cell",
    "CellType",
    "MergeRange",
    "MergeRegionInfo",
    "Grid",
    "TableBoundary",
    "Row",
    "Table",
    "ColumnStats",
    "DuplicateGroup",
    "Sheet",
    "Workbook",
    "NamedRange",
    "CellDiff",
    "RowDiff",
    "DiffResult",
    "diff_tables",
]
