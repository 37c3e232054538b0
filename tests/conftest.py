"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import openpyxl
import pytest

from gridtables.config import DetectionConfig
from gridtables.extraction.row_parser import RowParser
from gridtables.models.cell import Cell, Grid
from gridtables.models.table import Table, TableBoundary
from gridtables.readers.memory_reader import InMemorySource


def build_grid(rows: Sequence[Sequence[Any]]) -> Grid:
    """Build a cell grid from rows of plain values (None or "" for blanks)."""
    return [
        [Cell.from_value(value, row_idx, col_idx) for col_idx, value in enumerate(row)]
        for row_idx, row in enumerate(rows)
    ]


def build_table(rows: Sequence[Sequence[Any]], name: str = "Table") -> Table:
    """Build a table whose first row holds the headers."""
    grid = build_grid(rows)
    width = max(len(row) for row in rows)
    boundary = TableBoundary(start_row=0, end_row=len(rows) - 1, start_col=0, end_col=width - 1)
    headers = [str(value) for value in rows[0]]
    return RowParser().parse_table(grid, boundary, headers, 0, name)


@pytest.fixture
def make_grid() -> Callable[[Sequence[Sequence[Any]]], Grid]:
    return build_grid


@pytest.fixture
def make_table() -> Callable[..., Table]:
    return build_table


@pytest.fixture
def default_config() -> DetectionConfig:
    return DetectionConfig()


@pytest.fixture
def sales_rows() -> list[list[Any]]:
    """A small sales table with a header row."""
    return [
        ["ID", "Name", "Amount", "Status"],
        [1, "Alice", 120.5, "Open"],
        [2, "Bob", 80, "Closed"],
        [3, "Carol", 42, "Open"],
    ]


@pytest.fixture
def multi_sheet_source(sales_rows) -> InMemorySource:
    """Three sheets: one table, two tables, and an empty sheet."""
    inventory = [
        ["Sku", "Quantity", None, None],
        ["A-1", 10, None, None],
        ["B-2", 0, None, None],
        [None, None, None, None],
        [None, None, None, None],
        [None, None, None, None],
        ["Region", "Total", None, None],
        ["North", 300, None, None],
        ["South", 150, None, None],
    ]
    return InMemorySource(
        {"Sales": sales_rows, "Inventory": inventory, "Empty": []},
        file_path="memory.xlsx",
    )


@pytest.fixture
def write_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Write sheets of plain values to an .xlsx file and return its path.

    ``merges`` maps sheet names to ranges like ``"A1:C1"``; ``defined_names`` maps
    workbook-scoped names to references like ``"Data!$A$1:$B$3"``.
    """

    def _write(
        sheets: dict[str, Sequence[Sequence[Any]]],
        merges: dict[str, list[str]] | None = None,
        defined_names: dict[str, str] | None = None,
        name: str = "workbook.xlsx",
    ) -> Path:
        from openpyxl.workbook.defined_name import DefinedName

        workbook = openpyxl.Workbook()
        workbook.remove(workbook.active)
        for sheet_name, rows in sheets.items():
            ws = workbook.create_sheet(sheet_name)
            for row_idx, row in enumerate(rows, start=1):
                for col_idx, value in enumerate(row, start=1):
                    if value is not None:
                        ws.cell(row=row_idx, column=col_idx, value=value)
            for cell_range in (merges or {}).get(sheet_name, []):
                ws.merge_cells(cell_range)

        for defined, reference in (defined_names or {}).items():
            workbook.defined_names[defined] = DefinedName(defined, attr_text=reference)

        path = tmp_path / name
        workbook.save(path)
        return path

    return _write
