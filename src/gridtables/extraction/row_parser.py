"""Materialize data rows below a header into header-keyed rows."""

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from ..config import DEFAULT_DETECTION_CONFIG, DetectionConfig
from ..models.cell import Cell, Grid
from ..models.table import Row, Table, TableBoundary

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RowParser:
    """Turn grid rows inside a boundary into ``Row`` objects."""

    def __init__(self, config: DetectionConfig | None = None):
        self.config = config or DEFAULT_DETECTION_CONFIG

    def parse_rows(
        self, grid: Grid, headers: list[str], header_row: int, boundary: TableBoundary
    ) -> list[Row]:
        """Parse rows from ``header_row + 1`` through the end of the boundary.

        Columns missing from a short row yield empty cells. Rows whose cells are all
        empty are dropped; ``Row.index`` counts only the rows kept.
        """
        rows: list[Row] = []
        last_row = min(boundary.end_row, len(grid) - 1)

        for row_idx in range(header_row + 1, last_row + 1):
            grid_row = grid[row_idx]
            cells = []
            for offset in range(len(headers)):
                col = boundary.start_col + offset
                cells.append(grid_row[col] if col < len(grid_row) else Cell.empty(row_idx, col))

            if all(cell.is_empty for cell in cells):
                continue

            rows.append(
                Row(
                    index=len(rows),
                    source_row=row_idx,
                    values=dict(zip(headers, cells, strict=True)),
                    cells=cells,
                )
            )

        logger.debug(f"Parsed {len(rows)} rows for {boundary.excel_range}")
        return rows

    def parse_table(
        self,
        grid: Grid,
        boundary: TableBoundary,
        headers: list[str],
        header_row: int,
        name: str,
    ) -> Table:
        """Parse the rows of a boundary into a finished ``Table``."""
        return Table(
            name=name,
            headers=headers,
            rows=self.parse_rows(grid, headers, header_row, boundary),
            header_row=header_row,
            start_row=boundary.start_row,
            end_row=boundary.end_row,
            start_col=boundary.start_col,
            end_col=boundary.end_col,
        )


def filter_rows(rows: Iterable[Row], predicate: Callable[[Row], bool]) -> list[Row]:
    return [row for row in rows if predicate(row)]


def map_rows(rows: Iterable[Row], mapper: Callable[[Row], T]) -> list[T]:
    return [mapper(row) for row in rows]


def get_column_values(rows: Iterable[Row], header: str) -> list[Cell]:
    """Cells under ``header`` for every row that has that column."""
    return [row.values[header] for row in rows if header in row.values]
