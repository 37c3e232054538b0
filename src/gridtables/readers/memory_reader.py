"""Spreadsheet source backed by plain Python values."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..core.exceptions import SheetNotFoundError
from ..models.cell import Cell, Grid
from ..models.workbook import NamedRange
from ..utils.excel_utils import parse_cell_reference
from .base_reader import MergeRegionInfo, SpreadsheetSource

logger = logging.getLogger(__name__)


class InMemorySource(SpreadsheetSource):
    """Serve sheets from in-memory row lists.

    Each sheet is a sequence of rows; a row holds plain Python values (converted with
    ``Cell.from_value``) or pre-built ``Cell`` objects. Rows may differ in length.
    Merges are given per sheet as ``MergeRegionInfo`` objects or ``"A1:C1"`` strings,
    in which case the display value is taken from the top-left cell.
    """

    def __init__(
        self,
        sheets: Mapping[str, Sequence[Sequence[Any]]],
        merges: Mapping[str, Sequence[MergeRegionInfo | str]] | None = None,
        defined_names: Sequence[NamedRange] | None = None,
        file_path: str = "<memory>",
    ):
        super().__init__(file_path)
        self._sheets = dict(sheets)
        self._merges = dict(merges or {})
        self._defined_names = list(defined_names or [])

        unknown = set(self._merges) - set(self._sheets)
        if unknown:
            raise SheetNotFoundError(sorted(unknown)[0])

    def get_sheet_names(self) -> list[str]:
        return list(self._sheets)

    def _rows(self, sheet_name: str) -> Sequence[Sequence[Any]]:
        if sheet_name not in self._sheets:
            raise SheetNotFoundError(sheet_name)
        return self._sheets[sheet_name]

    def read_sheet_grid(self, sheet_name: str) -> Grid:
        grid: Grid = []
        for row_idx, row in enumerate(self._rows(sheet_name)):
            cells = []
            for col_idx, value in enumerate(row):
                if isinstance(value, Cell):
                    cells.append(value.model_copy(update={"row": row_idx, "col": col_idx}))
                else:
                    cells.append(Cell.from_value(value, row_idx, col_idx))
            grid.append(cells)
        return grid

    def get_merge_regions(self, sheet_name: str) -> list[MergeRegionInfo]:
        rows = self._rows(sheet_name)
        regions = []
        for merge in self._merges.get(sheet_name, []):
            if isinstance(merge, MergeRegionInfo):
                regions.append(merge)
                continue
            start_cell, _, end_cell = merge.partition(":")
            regions.append(
                MergeRegionInfo(
                    start_cell=start_cell,
                    end_cell=end_cell or start_cell,
                    value=self._display_value(rows, start_cell),
                )
            )
        return regions

    @staticmethod
    def _display_value(rows: Sequence[Sequence[Any]], reference: str) -> str:
        row, col = parse_cell_reference(reference)
        if row >= len(rows) or col >= len(rows[row]):
            return ""
        value = rows[row][col]
        cell = value if isinstance(value, Cell) else Cell.from_value(value, row, col)
        return cell.raw_text

    def get_defined_names(self) -> list[NamedRange]:
        return list(self._defined_names)

    def open_handle(self) -> "InMemorySource":
        return InMemorySource(
            self._sheets, self._merges, self._defined_names, file_path=self.file_path
        )
