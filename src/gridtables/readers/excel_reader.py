"""Excel workbook source built on openpyxl."""

import logging
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.formula import ArrayFormula
from openpyxl.worksheet.worksheet import Worksheet

from ..core.exceptions import ReaderError, SheetNotFoundError
from ..models.cell import Cell, Grid
from ..models.workbook import NamedRange
from .base_reader import MergeRegionInfo, SpreadsheetSource

logger = logging.getLogger(__name__)


class ExcelSource(SpreadsheetSource):
    """Read .xlsx/.xlsm workbooks with openpyxl.

    The workbook is loaded twice: once with formulas intact and once with the cached
    results Excel stored for them. Both are private to this handle.
    """

    def __init__(self, file_path: str | Path):
        super().__init__(str(file_path))
        self._workbook = None
        try:
            self._workbook = openpyxl.load_workbook(self.file_path, data_only=False)
            self._values = openpyxl.load_workbook(self.file_path, data_only=True)
        except (InvalidFileException, BadZipFile, KeyError) as e:
            if self._workbook is not None:
                self._workbook.close()
            raise ReaderError(f"Could not open workbook {self.file_path}: {e}") from e
        logger.debug(f"Opened {self.file_path} with sheets {self._workbook.sheetnames}")

    def _sheet(self, sheet_name: str) -> tuple[Worksheet, Worksheet]:
        if sheet_name not in self._workbook.sheetnames:
            raise SheetNotFoundError(sheet_name)
        return self._workbook[sheet_name], self._values[sheet_name]

    def get_sheet_names(self) -> list[str]:
        return list(self._workbook.sheetnames)

    def read_sheet_grid(self, sheet_name: str) -> Grid:
        ws, ws_values = self._sheet(sheet_name)
        if ws.max_row == 1 and ws.max_column == 1 and ws.cell(1, 1).value is None:
            return []

        grid: Grid = []
        bounds = {"min_row": 1, "max_row": ws.max_row, "min_col": 1, "max_col": ws.max_column}
        for row_idx, (row, value_row) in enumerate(
            zip(ws.iter_rows(**bounds), ws_values.iter_rows(**bounds), strict=True)
        ):
            grid.append(
                [
                    self._convert_cell(cell, value_cell.value, row_idx, col_idx)
                    for col_idx, (cell, value_cell) in enumerate(zip(row, value_row, strict=True))
                ]
            )
        return grid

    @staticmethod
    def _convert_cell(cell: Any, cached_value: Any, row: int, col: int) -> Cell:
        formula = None
        value = cell.value
        if isinstance(value, ArrayFormula):
            formula = value.text
        elif cell.data_type == "f" and isinstance(value, str):
            formula = value

        comment = getattr(cell, "comment", None)
        hyperlink = getattr(cell, "hyperlink", None)
        return Cell.from_value(
            cached_value if formula is not None else value,
            row,
            col,
            formula=formula,
            comment=comment.text if comment is not None else None,
            hyperlink=(hyperlink.target or hyperlink.location) if hyperlink is not None else None,
        )

    def get_merge_regions(self, sheet_name: str) -> list[MergeRegionInfo]:
        ws, ws_values = self._sheet(sheet_name)
        regions = []
        for merged_range in ws.merged_cells.ranges:
            origin = ws_values.cell(merged_range.min_row, merged_range.min_col)
            display = Cell.from_value(
                origin.value, merged_range.min_row - 1, merged_range.min_col - 1
            ).raw_text
            regions.append(
                MergeRegionInfo(
                    start_cell=f"{get_column_letter(merged_range.min_col)}{merged_range.min_row}",
                    end_cell=f"{get_column_letter(merged_range.max_col)}{merged_range.max_row}",
                    value=display,
                )
            )
        return regions

    def get_defined_names(self) -> list[NamedRange]:
        names = [
            NamedRange(name=name, refers_to=defined.attr_text, scope="Workbook")
            for name, defined in self._workbook.defined_names.items()
        ]
        for ws in self._workbook.worksheets:
            names.extend(
                NamedRange(name=name, refers_to=defined.attr_text, scope=ws.title)
                for name, defined in ws.defined_names.items()
            )
        return names

    def open_handle(self) -> "ExcelSource":
        return ExcelSource(self.file_path)

    def close(self) -> None:
        self._workbook.close()
        self._values.close()
