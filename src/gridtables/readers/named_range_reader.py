"""Read Excel defined names (named ranges) as tables."""

import logging

from ..config import DEFAULT_DETECTION_CONFIG, DetectionConfig
from ..core.exceptions import InvalidRangeError, NamedRangeNotFoundError
from ..detectors.header_detector import HeaderDetector
from ..extraction.merge_processor import MergeProcessor
from ..extraction.row_parser import RowParser
from ..models.table import Table, TableBoundary
from ..models.workbook import NamedRange
from ..utils.excel_utils import parse_range_reference
from .base_reader import SpreadsheetSource

logger = logging.getLogger(__name__)


class NamedRangeReader:
    """List defined names and turn the range behind one into a ``Table``."""

    def __init__(self, config: DetectionConfig | None = None):
        self.config = config or DEFAULT_DETECTION_CONFIG
        self.merge_processor = MergeProcessor(self.config)
        self.header_detector = HeaderDetector(self.config)
        self.row_parser = RowParser(self.config)

    def get_named_ranges(self, source: SpreadsheetSource) -> list[NamedRange]:
        return source.get_defined_names()

    def read_range(self, source: SpreadsheetSource, name: str) -> Table:
        """Read the range behind defined name ``name`` as a table named after it.

        The range is clamped to the sheet's grid before header detection.

        Raises:
            NamedRangeNotFoundError: If no defined name matches
            InvalidRangeError: If the reference lacks a sheet or degenerates after clamping
            SheetNotFoundError: If the referenced sheet does not exist
            CellReferenceError: If the reference cannot be parsed
        """
        named_range = get_named_range_by_name(source.get_defined_names(), name)
        if named_range is None:
            raise NamedRangeNotFoundError(name)

        sheet_name, (start_row, start_col, end_row, end_col) = parse_range_reference(
            named_range.refers_to
        )
        if not sheet_name:
            raise InvalidRangeError(
                f"Named range '{name}' refers to {named_range.refers_to!r} without a sheet"
            )

        grid = self.merge_processor.load_grid(source, sheet_name)
        width = max((len(row) for row in grid), default=0)
        end_row = min(end_row, len(grid) - 1)
        end_col = min(end_col, width - 1)

        if start_row > end_row or start_col > end_col:
            raise InvalidRangeError(
                f"Named range '{name}' ({named_range.refers_to}) lies outside the data of "
                f"sheet '{sheet_name}'"
            )

        boundary = TableBoundary(
            start_row=start_row, end_row=end_row, start_col=start_col, end_col=end_col
        )
        header_row = self.header_detector.detect_header_row(grid, boundary)
        headers = self.header_detector.extract_headers(grid, header_row, boundary)

        logger.info(f"Read named range '{name}' at {sheet_name}!{boundary.excel_range}")
        return self.row_parser.parse_table(grid, boundary, headers, header_row, name)


def get_named_range_by_name(ranges: list[NamedRange], name: str) -> NamedRange | None:
    for named_range in ranges:
        if named_range.name == name:
            return named_range
    return None


def get_named_ranges_by_scope(ranges: list[NamedRange], scope: str) -> list[NamedRange]:
    return [named_range for named_range in ranges if named_range.scope == scope]


def get_global_named_ranges(ranges: list[NamedRange]) -> list[NamedRange]:
    """Named ranges with workbook scope."""
    return get_named_ranges_by_scope(ranges, "Workbook")
