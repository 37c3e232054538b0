"""Workbook-level orchestration of table inference.

For every sheet the reader loads a merge-aware grid, detects table boundaries and
turns each boundary into a named table. Sheets can be processed sequentially or
with one worker per sheet; both modes produce identical workbooks.
"""

import time
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager, nullcontext

from .config import DEFAULT_DETECTION_CONFIG, DetectionConfig
from .core.exceptions import ReaderError, SheetNotFoundError, SheetProcessingError
from .detectors.header_detector import HeaderDetector
from .detectors.table_analyzer import TableAnalyzer
from .extraction.merge_processor import MergeProcessor
from .extraction.row_parser import RowParser
from .models.cell import Grid
from .models.table import Table, TableBoundary
from .models.workbook import Sheet, Workbook
from .readers.base_reader import SpreadsheetSource
from .telemetry.metrics import MetricsCollector
from .utils.logging_context import (
    FileContext,
    OperationContext,
    SheetContext,
    TableContext,
    get_contextual_logger,
)

logger = get_contextual_logger(__name__)


class WorkbookReader:
    """Turn every sheet of a spreadsheet source into tables."""

    def __init__(
        self,
        config: DetectionConfig | None = None,
        metrics: MetricsCollector | None = None,
        max_workers: int | None = None,
    ):
        """Initialize the reader.

        Args:
            config: Detection tunables shared by every component
            metrics: Optional collector receiving per-sheet metrics
            max_workers: Upper bound on parallel workers (defaults to one per sheet)
        """
        self.config = config or DEFAULT_DETECTION_CONFIG
        self.metrics = metrics
        self.max_workers = max_workers

        self.merge_processor = MergeProcessor(self.config)
        self.analyzer = TableAnalyzer(self.config)
        self.header_detector = HeaderDetector(self.config)
        self.row_parser = RowParser(self.config)

    def read_workbook(self, source: SpreadsheetSource, parallel: bool = False) -> Workbook:
        """Read all sheets of ``source`` into a workbook.

        Args:
            source: Spreadsheet access layer handle
            parallel: Process sheets with one worker per sheet

        Raises:
            SheetProcessingError: If any sheet fails; no partial workbook is returned
        """
        timer = self.metrics.measure_time("read_workbook") if self.metrics else nullcontext()
        with FileContext(source.file_path), OperationContext("read_workbook"), timer:
            sheet_names = source.get_sheet_names()

            if parallel and len(sheet_names) > 1:
                sheets = self._read_parallel(source, sheet_names)
            else:
                sheets = []
                for index, name in enumerate(sheet_names):
                    with self._sheet_errors(name, index):
                        sheets.append(self._process_sheet(source, name, index))

            workbook = Workbook(file_path=source.file_path, sheets=sheets)
            logger.info(
                f"Read {workbook.sheet_count} sheets with {workbook.table_count} tables"
                f"{' in parallel' if parallel and len(sheet_names) > 1 else ''}"
            )
            return workbook

    def read_sheet(self, source: SpreadsheetSource, sheet_name: str) -> Sheet:
        """Read a single sheet by name.

        Raises:
            SheetNotFoundError: If the sheet does not exist
            SheetProcessingError: If the sheet cannot be read
        """
        sheet_names = source.get_sheet_names()
        if sheet_name not in sheet_names:
            raise SheetNotFoundError(sheet_name)

        index = sheet_names.index(sheet_name)
        with FileContext(source.file_path), self._sheet_errors(sheet_name, index):
            return self._process_sheet(source, sheet_name, index)

    def _read_parallel(self, source: SpreadsheetSource, sheet_names: list[str]) -> list[Sheet]:
        workers = min(len(sheet_names), self.max_workers or len(sheet_names))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="gridtables-sheet"
        ) as executor:
            # Futures are kept in sheet order so results land in their own slot
            futures = [
                executor.submit(self._read_sheet_worker, source, name, index)
                for index, name in enumerate(sheet_names)
            ]

        for future in futures:
            error = future.exception()
            if error is not None:
                raise error
        return [future.result() for future in futures]

    def _read_sheet_worker(self, source: SpreadsheetSource, sheet_name: str, index: int) -> Sheet:
        # Context variables do not flow into pool threads, so set them here
        with FileContext(source.file_path), self._sheet_errors(sheet_name, index):
            with source.open_handle() as handle:
                return self._process_sheet(handle, sheet_name, index)

    @contextmanager
    def _sheet_errors(self, sheet_name: str, index: int) -> Iterator[None]:
        """Wrap access-layer failures with the sheet they happened on."""
        try:
            yield
        except ReaderError as e:
            logger.error(f"Failed to process sheet '{sheet_name}': {e}")
            if self.metrics:
                self.metrics.record_error(type(e).__name__, sheet_name)
            raise SheetProcessingError(sheet_name, index, e) from e

    def _process_sheet(self, source: SpreadsheetSource, sheet_name: str, index: int) -> Sheet:
        with SheetContext(sheet_name):
            start_time = time.perf_counter()
            grid = self.merge_processor.load_grid(source, sheet_name)
            if not grid:
                logger.info("Sheet is empty")

            boundaries = self.analyzer.detect_tables(grid)
            tables = [
                self._build_table(grid, boundary, f"{sheet_name}_Table{number}")
                for number, boundary in enumerate(boundaries, start=1)
            ]

            rows_parsed = sum(table.row_count for table in tables)
            logger.info(f"Found {len(tables)} tables with {rows_parsed} rows")
            if self.metrics:
                self.metrics.record_sheet_processed(
                    sheet_name, len(tables), rows_parsed, time.perf_counter() - start_time
                )
            return Sheet(name=sheet_name, index=index, tables=tables)

    def _build_table(self, grid: Grid, boundary: TableBoundary, name: str) -> Table:
        with TableContext(name):
            header_row = self.header_detector.detect_header_row(grid, boundary)
            headers = self.header_detector.extract_headers(grid, header_row, boundary)
            if not self.header_detector.validate_headers(headers):
                logger.debug(f"Headers at row {header_row} are mostly generated: {headers}")
            return self.row_parser.parse_table(grid, boundary, headers, header_row, name)


def get_table_by_name(workbook: Workbook | None, name: str) -> Table | None:
    """Find a table by name across all sheets; a missing workbook yields None."""
    if workbook is None:
        return None
    return workbook.get_table_by_name(name)


def get_all_tables(workbook: Workbook | None) -> list[Table]:
    """Flatten all tables of a workbook; a missing workbook yields an empty list."""
    if workbook is None:
        return []
    return workbook.get_all_tables()
