"""Abstract interface of the spreadsheet access layer."""

import logging
from abc import ABC, abstractmethod

from ..models.cell import Grid, MergeRegionInfo
from ..models.workbook import NamedRange

logger = logging.getLogger(__name__)


class SpreadsheetSource(ABC):
    """Source of raw sheet grids, merge descriptors and defined names.

    A source instance is a single reading handle and must not be shared between
    concurrent workers; call ``open_handle`` to obtain an independent one.
    """

    def __init__(self, file_path: str):
        self.file_path = file_path

    @abstractmethod
    def get_sheet_names(self) -> list[str]:
        """Sheet names in workbook order."""

    @abstractmethod
    def read_sheet_grid(self, sheet_name: str) -> Grid:
        """Return a freshly built, typed cell grid for the sheet.

        Raises:
            SheetNotFoundError: If the sheet does not exist
        """

    @abstractmethod
    def get_merge_regions(self, sheet_name: str) -> list[MergeRegionInfo]:
        """Return the raw merge descriptors of the sheet.

        Raises:
            SheetNotFoundError: If the sheet does not exist
        """

    def get_defined_names(self) -> list[NamedRange]:
        """Return the workbook's defined names; sources without any return an empty list."""
        return []

    @abstractmethod
    def open_handle(self) -> "SpreadsheetSource":
        """Return an independent handle onto the same workbook."""

    def close(self) -> None:
        """Release resources held by this handle."""

    def __enter__(self) -> "SpreadsheetSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
