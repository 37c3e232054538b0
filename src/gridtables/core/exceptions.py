"""Custom exceptions for GridTables."""


class GridTablesError(Exception):
    """Base exception for all GridTables errors."""

    pass


class ConfigurationError(GridTablesError):
    """Raised when configuration is invalid."""

    pass


class FileTypeError(GridTablesError):
    """Raised when file type is not supported or cannot be determined."""

    pass


class ReaderError(GridTablesError):
    """Raised when the spreadsheet access layer fails."""

    pass


class SheetNotFoundError(ReaderError):
    """Raised when a requested sheet does not exist in the workbook."""

    def __init__(self, sheet_name: str):
        self.sheet_name = sheet_name
        super().__init__(f"Sheet '{sheet_name}' not found")


class CellReferenceError(ReaderError):
    """Raised when an A1-style cell reference cannot be parsed."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Invalid cell reference: {reference!r}")


class InvalidRangeError(ReaderError):
    """Raised when a range degenerates (start beyond end) after clamping."""

    pass


class NamedRangeNotFoundError(ReaderError):
    """Raised when a defined name does not exist in the workbook."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Named range '{name}' not found")


class SheetProcessingError(GridTablesError):
    """Raised when a sheet cannot be turned into tables.

    Wraps the underlying access-layer failure with the sheet it happened on.
    """

    def __init__(self, sheet_name: str, sheet_index: int, cause: Exception):
        self.sheet_name = sheet_name
        self.sheet_index = sheet_index
        super().__init__(f"Failed to process sheet '{sheet_name}' (index {sheet_index}): {cause}")
