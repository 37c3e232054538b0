"""GridTables - Schema-free table inference for spreadsheets."""

__version__ = "0.1.0"

from gridtables.config import DEFAULT_DETECTION_CONFIG, Config, DetectionConfig
from gridtables.gridtables import GridTables, read_file, read_sheet
from gridtables.models import Cell, CellType, Row, Sheet, Table, TableBoundary, Workbook
from gridtables.readers import ExcelSource, InMemorySource
from gridtables.workbook_reader import WorkbookReader, get_all_tables, get_table_by_name

__all__ = [
    "GridTables",
    "WorkbookReader",
    "Config",
    "DetectionConfig",
    "DEFAULT_DETECTION_CONFIG",
    "Cell",
    "CellType",
    "Row",
    "Table",
    "TableBoundary",
    "Sheet",
    "Workbook",
    "ExcelSource",
    "InMemorySource",
    "read_file",
    "read_sheet",
    "get_table_by_name",
    "get_all_tables",
]
