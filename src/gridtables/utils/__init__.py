"""Utility modules for GridTables."""

from .excel_utils import get_cell_address, get_column_letter, parse_cell_reference

__all__ = ["get_cell_address", "get_column_letter", "parse_cell_reference"]
