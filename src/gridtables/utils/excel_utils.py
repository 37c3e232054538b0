"""Helpers for A1-style cell references."""

import re

from ..core.exceptions import CellReferenceError

_CELL_REF_PATTERN = re.compile(r"^\$?([A-Za-z]{1,3})\$?(\d+)$")


def get_column_letter(col: int) -> str:
    """Convert a 0-based column index to letters (0 -> 'A', 27 -> 'AB')."""
    if col < 0:
        raise ValueError(f"Column index must be non-negative, got {col}")

    result = ""
    while col >= 0:
        result = chr(col % 26 + ord("A")) + result
        col = col // 26 - 1
    return result


def column_index_from_letters(letters: str) -> int:
    """Convert column letters to a 0-based column index ('A' -> 0)."""
    col = 0
    for char in letters.upper():
        col = col * 26 + (ord(char) - ord("A") + 1)
    return col - 1


def get_cell_address(row: int, col: int) -> str:
    """Convert 0-based (row, col) to an A1 address."""
    return f"{get_column_letter(col)}{row + 1}"


def parse_cell_reference(reference: str) -> tuple[int, int]:
    """Parse an A1 reference (absolute markers allowed) into 0-based (row, col).

    Raises:
        CellReferenceError: If the reference is not a valid cell address
    """
    match = _CELL_REF_PATTERN.match(reference.strip()) if reference else None
    if not match:
        raise CellReferenceError(reference)

    col_str, row_str = match.groups()
    row = int(row_str) - 1
    if row < 0:
        raise CellReferenceError(reference)

    return row, column_index_from_letters(col_str)


def parse_range_reference(refers_to: str) -> tuple[str, tuple[int, int, int, int]]:
    """Parse a defined-name reference like ``'Sheet 1'!$A$1:$B$10``.

    Returns:
        Tuple of (sheet_name, (start_row, start_col, end_row, end_col)), 0-based.
        The sheet name is empty when the reference carries none.

    Raises:
        CellReferenceError: If either corner cannot be parsed
    """
    reference = refers_to.strip().lstrip("=")
    sheet_name = ""
    cell_range = reference

    if "!" in reference:
        sheet_part, cell_range = reference.rsplit("!", 1)
        sheet_name = sheet_part
        if len(sheet_name) >= 2 and sheet_name[0] == "'" and sheet_name[-1] == "'":
            sheet_name = sheet_name[1:-1].replace("''", "'")

    if ":" in cell_range:
        start_ref, end_ref = cell_range.split(":", 1)
    else:
        start_ref = end_ref = cell_range

    start_row, start_col = parse_cell_reference(start_ref)
    end_row, end_col = parse_cell_reference(end_ref)
    return sheet_name, (start_row, start_col, end_row, end_col)
