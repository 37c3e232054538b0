"""Row-level comparison of two versions of a table."""

from pydantic import BaseModel, Field

from .table import Row, Table


class CellDiff(BaseModel):
    """A changed value in one column."""

    column: str
    old_value: str
    new_value: str


class RowDiff(BaseModel):
    """A row present in both tables whose values differ."""

    key_value: str
    old_row: Row
    new_row: Row
    changes: list[CellDiff] = Field(default_factory=list)


class DiffResult(BaseModel):
    """Differences between two tables matched on a key column."""

    key_column: str
    added_rows: list[Row] = Field(default_factory=list, description="Only in the new table")
    removed_rows: list[Row] = Field(default_factory=list, description="Only in the old table")
    modified_rows: list[RowDiff] = Field(default_factory=list, description="Changed rows")

    @property
    def has_changes(self) -> bool:
        return bool(self.added_rows or self.removed_rows or self.modified_rows)

    @property
    def total_changes(self) -> int:
        return len(self.added_rows) + len(self.removed_rows) + len(self.modified_rows)


def _rows_by_key(table: Table, key_column: str) -> dict[str, Row]:
    rows: dict[str, Row] = {}
    for row in table.rows:
        cell = row.get(key_column)
        if cell is not None:
            rows[cell.raw_text] = row
    return rows


def _compare_rows(
    old_row: Row, new_row: Row, headers: list[str], key_column: str
) -> list[CellDiff]:
    changes = []
    for header in headers:
        if header == key_column:
            continue
        old_cell = old_row.get(header)
        new_cell = new_row.get(header)
        old_value = old_cell.raw_text if old_cell is not None else ""
        new_value = new_cell.raw_text if new_cell is not None else ""
        if old_value != new_value:
            changes.append(CellDiff(column=header, old_value=old_value, new_value=new_value))
    return changes


def diff_tables(old: Table, new: Table, key_column: str) -> DiffResult:
    """Compare two tables row by row, matching rows on ``key_column``.

    Values are compared by raw text over the old table's headers. When a key repeats
    within one table, the last row with that key is used.

    Raises:
        KeyError: If either table lacks the key column
    """
    for table in (old, new):
        if key_column not in table.headers:
            raise KeyError(f"Key column {key_column!r} not found in table {table.name!r}")

    old_rows = _rows_by_key(old, key_column)
    new_rows = _rows_by_key(new, key_column)

    result = DiffResult(key_column=key_column)
    for key, old_row in old_rows.items():
        new_row = new_rows.get(key)
        if new_row is None:
            result.removed_rows.append(old_row)
            continue
        changes = _compare_rows(old_row, new_row, old.headers, key_column)
        if changes:
            result.modified_rows.append(
                RowDiff(key_value=key, old_row=old_row, new_row=new_row, changes=changes)
            )

    result.added_rows.extend(row for key, row in new_rows.items() if key not in old_rows)
    return result
