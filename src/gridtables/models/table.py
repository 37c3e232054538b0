"""Table-related models."""

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.constants import COLUMN_STATS
from ..utils.excel_utils import get_cell_address
from .cell import Cell, CellType

if TYPE_CHECKING:
    import pandas as pd


class TableBoundary(BaseModel):
    """Represents a rectangular region of a sheet, inclusive on both ends."""

    model_config = ConfigDict(strict=True, frozen=True)

    start_row: int = Field(..., ge=0, description="Starting row (0-indexed)")
    end_row: int = Field(..., ge=0, description="Ending row (inclusive)")
    start_col: int = Field(..., ge=0, description="Starting column (0-indexed)")
    end_col: int = Field(..., ge=0, description="Ending column (inclusive)")

    @model_validator(mode="after")
    def _check_order(self) -> "TableBoundary":
        if self.end_row < self.start_row:
            raise ValueError(f"end_row {self.end_row} precedes start_row {self.start_row}")
        if self.end_col < self.start_col:
            raise ValueError(f"end_col {self.end_col} precedes start_col {self.start_col}")
        return self

    @property
    def row_count(self) -> int:
        """Number of rows in the boundary."""
        return self.end_row - self.start_row + 1

    @property
    def col_count(self) -> int:
        """Number of columns in the boundary."""
        return self.end_col - self.start_col + 1

    @property
    def excel_range(self) -> str:
        """Convert to Excel-style range (e.g., 'A1:D10')."""
        start = get_cell_address(self.start_row, self.start_col)
        end = get_cell_address(self.end_row, self.end_col)
        return f"{start}:{end}"

    def contains(self, row: int, col: int) -> bool:
        return self.start_row <= row <= self.end_row and self.start_col <= col <= self.end_col

    def overlaps(self, other: "TableBoundary") -> bool:
        """Whether the two rectangles share at least one cell."""
        return (
            self.start_row <= other.end_row
            and other.start_row <= self.end_row
            and self.start_col <= other.end_col
            and other.start_col <= self.end_col
        )

    def union(self, other: "TableBoundary") -> "TableBoundary":
        """Smallest boundary containing both rectangles."""
        return TableBoundary(
            start_row=min(self.start_row, other.start_row),
            end_row=max(self.end_row, other.end_row),
            start_col=min(self.start_col, other.start_col),
            end_col=max(self.end_col, other.end_col),
        )


class Row(BaseModel):
    """A data row keyed by header."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0, description="Position among the table's data rows")
    source_row: int = Field(..., ge=0, description="Grid row the data came from (0-indexed)")
    values: dict[str, Cell] = Field(default_factory=dict, description="Header to cell mapping")
    cells: list[Cell] = Field(default_factory=list, description="Cells in header order")

    def get(self, header: str) -> Cell | None:
        """Return the cell under ``header``, or None if the row has no such column."""
        return self.values.get(header)

    def to_dict(self) -> dict[str, Any]:
        """Map each header to the cell's parsed value."""
        return {header: cell.value for header, cell in self.values.items()}


RowPredicate = Callable[[Row], bool]


class ColumnStats(BaseModel):
    """Statistical summary of a single table column."""

    name: str = Field(..., description="Column header")
    index: int = Field(..., ge=0, description="Column position (0-based)")
    inferred_type: CellType = Field(CellType.EMPTY, description="Most common non-empty type")
    total_count: int = Field(0, ge=0)
    empty_count: int = Field(0, ge=0)
    string_count: int = Field(0, ge=0)
    number_count: int = Field(0, ge=0)
    date_count: int = Field(0, ge=0)
    bool_count: int = Field(0, ge=0)
    formula_count: int = Field(0, ge=0)
    unique_count: int = Field(0, ge=0)
    sample_values: list[str] = Field(default_factory=list, description="First distinct values")
    min: float | None = Field(None, description="Minimum numeric value")
    max: float | None = Field(None, description="Maximum numeric value")
    sum: float | None = Field(None, description="Sum of numeric values")
    avg: float | None = Field(None, description="Mean of numeric values")

    @property
    def has_numeric_stats(self) -> bool:
        return self.number_count > 0

    @property
    def non_empty_count(self) -> int:
        return self.total_count - self.empty_count


class DuplicateGroup(BaseModel):
    """Rows sharing one key value."""

    key_value: str
    rows: list[Row]

    @property
    def count(self) -> int:
        return len(self.rows)


class Table(BaseModel):
    """A detected table with normalized headers and data rows.

    Tables are immutable; every transformation returns a new table.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Table name")
    headers: list[str] = Field(default_factory=list, description="Unique column names")
    rows: list[Row] = Field(default_factory=list, description="Data rows below the header")
    header_row: int = Field(..., ge=0, description="Grid row holding the header")
    start_row: int = Field(..., ge=0, description="Starting row (0-indexed)")
    end_row: int = Field(..., ge=0, description="Ending row (inclusive)")
    start_col: int = Field(..., ge=0, description="Starting column (0-indexed)")
    end_col: int = Field(..., ge=0, description="Ending column (inclusive)")

    @field_validator("headers")
    @classmethod
    def _headers_unique(cls, headers: list[str]) -> list[str]:
        seen: set[str] = set()
        for header in headers:
            if header in seen:
                raise ValueError(f"Duplicate header: {header!r}")
            seen.add(header)
        return headers

    @property
    def row_count(self) -> int:
        """Number of data rows (excluding header)."""
        return len(self.rows)

    @property
    def col_count(self) -> int:
        return len(self.headers)

    @property
    def boundary(self) -> TableBoundary:
        return TableBoundary(
            start_row=self.start_row,
            end_row=self.end_row,
            start_col=self.start_col,
            end_col=self.end_col,
        )

    def _require_column(self, column: str) -> None:
        if column not in self.headers:
            raise KeyError(f"Column {column!r} not found in table {self.name!r}")

    def _with_rows(self, rows: list[Row], headers: list[str] | None = None) -> "Table":
        update: dict[str, Any] = {"rows": rows}
        if headers is not None:
            update["headers"] = headers
        return self.model_copy(update=update)

    def get_column_values(self, header: str) -> list[Cell]:
        """Return the cells of one column, top to bottom."""
        self._require_column(header)
        return [row.values[header] for row in self.rows if header in row.values]

    def filter(self, predicate: RowPredicate) -> "Table":
        """Return a new table containing only rows matching ``predicate``."""
        return self._with_rows([row for row in self.rows if predicate(row)])

    def select(self, *columns: str) -> "Table":
        """Return a new table restricted to ``columns``, in the order given.

        Unknown column names are ignored.
        """
        return self._project(columns)

    def reorder(self, *columns: str) -> "Table":
        """Return a new table with columns in the given order; unlisted columns are dropped."""
        return self._project(columns)

    def _project(self, columns: Iterable[str]) -> "Table":
        known = set(self.headers)
        headers = [col for col in dict.fromkeys(columns) if col in known]
        rows = []
        for row in self.rows:
            values = {col: row.values[col] for col in headers if col in row.values}
            rows.append(
                Row(
                    index=row.index,
                    source_row=row.source_row,
                    values=values,
                    cells=list(values.values()),
                )
            )
        return self._with_rows(rows, headers)

    def rename(self, mapping: dict[str, str]) -> "Table":
        """Return a new table with headers renamed by ``mapping`` (old name to new name).

        Raises:
            ValueError: If the renaming produces duplicate headers
        """
        headers = [mapping.get(h, h) for h in self.headers]
        if len(set(headers)) != len(headers):
            raise ValueError(f"Renaming {self.name!r} with {mapping} produces duplicate headers")
        rows = [
            Row(
                index=row.index,
                source_row=row.source_row,
                values={mapping.get(h, h): cell for h, cell in row.values.items()},
                cells=list(row.cells),
            )
            for row in self.rows
        ]
        return self._with_rows(rows, headers)

    def find_duplicates(self, key_column: str) -> list[Row]:
        """Return rows repeating an earlier key value; first occurrences are excluded."""
        self._require_column(key_column)
        seen: set[str] = set()
        duplicates = []
        for row in self.rows:
            cell = row.get(key_column)
            if cell is None:
                continue
            if cell.raw_text in seen:
                duplicates.append(row)
            else:
                seen.add(cell.raw_text)
        return duplicates

    def deduplicate(self, key_column: str) -> "Table":
        """Return a new table keeping the first row for each key value."""
        self._require_column(key_column)
        seen: set[str] = set()
        rows = []
        for row in self.rows:
            cell = row.get(key_column)
            if cell is None or cell.raw_text in seen:
                continue
            seen.add(cell.raw_text)
            rows.append(row)
        return self._with_rows(rows)

    def find_duplicate_groups(self, key_column: str) -> list[DuplicateGroup]:
        """Group rows sharing a key value, keeping only groups with more than one row.

        Groups are ordered by the first appearance of their key.
        """
        self._require_column(key_column)
        groups: dict[str, list[Row]] = {}
        for row in self.rows:
            cell = row.get(key_column)
            if cell is not None:
                groups.setdefault(cell.raw_text, []).append(row)

        return [
            DuplicateGroup(key_value=key, rows=rows)
            for key, rows in groups.items()
            if len(rows) > 1
        ]

    def analyze_columns(self) -> list[ColumnStats]:
        """Compute per-column statistics."""
        results = []
        for index, header in enumerate(self.headers):
            counts = dict.fromkeys(CellType, 0)
            empty = 0
            unique: dict[str, None] = {}
            numbers: list[float] = []

            for row in self.rows:
                cell = row.get(header)
                if cell is None or cell.is_empty:
                    empty += 1
                    continue
                counts[cell.type] += 1
                number = cell.as_float()
                if number is not None:
                    numbers.append(number)
                unique.setdefault(cell.raw_text, None)

            stats = ColumnStats(
                name=header,
                index=index,
                inferred_type=_dominant_type(counts),
                total_count=len(self.rows),
                empty_count=empty,
                string_count=counts[CellType.STRING],
                number_count=counts[CellType.NUMBER],
                date_count=counts[CellType.DATE],
                bool_count=counts[CellType.BOOLEAN],
                formula_count=counts[CellType.FORMULA],
                unique_count=len(unique),
                sample_values=list(unique)[: COLUMN_STATS.MAX_SAMPLE_VALUES],
            )
            if numbers:
                total = sum(numbers)
                stats = stats.model_copy(
                    update={
                        "min": min(numbers),
                        "max": max(numbers),
                        "sum": total,
                        "avg": total / len(numbers),
                    }
                )
            results.append(stats)

        return results

    def to_records(self) -> list[dict[str, Any]]:
        """Rows as dictionaries of header to parsed value."""
        return [{header: _value_of(row, header) for header in self.headers} for row in self.rows]

    def to_dataframe(self) -> "pd.DataFrame":
        """Convert the table to a pandas DataFrame with one column per header."""
        import pandas as pd

        return pd.DataFrame.from_records(self.to_records(), columns=self.headers)


def _value_of(row: Row, header: str) -> Any:
    cell = row.get(header)
    return None if cell is None else cell.value


def _dominant_type(counts: dict[CellType, int]) -> CellType:
    """Most common non-empty type; ties favor string, then number, date, boolean."""
    candidates = (CellType.STRING, CellType.NUMBER, CellType.DATE, CellType.BOOLEAN)
    if not any(counts[t] for t in (*candidates, CellType.FORMULA)):
        return CellType.EMPTY

    best = CellType.STRING
    for cell_type in candidates[1:]:
        if counts[cell_type] > counts[best]:
            best = cell_type
    return best
