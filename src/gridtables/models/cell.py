"""Data models for individual cells and merge regions."""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..utils.excel_utils import get_cell_address


class CellType(str, Enum):
    """Semantic type of a cell value."""

    EMPTY = "empty"
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    FORMULA = "formula"


CellValue = str | int | float | Decimal | bool | datetime | date | None

# Python types each CellType may carry as its value
_VALUE_SHAPES: dict[CellType, tuple[type, ...]] = {
    CellType.EMPTY: (type(None),),
    CellType.STRING: (str,),
    CellType.NUMBER: (int, float, Decimal),
    CellType.DATE: (datetime, date),
    CellType.BOOLEAN: (bool,),
    CellType.FORMULA: (str,),
}


class MergeRange(BaseModel):
    """A rectangular merged region, as seen from one of its cells."""

    model_config = ConfigDict(strict=True, frozen=True)

    start_row: int = Field(..., ge=0, description="First row of the merge (0-indexed)")
    start_col: int = Field(..., ge=0, description="First column of the merge (0-indexed)")
    end_row: int = Field(..., ge=0, description="Last row of the merge (inclusive)")
    end_col: int = Field(..., ge=0, description="Last column of the merge (inclusive)")
    is_origin: bool = Field(False, description="True only for the top-left cell of the merge")

    @model_validator(mode="after")
    def _check_corners(self) -> "MergeRange":
        if self.end_row < self.start_row or self.end_col < self.start_col:
            raise ValueError(
                f"Merge end ({self.end_row}, {self.end_col}) precedes start "
                f"({self.start_row}, {self.start_col})"
            )
        return self

    @property
    def row_span(self) -> int:
        return self.end_row - self.start_row + 1

    @property
    def col_span(self) -> int:
        return self.end_col - self.start_col + 1

    @property
    def excel_range(self) -> str:
        """Excel-style range (e.g., 'A1:C1')."""
        start = get_cell_address(self.start_row, self.start_col)
        end = get_cell_address(self.end_row, self.end_col)
        return f"{start}:{end}"

    def contains(self, row: int, col: int) -> bool:
        return self.start_row <= row <= self.end_row and self.start_col <= col <= self.end_col

    def same_region(self, other: "MergeRange") -> bool:
        """Whether both ranges describe the same rectangle, ignoring ``is_origin``."""
        return (
            self.start_row == other.start_row
            and self.start_col == other.start_col
            and self.end_row == other.end_row
            and self.end_col == other.end_col
        )


class Cell(BaseModel):
    """Represents a single cell with its typed value and metadata.

    ``value`` is a tagged union keyed by ``type``: empty cells carry ``None``,
    strings and formulas carry ``str``, numbers carry ``int``/``float``/``Decimal``,
    booleans carry ``bool`` and dates carry ``datetime``/``date``.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    type: CellType = Field(CellType.EMPTY, description="Semantic cell type")
    value: CellValue = Field(None, description="Parsed cell value")
    raw_text: str = Field("", description="Display text as read from the sheet")

    # Position information
    row: int = Field(..., ge=0, description="Row index (0-based)")
    col: int = Field(..., ge=0, description="Column index (0-based)")

    # Merge metadata
    is_merged: bool = Field(False, description="Cell is part of merged range")
    merge_range: MergeRange | None = Field(None, description="Merge region containing the cell")

    # Formula, comment and hyperlink metadata
    has_formula: bool = Field(False, description="Cell contains formula")
    formula_text: str | None = Field(None, description="Formula text")
    has_comment: bool = Field(False, description="Cell carries a comment")
    comment_text: str | None = Field(None, description="Comment text")
    has_hyperlink: bool = Field(False, description="Cell carries a hyperlink")
    hyperlink_target: str | None = Field(None, description="Hyperlink target")

    @model_validator(mode="after")
    def _check_value_shape(self) -> "Cell":
        allowed = _VALUE_SHAPES[self.type]
        value = self.value
        # bool is an int subclass; only BOOLEAN may carry it
        if isinstance(value, bool) and self.type is not CellType.BOOLEAN:
            raise ValueError(f"{self.type.value} cell cannot hold a boolean value")
        if not isinstance(value, allowed):
            raise ValueError(
                f"{self.type.value} cell cannot hold a value of type {type(value).__name__}"
            )
        return self

    @property
    def is_empty(self) -> bool:
        """Check if cell is effectively empty."""
        return self.type is CellType.EMPTY or self.raw_text == ""

    @property
    def is_merge_origin(self) -> bool:
        return self.merge_range is not None and self.merge_range.is_origin

    @property
    def excel_address(self) -> str:
        """Get Excel-style address (e.g., 'A1')."""
        return get_cell_address(self.row, self.col)

    def as_string(self) -> str:
        """Return the value as text, falling back to the raw text for non-strings."""
        if self.value is None:
            return ""
        if isinstance(self.value, str):
            return self.value
        return self.raw_text

    def as_float(self) -> float | None:
        if self.type is CellType.NUMBER and self.value is not None:
            return float(self.value)
        return None

    def as_datetime(self) -> datetime | None:
        if isinstance(self.value, datetime):
            return self.value
        if isinstance(self.value, date):
            return datetime.combine(self.value, time())
        return None

    @classmethod
    def empty(cls, row: int, col: int) -> "Cell":
        """Create an empty cell at the given position."""
        return cls(row=row, col=col)

    @classmethod
    def from_value(
        cls,
        value: Any,
        row: int,
        col: int,
        *,
        formula: str | None = None,
        comment: str | None = None,
        hyperlink: str | None = None,
    ) -> "Cell":
        """Build a cell from a plain Python value, inferring its type.

        Args:
            value: Cell value (for formulas, the cached result if known)
            row: Row index (0-based)
            col: Column index (0-based)
            formula: Formula text, if the cell holds a formula
            comment: Comment text, if any
            hyperlink: Hyperlink target, if any
        """
        metadata: dict[str, Any] = {
            "has_comment": comment is not None,
            "comment_text": comment,
            "has_hyperlink": hyperlink is not None,
            "hyperlink_target": hyperlink,
        }

        if formula is None and isinstance(value, str) and value.startswith("="):
            formula, value = value, None

        if formula is not None:
            raw = _display_text(value) if value is not None else ""
            return cls(
                type=CellType.FORMULA,
                value=raw,
                raw_text=raw,
                row=row,
                col=col,
                has_formula=True,
                formula_text=formula,
                **metadata,
            )

        cell_type, typed_value = _infer(value)
        raw = "" if cell_type is CellType.EMPTY else _display_text(typed_value)
        return cls(
            type=cell_type, value=typed_value, raw_text=raw, row=row, col=col, **metadata
        )


def _infer(value: Any) -> tuple[CellType, CellValue]:
    """Map a Python value onto a (CellType, value) pair."""
    if value is None:
        return CellType.EMPTY, None
    if isinstance(value, bool):
        return CellType.BOOLEAN, value
    if isinstance(value, (int, float, Decimal)):
        return CellType.NUMBER, value
    if isinstance(value, (datetime, date)):
        return CellType.DATE, value
    text = value if isinstance(value, str) else str(value)
    if text == "":
        return CellType.EMPTY, None
    return CellType.STRING, text


def _display_text(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time():
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


# Row-major cell grid for one sheet; rows may differ in length
Grid = list[list[Cell]]


class MergeRegionInfo(BaseModel):
    """A raw merge descriptor as stored in the workbook."""

    model_config = ConfigDict(frozen=True)

    start_cell: str = Field(..., description="Top-left corner reference (e.g., 'A1')")
    end_cell: str = Field(..., description="Bottom-right corner reference (e.g., 'C1')")
    value: str = Field("", description="Display value of the merged region")
