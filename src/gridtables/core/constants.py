"""Centralized constants for GridTables.

Fixed heuristics used by the structural inference engine. Anything a caller may
tune lives in ``gridtables.config.DetectionConfig`` instead.
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class TableDetectionConstants:
    """Constants for table boundary expansion."""

    # Rows sampled below the seed row when deciding if a column holds data
    RIGHT_SAMPLE_ROWS: Final[int] = 10

    # Fully empty sampled columns tolerated inside a table before stopping
    MAX_EMPTY_COLUMN_BRIDGE: Final[int] = 1


@dataclass(frozen=True)
class HeaderScoringConstants:
    """Constants for header row scoring."""

    # Rows inspected from the top of a boundary
    SCAN_ROWS: Final[int] = 6

    # Score components
    DENSITY_WEIGHT: Final[float] = 40.0
    STRING_RATIO_WEIGHT: Final[float] = 30.0
    COMPARATIVE_BONUS: Final[float] = 20.0
    PATTERN_BONUS: Final[float] = 2.0
    MERGE_ORIGIN_BONUS: Final[float] = 5.0

    # Multi-row header band
    MAX_HEADER_ROWS: Final[int] = 3

    # Header validation
    MEANINGFUL_RATIO: Final[float] = 0.5
    PLACEHOLDER_PREFIX: Final[str] = "Column_"
    DEFAULT_LEVEL_SEPARATOR: Final[str] = " > "


@dataclass(frozen=True)
class ColumnStatsConstants:
    """Constants for column analysis."""

    MAX_SAMPLE_VALUES: Final[int] = 5


@dataclass(frozen=True)
class ExcelLimits:
    """Excel format limitations."""

    SUPPORTED_EXTENSIONS: Final[tuple[str, ...]] = (".xlsx", ".xlsm")


@dataclass(frozen=True)
class Keywords:
    """Keywords for pattern detection."""

    # Tokens that commonly appear in header cells
    COMMON_HEADER_TOKENS: Final[tuple[str, ...]] = (
        "id",
        "name",
        "date",
        "time",
        "type",
        "status",
        "email",
        "phone",
        "address",
        "city",
        "state",
        "country",
        "zip",
        "code",
        "description",
        "price",
        "amount",
        "quantity",
        "total",
        "number",
        "count",
        "value",
        "first",
        "last",
        "created",
        "updated",
        "modified",
        "title",
        "category",
    )


# Create singleton instances for easy access
TABLE_DETECTION = TableDetectionConstants()
HEADER_SCORING = HeaderScoringConstants()
COLUMN_STATS = ColumnStatsConstants()
EXCEL_LIMITS = ExcelLimits()
KEYWORDS = Keywords()
