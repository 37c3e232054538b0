"""Header row detection and column name normalization."""

import logging
import re

from ..config import DEFAULT_DETECTION_CONFIG, DetectionConfig
from ..core.constants import HEADER_SCORING, KEYWORDS
from ..models.cell import Cell, CellType, Grid
from ..models.table import TableBoundary

logger = logging.getLogger(__name__)


def _row_cells(grid: Grid, row: int, boundary: TableBoundary) -> list[Cell]:
    """Cells of ``row`` within the boundary's columns, clipped to the row's length."""
    if not 0 <= row < len(grid):
        return []
    return grid[row][boundary.start_col : boundary.end_col + 1]


def _placeholder(col: int) -> str:
    return f"{HEADER_SCORING.PLACEHOLDER_PREFIX}{col + 1}"


_PLACEHOLDER_PATTERN = re.compile(rf"{re.escape(HEADER_SCORING.PLACEHOLDER_PREFIX)}\d+(?:_\d+)*")


def is_placeholder(header: str) -> bool:
    """Whether ``header`` is a generated ``Column_<n>`` name, possibly with a dedupe suffix."""
    return _PLACEHOLDER_PATTERN.fullmatch(header) is not None


class _HeaderNamer:
    """Assigns unique, case-insensitively distinct names within one header list."""

    def __init__(self) -> None:
        self._occurrences: dict[str, int] = {}
        self._taken: set[str] = set()

    def name(self, label: str, col: int) -> str:
        header = label.strip() or _placeholder(col)
        key = header.lower()
        occurrence = self._occurrences.get(key, 0) + 1
        self._occurrences[key] = occurrence

        candidate = header if occurrence == 1 else f"{header}_{occurrence}"
        while candidate.lower() in self._taken:
            occurrence += 1
            candidate = f"{header}_{occurrence}"

        self._taken.add(candidate.lower())
        return candidate


class HeaderDetector:
    """Find the header row of a table and derive its column names."""

    def __init__(self, config: DetectionConfig | None = None):
        self.config = config or DEFAULT_DETECTION_CONFIG
        self._tokens = KEYWORDS.COMMON_HEADER_TOKENS

    def detect_header_row(self, grid: Grid, boundary: TableBoundary) -> int:
        """Return the most header-like row among the first rows of the boundary.

        Ties keep the topmost row. A boundary starting beyond the grid returns its own
        start row.
        """
        best_row = boundary.start_row
        if best_row >= len(grid):
            return best_row

        best_score = 0.0
        last_row = min(boundary.start_row + HEADER_SCORING.SCAN_ROWS - 1, boundary.end_row)
        for row in range(boundary.start_row, last_row + 1):
            score = self.score_row(grid, row, boundary)
            if score > best_score:
                best_score = score
                best_row = row

        logger.debug(f"Header row {best_row} (score {best_score:.1f}) for {boundary.excel_range}")
        return best_row

    def score_row(self, grid: Grid, row: int, boundary: TableBoundary) -> float:
        """Score how likely ``row`` is to be a header row."""
        cells = _row_cells(grid, row, boundary)
        if not cells:
            return 0.0

        non_empty = [cell for cell in cells if not cell.is_empty]
        string_count = sum(1 for cell in non_empty if cell.type is CellType.STRING)

        score = len(non_empty) / len(cells) * HEADER_SCORING.DENSITY_WEIGHT
        if non_empty:
            score += string_count / len(non_empty) * HEADER_SCORING.STRING_RATIO_WEIGHT

        # Headers are usually more textual than the row beneath them
        next_row = row + 1
        if next_row <= boundary.end_row and next_row < len(grid):
            next_strings = sum(
                1 for cell in _row_cells(grid, next_row, boundary) if cell.type is CellType.STRING
            )
            if string_count > next_strings:
                score += HEADER_SCORING.COMPARATIVE_BONUS

        for cell in non_empty:
            text = cell.as_string().strip().lower()
            if any(token in text for token in self._tokens):
                score += HEADER_SCORING.PATTERN_BONUS

        merge_origins = sum(1 for cell in cells if cell.is_merged and cell.is_merge_origin)
        score += merge_origins * HEADER_SCORING.MERGE_ORIGIN_BONUS

        return score

    def extract_headers(self, grid: Grid, header_row: int, boundary: TableBoundary) -> list[str]:
        """Read normalized, unique column names from ``header_row``.

        Blank labels become ``Column_<n>`` (``n`` is the 1-based grid column) and repeats
        get a ``_<k>`` suffix, compared case-insensitively.
        """
        namer = _HeaderNamer()
        return [
            namer.name(cell.as_string(), boundary.start_col + offset)
            for offset, cell in enumerate(_row_cells(grid, header_row, boundary))
        ]

    def validate_headers(self, headers: list[str]) -> bool:
        """Require ``min_columns`` headers, at least half of them not generated."""
        if not headers or len(headers) < self.config.min_columns:
            return False

        meaningful = sum(1 for header in headers if header and not is_placeholder(header))
        return meaningful / len(headers) >= HEADER_SCORING.MEANINGFUL_RATIO

    def detect_header_rows(self, grid: Grid, boundary: TableBoundary) -> tuple[int, int]:
        """Find the header band starting at the boundary's first row.

        The band extends to the lowest row reached by a merge anchored in the first
        row, limited to three rows and to the boundary.
        """
        start = boundary.start_row
        end = start
        if start >= len(grid):
            return start, end

        for cell in _row_cells(grid, start, boundary):
            if cell.merge_range is not None and cell.merge_range.end_row > end:
                end = cell.merge_range.end_row

        end = min(end, start + HEADER_SCORING.MAX_HEADER_ROWS - 1, boundary.end_row)
        return start, end

    def extract_hierarchical_headers(
        self, grid: Grid, header_start: int, header_end: int, boundary: TableBoundary
    ) -> list[list[str]]:
        """One normalized label list per row of the band; rows beyond the grid yield [].

        Labels are stripped and blanks become ``Column_<n>``, but repeats are kept so a
        group label spread over merged columns stays the same across them.
        """
        if header_end < header_start:
            return []
        return [
            [
                cell.as_string().strip() or _placeholder(boundary.start_col + offset)
                for offset, cell in enumerate(_row_cells(grid, row, boundary))
            ]
            for row in range(header_start, header_end + 1)
        ]

    def flatten_hierarchical_headers(
        self, levels: list[list[str]], separator: str = HEADER_SCORING.DEFAULT_LEVEL_SEPARATOR
    ) -> list[str]:
        """Combine header levels per column, e.g. ``["Sales", "Q1"]`` into ``"Sales > Q1"``.

        Generated and empty labels are skipped, as is a label equal to the one just
        taken from the level above. Columns without any label fall back to a
        generated name.
        """
        if not levels:
            return []

        flattened = []
        for col in range(len(levels[-1])):
            parts: list[str] = []
            for level in levels:
                if col >= len(level):
                    continue
                label = level[col]
                if not label or is_placeholder(label):
                    continue
                if parts and parts[-1] == label:
                    continue
                parts.append(label)
            flattened.append(separator.join(parts) if parts else _placeholder(col))

        return flattened

    def extract_flattened_headers(
        self,
        grid: Grid,
        boundary: TableBoundary,
        separator: str = HEADER_SCORING.DEFAULT_LEVEL_SEPARATOR,
    ) -> tuple[list[str], int]:
        """Detect the header band and return unique flattened names with the band's last row."""
        header_start, header_end = self.detect_header_rows(grid, boundary)
        if header_start == header_end:
            return self.extract_headers(grid, header_start, boundary), header_end

        levels = self.extract_hierarchical_headers(grid, header_start, header_end, boundary)
        namer = _HeaderNamer()
        # Fallback names from flattening are relative; regenerate them from the grid column
        headers = [
            namer.name("" if is_placeholder(label) else label, boundary.start_col + offset)
            for offset, label in enumerate(self.flatten_hierarchical_headers(levels, separator))
        ]
        return headers, header_end
