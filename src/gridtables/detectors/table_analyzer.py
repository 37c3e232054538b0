"""Table boundary detection over a merge-aware cell grid.

Tables are grown from seed cells found in row-major order. A seed expands left
along its own row, right across columns that carry data within a short sample of
rows, and down while rows inside the column span carry data. The result is widened
so no merged region is cut, and every cell it covers is marked visited so later
seeds never re-detect it.
"""

import logging

import numpy as np

from ..config import DEFAULT_DETECTION_CONFIG, DetectionConfig
from ..core.constants import TABLE_DETECTION
from ..models.cell import Grid
from ..models.table import TableBoundary

logger = logging.getLogger(__name__)


def grid_masks(grid: Grid) -> tuple[np.ndarray, np.ndarray]:
    """Build boolean (occupied, present) masks padded to the widest row.

    ``present`` marks positions that exist in the (possibly jagged) grid and
    ``occupied`` marks the non-empty cells among them.
    """
    n_rows = len(grid)
    n_cols = max((len(row) for row in grid), default=0)
    occupied = np.zeros((n_rows, n_cols), dtype=bool)
    present = np.zeros((n_rows, n_cols), dtype=bool)

    for row_idx, row in enumerate(grid):
        present[row_idx, : len(row)] = True
        for col_idx, cell in enumerate(row):
            occupied[row_idx, col_idx] = not cell.is_empty

    return occupied, present


def _window_sums(mask: np.ndarray, size: int) -> np.ndarray:
    """Sum of ``mask`` over every ``size`` x ``size`` window, via an integral image."""
    integral = np.pad(mask.astype(np.int64).cumsum(axis=0).cumsum(axis=1), ((1, 0), (1, 0)))
    return (
        integral[size:, size:]
        - integral[:-size, size:]
        - integral[size:, :-size]
        + integral[:-size, :-size]
    )


def merge_overlapping_regions(regions: list[TableBoundary]) -> list[TableBoundary]:
    """Union overlapping boundaries until no two of them overlap."""
    merged = list(regions)
    changed = True
    while changed:
        changed = False
        result: list[TableBoundary] = []
        for region in merged:
            for i, existing in enumerate(result):
                if existing.overlaps(region):
                    result[i] = existing.union(region)
                    changed = True
                    break
            else:
                result.append(region)
        merged = result
    return merged


class TableAnalyzer:
    """Detect rectangular table regions in a cell grid."""

    def __init__(self, config: DetectionConfig | None = None):
        self.config = config or DEFAULT_DETECTION_CONFIG

    def detect_tables(self, grid: Grid | None) -> list[TableBoundary]:
        """Find all tables in the grid, in the order their seed cells are met.

        Args:
            grid: Row-major cell grid; rows may differ in length

        Returns:
            Boundaries of regions meeting ``min_rows`` and ``min_columns``
        """
        if not grid:
            return []

        occupied, _ = grid_masks(grid)
        visited = np.zeros_like(occupied)
        tables: list[TableBoundary] = []

        # argwhere yields coordinates in row-major order
        for row, col in np.argwhere(occupied):
            if visited[row, col]:
                continue

            boundary = self._expand(grid, occupied, visited, int(row), int(col))
            visited[
                boundary.start_row : boundary.end_row + 1,
                boundary.start_col : boundary.end_col + 1,
            ] = True

            if not self._is_valid(boundary):
                logger.debug(f"Discarding fragment {boundary.excel_range}: below minimum size")
                continue
            if any(boundary.overlaps(table) for table in tables):
                logger.debug(f"Discarding {boundary.excel_range}: overlaps an earlier table")
                continue

            logger.debug(f"Detected table at {boundary.excel_range}")
            tables.append(boundary)

        return tables

    def _expand(
        self,
        grid: Grid,
        occupied: np.ndarray,
        visited: np.ndarray,
        start_row: int,
        start_col: int,
    ) -> TableBoundary:
        n_rows, n_cols = occupied.shape
        # Cells claimed by an earlier region count as empty
        available = occupied & ~visited

        left = start_col
        while left > 0 and available[start_row, left - 1]:
            left -= 1

        right = start_col
        consecutive_empty = 0
        sample_end = min(start_row + TABLE_DETECTION.RIGHT_SAMPLE_ROWS, n_rows)
        for col in range(start_col + 1, n_cols):
            if available[start_row:sample_end, col].any():
                right = col
                consecutive_empty = 0
            else:
                consecutive_empty += 1
                if consecutive_empty > TABLE_DETECTION.MAX_EMPTY_COLUMN_BRIDGE:
                    break

        end_row = start_row
        empty_rows = 0
        for row in range(start_row + 1, n_rows):
            if available[row, left : right + 1].any():
                end_row = row
                empty_rows = 0
            else:
                empty_rows += 1
                if empty_rows > self.config.max_empty_rows:
                    break

        boundary = TableBoundary(
            start_row=start_row, end_row=end_row, start_col=left, end_col=right
        )
        return self._expand_for_merges(grid, boundary, n_rows, n_cols)

    @staticmethod
    def _expand_for_merges(
        grid: Grid, boundary: TableBoundary, n_rows: int, n_cols: int
    ) -> TableBoundary:
        """Grow the boundary until it fully contains every merge it touches."""
        while True:
            grown = boundary
            for row in range(boundary.start_row, min(boundary.end_row + 1, n_rows)):
                for cell in grid[row][boundary.start_col : boundary.end_col + 1]:
                    merge = cell.merge_range
                    if merge is None:
                        continue
                    grown = grown.union(
                        TableBoundary(
                            start_row=merge.start_row,
                            end_row=min(merge.end_row, n_rows - 1),
                            start_col=merge.start_col,
                            end_col=min(merge.end_col, n_cols - 1),
                        )
                    )
            if grown == boundary:
                return boundary
            boundary = grown

    def _is_valid(self, boundary: TableBoundary) -> bool:
        return (
            boundary.row_count >= self.config.min_rows
            and boundary.col_count >= self.config.min_columns
        )

    def find_dense_regions(self, grid: Grid | None, window_size: int) -> list[TableBoundary]:
        """Find regions whose square windows reach ``header_density``.

        Every ``window_size`` x ``window_size`` window with a non-empty ratio at or
        above ``header_density`` becomes a candidate; overlapping candidates are
        unioned until none overlap.
        """
        if not grid or window_size < 1:
            return []

        occupied, present = grid_masks(grid)
        n_rows, n_cols = occupied.shape
        if window_size > n_rows or window_size > n_cols:
            return []

        filled = _window_sums(occupied, window_size)
        totals = _window_sums(present, window_size)
        density = np.divide(
            filled, totals, out=np.zeros(filled.shape, dtype=float), where=totals > 0
        )

        candidates = [
            TableBoundary(
                start_row=int(row),
                end_row=int(row) + window_size - 1,
                start_col=int(col),
                end_col=int(col) + window_size - 1,
            )
            for row, col in np.argwhere(density >= self.config.header_density)
        ]
        regions = merge_overlapping_regions(candidates)
        logger.debug(f"{len(candidates)} dense windows merged into {len(regions)} regions")
        return regions
