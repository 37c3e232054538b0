"""Merged cell normalization.

Turns raw merge descriptors into zero-indexed ranges and stamps merge metadata
(and, optionally, the origin's value) onto every cell a merge covers. This runs
once per grid, before any table detection.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..config import DEFAULT_DETECTION_CONFIG, DetectionConfig
from ..models.cell import Cell, CellType, Grid, MergeRange, MergeRegionInfo
from ..utils.excel_utils import parse_cell_reference

if TYPE_CHECKING:
    from ..readers.base_reader import SpreadsheetSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedMerge:
    """A merge range together with the display value stored for it."""

    bounds: MergeRange
    value: str = ""


class MergeProcessor:
    """Parse merge descriptors and apply them to a cell grid."""

    def __init__(self, config: DetectionConfig | None = None):
        self.config = config or DEFAULT_DETECTION_CONFIG

    def parse(self, regions: Sequence[MergeRegionInfo]) -> list[ParsedMerge]:
        """Convert corner-pair descriptors to zero-indexed ranges.

        Single-cell descriptors are dropped.

        Raises:
            CellReferenceError: If a corner reference cannot be parsed
        """
        merges = []
        for region in regions:
            start_row, start_col = parse_cell_reference(region.start_cell)
            end_row, end_col = parse_cell_reference(region.end_cell)

            if (start_row, start_col) == (end_row, end_col):
                continue

            # Descriptors may name any two opposing corners
            bounds = MergeRange(
                start_row=min(start_row, end_row),
                start_col=min(start_col, end_col),
                end_row=max(start_row, end_row),
                end_col=max(start_col, end_col),
            )
            merges.append(ParsedMerge(bounds=bounds, value=region.value))

        logger.debug(f"Parsed {len(merges)} merge ranges from {len(regions)} descriptors")
        return merges

    def load_grid(self, source: "SpreadsheetSource", sheet_name: str) -> Grid:
        """Read a sheet from ``source`` and apply its merges.

        Raises:
            SheetNotFoundError: If the sheet does not exist
            CellReferenceError: If a merge descriptor is corrupt
        """
        grid = source.read_sheet_grid(sheet_name)
        merges = self.parse(source.get_merge_regions(sheet_name))
        self.apply(grid, merges)
        return grid

    def apply(self, grid: Grid, merges: Sequence[ParsedMerge | MergeRange]) -> None:
        """Stamp merge metadata and propagated values onto ``grid`` in place.

        Cells outside the grid are skipped. With both ``expand_merged_cells`` and
        ``track_merge_metadata`` disabled the grid is left untouched.
        """
        if not grid or not (self.config.expand_merged_cells or self.config.track_merge_metadata):
            return

        for merge in merges:
            if isinstance(merge, MergeRange):
                merge = ParsedMerge(bounds=merge)
            self._apply_one(grid, merge)

    def _apply_one(self, grid: Grid, merge: ParsedMerge) -> None:
        bounds = merge.bounds
        origin = _cell_at(grid, bounds.start_row, bounds.start_col)

        if origin is not None and not origin.is_empty:
            source_type, source_value, source_text = origin.type, origin.value, origin.raw_text
        elif merge.value:
            # Origin missing or blank: fall back to the descriptor's display value
            source_type, source_value, source_text = CellType.STRING, merge.value, merge.value
        else:
            source_type, source_value, source_text = CellType.EMPTY, None, ""

        for row in range(bounds.start_row, bounds.end_row + 1):
            if row >= len(grid):
                break
            for col in range(bounds.start_col, min(bounds.end_col + 1, len(grid[row]))):
                cell = grid[row][col]
                is_origin = (row, col) == (bounds.start_row, bounds.start_col)
                update: dict[str, Any] = {}

                # The origin keeps its own value unless it is blank
                if self.config.expand_merged_cells and (not is_origin or cell.is_empty):
                    update.update(type=source_type, value=source_value, raw_text=source_text)

                if self.config.track_merge_metadata:
                    update.update(
                        is_merged=True,
                        merge_range=bounds.model_copy(update={"is_origin": is_origin}),
                    )

                if update:
                    grid[row][col] = cell.model_copy(update=update)

    @staticmethod
    def build_merge_map(
        merges: Sequence[ParsedMerge | MergeRange],
    ) -> dict[tuple[int, int], MergeRange]:
        """Map every covered (row, col) to its merge range."""
        merge_map: dict[tuple[int, int], MergeRange] = {}
        for merge in merges:
            bounds = merge.bounds if isinstance(merge, ParsedMerge) else merge
            for row in range(bounds.start_row, bounds.end_row + 1):
                for col in range(bounds.start_col, bounds.end_col + 1):
                    merge_map[(row, col)] = bounds
        return merge_map

    @staticmethod
    def find_merge(
        merges: Sequence[ParsedMerge | MergeRange], row: int, col: int
    ) -> MergeRange | None:
        """Return the first merge range covering (row, col), if any."""
        for merge in merges:
            bounds = merge.bounds if isinstance(merge, ParsedMerge) else merge
            if bounds.contains(row, col):
                return bounds
        return None


def _cell_at(grid: Grid, row: int, col: int) -> Cell | None:
    if 0 <= row < len(grid) and 0 <= col < len(grid[row]):
        return grid[row][col]
    return None
