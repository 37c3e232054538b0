"""Tests for header row detection and header normalization."""

import pytest

from gridtables.config import DetectionConfig
from gridtables.detectors.header_detector import HeaderDetector
from gridtables.extraction.merge_processor import MergeProcessor
from gridtables.models.cell import MergeRange
from gridtables.models.table import TableBoundary


def boundary_for(grid, start_row=0, start_col=0):
    return TableBoundary(
        start_row=start_row,
        end_row=len(grid) - 1,
        start_col=start_col,
        end_col=max(len(row) for row in grid) - 1,
    )


@pytest.fixture
def detector():
    return HeaderDetector()


@pytest.fixture
def grouped_header_grid(make_grid):
    """Two header rows: 'Sales' over Q1/Q2 and a vertically merged 'Region'."""
    grid = make_grid(
        [
            ["Sales", None, "Region"],
            ["Q1", "Q2", None],
            [10, 20, "North"],
            [30, 40, "South"],
        ]
    )
    MergeProcessor().apply(
        grid,
        [
            MergeRange(start_row=0, start_col=0, end_row=0, end_col=1),
            MergeRange(start_row=0, start_col=2, end_row=1, end_col=2),
        ],
    )
    return grid


class TestHeaderRowDetection:
    """Scoring candidate header rows."""

    def test_first_row_of_simple_table(self, detector, make_grid):
        grid = make_grid([["ID", "Name", "Amount"], [1, "Bolt", 2], [2, "Nut", 3]])
        assert detector.detect_header_row(grid, boundary_for(grid)) == 0

    def test_score_components(self, detector, make_grid):
        """Density, string ratio, comparative bonus and three keyword hits."""
        grid = make_grid([["ID", "Name", "Amount"], [1, "Bolt", 2]])
        assert detector.score_row(grid, 0, boundary_for(grid)) == pytest.approx(96.0)

    def test_header_below_numeric_row(self, detector, make_grid):
        grid = make_grid([[1, 2, 3], ["Name", "City", "Total"], [4, 5, 6]])
        assert detector.detect_header_row(grid, boundary_for(grid)) == 1

    def test_only_first_six_rows_are_scored(self, detector, make_grid):
        grid = make_grid([[row + 1, row * 2 + 1] for row in range(6)] + [["Name", "Total"], [7, 8]])
        assert detector.detect_header_row(grid, boundary_for(grid)) == 0

    def test_sixth_row_can_be_the_header(self, detector, make_grid):
        grid = make_grid([[row + 1, row * 2 + 1] for row in range(5)] + [["Name", "Total"], [7, 8]])
        assert detector.detect_header_row(grid, boundary_for(grid)) == 5

    def test_ties_keep_topmost_row(self, detector, make_grid):
        grid = make_grid([[1, 2], [3, 4], [5, 6]])
        assert detector.detect_header_row(grid, boundary_for(grid)) == 0

    def test_boundary_beyond_grid(self, detector, make_grid):
        grid = make_grid([["a", "b"]])
        boundary = TableBoundary(start_row=5, end_row=6, start_col=0, end_col=1)
        assert detector.detect_header_row(grid, boundary) == 5

    def test_merge_origins_add_to_score(self, detector, make_grid):
        grid = make_grid([["Group", None], ["x", "y"]])
        boundary = boundary_for(grid)
        before = detector.score_row(grid, 0, boundary)
        MergeProcessor().apply(grid, [MergeRange(start_row=0, start_col=0, end_row=0, end_col=1)])
        assert detector.score_row(grid, 0, boundary) > before


class TestExtractHeaders:
    """Normalizing header labels into unique names."""

    def test_repeated_labels_get_suffixes(self, detector, make_grid):
        grid = make_grid([["ID", "Name", "Name"], [1, "a", "b"]])
        headers = detector.extract_headers(grid, 0, boundary_for(grid))
        assert headers == ["ID", "Name", "Name_2"]

    def test_repeats_compare_case_insensitively(self, detector, make_grid):
        grid = make_grid([["Name", "name", "NAME"]])
        assert detector.extract_headers(grid, 0, boundary_for(grid)) == ["Name", "name_2", "NAME_3"]

    def test_suffix_never_collides_with_existing_label(self, detector, make_grid):
        grid = make_grid([["A", "A", "A_2"]])
        headers = detector.extract_headers(grid, 0, boundary_for(grid))
        assert headers == ["A", "A_2", "A_2_2"]
        assert len(set(headers)) == len(headers)

    def test_blank_labels_use_grid_column(self, detector, make_grid):
        grid = make_grid([[None, None, "Name", None, "  City  "]])
        boundary = TableBoundary(start_row=0, end_row=0, start_col=2, end_col=4)
        assert detector.extract_headers(grid, 0, boundary) == ["Name", "Column_4", "City"]

    def test_non_string_labels(self, detector, make_grid):
        grid = make_grid([[2023, 2024.0, True]])
        assert detector.extract_headers(grid, 0, boundary_for(grid)) == ["2023", "2024", "TRUE"]


class TestValidateHeaders:
    """Header sanity checks."""

    def test_meaningful_headers(self, detector):
        assert detector.validate_headers(["Name", "Column_2"])

    def test_mostly_generated_headers(self, detector):
        assert not detector.validate_headers(["Column_1", "Column_2", "Total"])

    def test_user_labels_with_generated_prefix_are_meaningful(self, detector):
        assert detector.validate_headers(["Column_Total", "Column_2_2", "Column_A"])
        assert not detector.validate_headers(["Column_1", "Column_2_2", "Total"])

    def test_too_few_headers(self):
        assert not HeaderDetector(DetectionConfig(min_columns=3)).validate_headers(["a", "b"])
        assert not HeaderDetector().validate_headers([])


class TestHierarchicalHeaders:
    """Multi-row header bands built from merged group labels."""

    def test_header_band_follows_merges(self, detector, grouped_header_grid):
        boundary = boundary_for(grouped_header_grid)
        assert detector.detect_header_rows(grouped_header_grid, boundary) == (0, 1)

    def test_band_without_merges_is_one_row(self, detector, make_grid):
        grid = make_grid([["a", "b"], [1, 2]])
        assert detector.detect_header_rows(grid, boundary_for(grid)) == (0, 0)

    def test_band_capped_at_three_rows(self, detector, make_grid):
        grid = make_grid([["Tall", "x"]] + [[None, i] for i in range(5)])
        MergeProcessor().apply(grid, [MergeRange(start_row=0, start_col=0, end_row=5, end_col=0)])
        assert detector.detect_header_rows(grid, boundary_for(grid)) == (0, 2)

    def test_levels_keep_group_labels(self, detector, grouped_header_grid):
        levels = detector.extract_hierarchical_headers(
            grouped_header_grid, 0, 1, boundary_for(grouped_header_grid)
        )
        assert levels == [["Sales", "Sales", "Region"], ["Q1", "Q2", "Region"]]

    def test_flatten_levels(self, detector):
        levels = [["Sales", "Sales", "Region"], ["Q1", "Q2", "Region"]]
        assert detector.flatten_hierarchical_headers(levels) == [
            "Sales > Q1",
            "Sales > Q2",
            "Region",
        ]

    def test_flatten_skips_generated_labels(self, detector):
        levels = [["Group", "Column_2", "Column_3"], ["A", "B", "Column_3"]]
        assert detector.flatten_hierarchical_headers(levels, separator="/") == [
            "Group/A",
            "B",
            "Column_3",
        ]

    def test_flatten_empty_levels(self, detector):
        assert detector.flatten_hierarchical_headers([]) == []

    def test_extract_flattened_headers(self, detector, grouped_header_grid):
        headers, header_end = detector.extract_flattened_headers(
            grouped_header_grid, boundary_for(grouped_header_grid)
        )
        assert headers == ["Sales > Q1", "Sales > Q2", "Region"]
        assert header_end == 1

    def test_flattening_keeps_user_labels_with_generated_prefix(self, detector, make_grid):
        grid = make_grid(
            [
                ["Sales", None, "Column_Total"],
                ["Q1", "Q2", None],
                [10, 20, 30],
            ]
        )
        MergeProcessor().apply(
            grid,
            [
                MergeRange(start_row=0, start_col=0, end_row=0, end_col=1),
                MergeRange(start_row=0, start_col=2, end_row=1, end_col=2),
            ],
        )
        headers, _ = detector.extract_flattened_headers(grid, boundary_for(grid))
        assert headers == ["Sales > Q1", "Sales > Q2", "Column_Total"]
