"""Tests for turning grid rows into header-keyed rows."""

import pytest

from gridtables.extraction.row_parser import RowParser, filter_rows, get_column_values, map_rows
from gridtables.models.table import TableBoundary


@pytest.fixture
def parser():
    return RowParser()


class TestParseRows:
    """Row materialization inside a boundary."""

    def test_single_data_row(self, parser, make_grid):
        grid = make_grid([["A", "B"], ["1", "2"]])
        boundary = TableBoundary(start_row=0, end_row=1, start_col=0, end_col=1)

        rows = parser.parse_rows(grid, ["A", "B"], 0, boundary)

        assert len(rows) == 1
        assert {h: cell.raw_text for h, cell in rows[0].values.items()} == {"A": "1", "B": "2"}
        assert rows[0].index == 0
        assert rows[0].source_row == 1

    def test_empty_rows_are_skipped(self, parser, make_grid):
        grid = make_grid([["A", "B"], [1, 2], [None, None], [3, 4]])
        boundary = TableBoundary(start_row=0, end_row=3, start_col=0, end_col=1)

        rows = parser.parse_rows(grid, ["A", "B"], 0, boundary)

        assert [row.index for row in rows] == [0, 1]
        assert [row.source_row for row in rows] == [1, 3]

    def test_short_rows_are_padded(self, parser, make_grid):
        grid = make_grid([["A", "B", "C"], [1]])
        boundary = TableBoundary(start_row=0, end_row=1, start_col=0, end_col=2)

        row = parser.parse_rows(grid, ["A", "B", "C"], 0, boundary)[0]

        assert row.get("A").value == 1
        assert row.get("C").is_empty
        assert (row.get("C").row, row.get("C").col) == (1, 2)

    def test_offset_boundary(self, parser, make_grid):
        grid = make_grid([[None, None, None], [None, "X", "Y"], [None, 5, 6]])
        boundary = TableBoundary(start_row=1, end_row=2, start_col=1, end_col=2)

        rows = parser.parse_rows(grid, ["X", "Y"], 1, boundary)

        assert rows[0].to_dict() == {"X": 5, "Y": 6}
        assert [cell.col for cell in rows[0].cells] == [1, 2]

    def test_boundary_past_grid_is_clipped(self, parser, make_grid):
        grid = make_grid([["A", "B"], [1, 2]])
        boundary = TableBoundary(start_row=0, end_row=10, start_col=0, end_col=1)
        assert len(parser.parse_rows(grid, ["A", "B"], 0, boundary)) == 1

    def test_header_only_table_has_no_rows(self, parser, make_grid):
        grid = make_grid([["A", "B"]])
        boundary = TableBoundary(start_row=0, end_row=0, start_col=0, end_col=1)
        assert parser.parse_rows(grid, ["A", "B"], 0, boundary) == []

    def test_parse_table(self, parser, make_grid):
        grid = make_grid([["Title", None], ["A", "B"], [1, 2]])
        boundary = TableBoundary(start_row=0, end_row=2, start_col=0, end_col=1)

        table = parser.parse_table(grid, boundary, ["A", "B"], 1, "Sheet1_Table1")

        assert table.name == "Sheet1_Table1"
        assert table.header_row == 1
        assert table.boundary == boundary
        assert table.rows[0].to_dict() == {"A": 1, "B": 2}


class TestRowHelpers:
    """Module-level helpers over parsed rows."""

    @pytest.fixture
    def rows(self, parser, make_grid):
        grid = make_grid([["Name", "Qty"], ["Bolt", 3], ["Nut", 0], ["Washer", 7]])
        boundary = TableBoundary(start_row=0, end_row=3, start_col=0, end_col=1)
        return parser.parse_rows(grid, ["Name", "Qty"], 0, boundary)

    def test_filter_rows(self, rows):
        in_stock = filter_rows(rows, lambda row: row.get("Qty").as_float() > 0)
        assert [row.get("Name").raw_text for row in in_stock] == ["Bolt", "Washer"]

    def test_map_rows(self, rows):
        assert map_rows(rows, lambda row: row.get("Name").raw_text.upper()) == [
            "BOLT",
            "NUT",
            "WASHER",
        ]

    def test_get_column_values(self, rows):
        assert [cell.value for cell in get_column_values(rows, "Qty")] == [3, 0, 7]
        assert get_column_values(rows, "Missing") == []
