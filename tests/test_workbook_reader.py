"""Tests for workbook-level table inference."""

import pytest
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from gridtables.config import DetectionConfig
from gridtables.core.exceptions import CellReferenceError, SheetNotFoundError, SheetProcessingError
from gridtables.models.cell import MergeRegionInfo
from gridtables.readers.memory_reader import InMemorySource
from gridtables.telemetry.metrics import MetricsCollector
from gridtables.workbook_reader import WorkbookReader, get_all_tables, get_table_by_name


@pytest.fixture
def reader():
    return WorkbookReader()


@pytest.fixture
def failing_source():
    """Sheets B and C carry corrupt merge descriptors."""
    corrupt = [MergeRegionInfo(start_cell="??", end_cell="B1")]
    block = [["h1", "h2"], [1, 2]]
    return InMemorySource(
        {"A": block, "B": block, "C": block},
        merges={"B": corrupt, "C": corrupt},
    )


class TestReadWorkbook:
    """Sequential reads."""

    def test_document_tree(self, reader, multi_sheet_source):
        workbook = reader.read_workbook(multi_sheet_source)

        assert workbook.file_path == "memory.xlsx"
        assert [sheet.name for sheet in workbook.sheets] == ["Sales", "Inventory", "Empty"]
        assert [sheet.index for sheet in workbook.sheets] == [0, 1, 2]
        assert [sheet.table_count for sheet in workbook.sheets] == [1, 2, 0]
        assert workbook.table_count == 3

    def test_tables_are_named_per_sheet(self, reader, multi_sheet_source):
        workbook = reader.read_workbook(multi_sheet_source)
        names = [table.name for table in workbook.get_all_tables()]
        assert names == ["Sales_Table1", "Inventory_Table1", "Inventory_Table2"]

    def test_table_contents(self, reader, multi_sheet_source):
        workbook = reader.read_workbook(multi_sheet_source)

        sales = workbook.get_table_by_name("Sales_Table1")
        assert sales.headers == ["ID", "Name", "Amount", "Status"]
        assert sales.row_count == 3
        assert sales.rows[0].to_dict() == {
            "ID": 1,
            "Name": "Alice",
            "Amount": 120.5,
            "Status": "Open",
        }

        regions = workbook.get_table_by_name("Inventory_Table2")
        assert regions.header_row == 6
        assert regions.headers == ["Region", "Total"]
        assert [row.get("Total").value for row in regions.rows] == [300, 150]

    def test_merged_title_becomes_part_of_table(self, reader):
        source = InMemorySource(
            {
                "Report": [
                    ["Quarterly Sales", None, None],
                    ["Region", "Q1", "Q2"],
                    ["North", 10, 12],
                    ["South", 7, 9],
                ]
            },
            merges={"Report": ["A1:C1"]},
        )
        table = reader.read_workbook(source).get_all_tables()[0]
        assert table.boundary.excel_range == "A1:C4"
        assert table.headers == ["Region", "Q1", "Q2"]
        assert table.row_count == 2

    def test_detection_config_is_applied(self, multi_sheet_source):
        reader = WorkbookReader(DetectionConfig(max_empty_rows=3))
        workbook = reader.read_workbook(multi_sheet_source)
        assert workbook.get_sheet("Inventory").table_count == 1

    def test_empty_workbook(self, reader):
        workbook = reader.read_workbook(InMemorySource({}))
        assert workbook.sheets == []
        assert workbook.table_count == 0


class TestParallelRead:
    """One worker per sheet."""

    def test_matches_sequential(self, reader, multi_sheet_source):
        sequential = reader.read_workbook(multi_sheet_source)
        parallel = reader.read_workbook(multi_sheet_source, parallel=True)
        assert parallel == sequential

    def test_bounded_workers(self, multi_sheet_source):
        sequential = WorkbookReader().read_workbook(multi_sheet_source)
        parallel = WorkbookReader(max_workers=1).read_workbook(multi_sheet_source, parallel=True)
        assert parallel == sequential

    @pytest.mark.parametrize("parallel", [False, True])
    def test_first_failing_sheet_is_reported(self, reader, failing_source, parallel):
        with pytest.raises(SheetProcessingError) as exc_info:
            reader.read_workbook(failing_source, parallel=parallel)

        error = exc_info.value
        assert error.sheet_name == "B"
        assert error.sheet_index == 1
        assert isinstance(error.__cause__, CellReferenceError)


class TestReadSheet:
    def test_single_sheet(self, reader, multi_sheet_source):
        sheet = reader.read_sheet(multi_sheet_source, "Inventory")
        assert sheet.index == 1
        assert sheet.table_count == 2

    def test_unknown_sheet(self, reader, multi_sheet_source):
        with pytest.raises(SheetNotFoundError):
            reader.read_sheet(multi_sheet_source, "Missing")

    def test_failure_is_wrapped(self, reader, failing_source):
        with pytest.raises(SheetProcessingError, match="'C' \\(index 2\\)"):
            reader.read_sheet(failing_source, "C")


class TestMetrics:
    def test_sheets_and_errors_are_recorded(self, multi_sheet_source, failing_source):
        metric_reader = InMemoryMetricReader()
        collector = MetricsCollector(meter_provider=MeterProvider(metric_readers=[metric_reader]))
        reader = WorkbookReader(metrics=collector)

        reader.read_workbook(multi_sheet_source)
        with pytest.raises(SheetProcessingError):
            reader.read_workbook(failing_source)

        totals = {}
        for resource_metrics in metric_reader.get_metrics_data().resource_metrics:
            for scope_metrics in resource_metrics.scope_metrics:
                for metric in scope_metrics.metrics:
                    if metric.name.startswith("gridtables.time."):
                        continue
                    totals[metric.name] = sum(
                        getattr(point, "value", getattr(point, "count", 0))
                        for point in metric.data.data_points
                    )

        # Sheet A of the failing source succeeds before B fails
        assert totals["gridtables.sheets_processed"] == 4
        assert totals["gridtables.tables_detected"] == 4
        assert totals["gridtables.rows_parsed"] == 3 + 2 + 2 + 1
        assert totals["gridtables.errors"] == 1


class TestTableHelpers:
    def test_lookup_helpers(self, reader, multi_sheet_source):
        workbook = reader.read_workbook(multi_sheet_source)
        assert get_table_by_name(workbook, "Inventory_Table1").headers == ["Sku", "Quantity"]
        assert get_table_by_name(workbook, "Nope") is None
        assert len(get_all_tables(workbook)) == 3

    def test_missing_workbook(self):
        assert get_table_by_name(None, "Sales_Table1") is None
        assert get_all_tables(None) == []
