"""Metrics collection for GridTables."""

import logging
import time
from contextlib import contextmanager

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricExporter,
    PeriodicExportingMetricReader,
)

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Collect and export metrics using OpenTelemetry."""

    def __init__(
        self,
        service_name: str = "gridtables",
        meter_provider: metrics.MeterProvider | None = None,
        exporter: MetricExporter | None = None,
        export_interval_millis: int = 60000,  # 1 minute
    ):
        """Initialize metrics collector.

        Args:
            service_name: Name of the service
            meter_provider: Provider to create the meter from; built from ``exporter``
                when omitted
            exporter: Metric exporter used when no provider is given (console by default)
            export_interval_millis: Export interval in milliseconds
        """
        if meter_provider is None:
            reader = PeriodicExportingMetricReader(
                exporter=exporter or ConsoleMetricExporter(),
                export_interval_millis=export_interval_millis,
            )
            meter_provider = MeterProvider(metric_readers=[reader])

        self.meter_provider = meter_provider
        self.meter = meter_provider.get_meter(service_name)
        self._operation_timers: dict[str, metrics.Histogram] = {}

        self._create_instruments()

    def _create_instruments(self):
        """Create common metric instruments."""
        # Counters
        self.sheets_processed = self.meter.create_counter(
            name="gridtables.sheets_processed",
            description="Number of sheets processed",
            unit="sheets",
        )

        self.tables_detected = self.meter.create_counter(
            name="gridtables.tables_detected",
            description="Number of tables detected",
            unit="tables",
        )

        self.rows_parsed = self.meter.create_counter(
            name="gridtables.rows_parsed", description="Number of data rows parsed", unit="rows"
        )

        self.errors = self.meter.create_counter(
            name="gridtables.errors", description="Number of errors encountered", unit="errors"
        )

        # Histograms
        self.processing_time = self.meter.create_histogram(
            name="gridtables.processing_time",
            description="Time to process a workbook or sheet",
            unit="seconds",
        )

    def record_sheet_processed(
        self, sheet_name: str, tables_found: int, rows_parsed: int, duration_seconds: float
    ):
        """Record metrics for a processed sheet.

        Args:
            sheet_name: Name of the sheet
            tables_found: Number of tables detected on the sheet
            rows_parsed: Number of data rows across those tables
            duration_seconds: Time spent on the sheet
        """
        attributes = {"sheet": sheet_name}

        self.sheets_processed.add(1, attributes)
        self.processing_time.record(duration_seconds, {"operation": "sheet"})

        if tables_found > 0:
            self.tables_detected.add(tables_found, attributes)
        if rows_parsed > 0:
            self.rows_parsed.add(rows_parsed, attributes)

    def record_error(self, error_type: str, sheet_name: str | None = None):
        """Record a failure by exception type."""
        attributes = {"error_type": error_type}
        if sheet_name is not None:
            attributes["sheet"] = sheet_name
        self.errors.add(1, attributes)

    @contextmanager
    def measure_time(self, operation: str):
        """Context manager to measure operation time.

        Example:
            with metrics_collector.measure_time("read_workbook"):
                workbook = reader.read_workbook(source)
        """
        start_time = time.perf_counter()

        try:
            yield
        finally:
            duration = time.perf_counter() - start_time

            # One histogram per operation, created on first use
            histogram = self._operation_timers.get(operation)
            if histogram is None:
                histogram = self.meter.create_histogram(
                    name=f"gridtables.time.{operation}",
                    description=f"Time for {operation} operation",
                    unit="seconds",
                )
                self._operation_timers[operation] = histogram

            histogram.record(duration)
            logger.debug(f"{operation} took {duration:.3f}s")


# Global metrics collector
_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get or create the global metrics collector."""
    global _collector
    if _collector is None:
        _collector = MetricsCollector()
    return _collector
