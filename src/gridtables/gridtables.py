"""Main GridTables class."""

import logging
from pathlib import Path

from pydantic import ValidationError

from .config import Config, DetectionConfig
from .core.constants import EXCEL_LIMITS
from .core.exceptions import ConfigurationError, FileTypeError
from .models.table import Table
from .models.workbook import NamedRange, Sheet, Workbook
from .readers.excel_reader import ExcelSource
from .readers.named_range_reader import NamedRangeReader
from .telemetry.metrics import MetricsCollector, get_metrics_collector
from .utils.logging_context import setup_contextual_logging
from .workbook_reader import WorkbookReader

logger = logging.getLogger(__name__)


class GridTables:
    """Infer header-mapped tables from Excel workbooks."""

    def __init__(
        self,
        config: Config | None = None,
        parallel: bool | None = None,
        metrics: MetricsCollector | None = None,
        **kwargs,
    ):
        """Initialize GridTables.

        Args:
            config: Configuration object. If None, loads from environment.
            parallel: Override for per-sheet parallel processing
            metrics: Metrics collector to use instead of the global one
            **kwargs: ``DetectionConfig`` field overrides (e.g. ``min_rows=3``)
        """
        if config is None:
            config = Config.from_env()

        updates = {}
        if parallel is not None:
            updates["parallel"] = parallel
        if kwargs:
            updates["detection"] = _override_detection(config.detection, kwargs)
        if updates:
            config = config.model_copy(update=updates)

        self.config = config
        self._setup_logging()

        if metrics is None and config.enable_telemetry:
            metrics = get_metrics_collector()
        self.metrics = metrics

        self._reader = WorkbookReader(
            config.detection, metrics=self.metrics, max_workers=config.max_workers
        )
        self._named_ranges = NamedRangeReader(config.detection)

        logger.info(f"GridTables initialized with config: {config}")

    def _setup_logging(self) -> None:
        """Setup logging configuration."""
        logging.basicConfig(
            level=getattr(logging, self.config.log_level.upper(), logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            filename=self.config.log_file,
        )
        setup_contextual_logging()

    def read_file(self, file_path: str | Path, parallel: bool | None = None) -> Workbook:
        """Read every sheet of a workbook.

        Args:
            file_path: Path to an .xlsx or .xlsm file
            parallel: Override the configured execution mode for this call

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file exceeds the size limit
            FileTypeError: If the extension is not supported
            SheetProcessingError: If a sheet cannot be processed
        """
        path = self._validate_file(file_path)
        use_parallel = self.config.parallel if parallel is None else parallel
        logger.info(f"Reading {path} ({'parallel' if use_parallel else 'sequential'})")

        with ExcelSource(path) as source:
            return self._reader.read_workbook(source, parallel=use_parallel)

    def read_sheet(self, file_path: str | Path, sheet_name: str) -> Sheet:
        """Read one sheet of a workbook."""
        path = self._validate_file(file_path)
        with ExcelSource(path) as source:
            return self._reader.read_sheet(source, sheet_name)

    def get_named_ranges(self, file_path: str | Path) -> list[NamedRange]:
        """List the workbook's defined names."""
        path = self._validate_file(file_path)
        with ExcelSource(path) as source:
            return self._named_ranges.get_named_ranges(source)

    def read_named_range(self, file_path: str | Path, name: str) -> Table:
        """Read the range behind a defined name as a table."""
        path = self._validate_file(file_path)
        with ExcelSource(path) as source:
            return self._named_ranges.read_range(source, name)

    def _validate_file(self, file_path: str | Path) -> Path:
        """Validate that file exists, is within size limits and is a workbook."""
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        file_size_mb = path.stat().st_size / (1024 * 1024)
        if file_size_mb > self.config.max_file_size_mb:
            raise ValueError(
                f"File too large: {file_size_mb:.1f}MB (max: {self.config.max_file_size_mb}MB)"
            )

        if path.suffix.lower() not in EXCEL_LIMITS.SUPPORTED_EXTENSIONS:
            raise FileTypeError(
                f"Unsupported file type '{path.suffix}'; "
                f"expected one of {', '.join(EXCEL_LIMITS.SUPPORTED_EXTENSIONS)}"
            )
        return path


def _override_detection(detection: DetectionConfig, overrides: dict) -> DetectionConfig:
    """Validated copy of ``detection`` with ``overrides`` applied."""
    unknown = set(overrides) - set(DetectionConfig.model_fields)
    if unknown:
        raise ConfigurationError(f"Unknown detection settings: {sorted(unknown)}")
    try:
        return DetectionConfig.model_validate({**detection.model_dump(), **overrides})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid detection settings: {e}") from e


def read_file(file_path: str | Path, config: Config | None = None, **kwargs) -> Workbook:
    """Read every sheet of a workbook with a one-off ``GridTables`` instance."""
    return GridTables(config or Config(), **kwargs).read_file(file_path)


def read_sheet(
    file_path: str | Path, sheet_name: str, config: Config | None = None, **kwargs
) -> Sheet:
    """Read one sheet of a workbook with a one-off ``GridTables`` instance."""
    return GridTables(config or Config(), **kwargs).read_sheet(file_path, sheet_name)
