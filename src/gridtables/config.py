"""Configuration models for GridTables."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .core.exceptions import ConfigurationError


class DetectionConfig(BaseModel):
    """Tunables for table detection and header inference.

    Instances are immutable; derive variants with ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    min_columns: int = Field(2, ge=1, description="Minimum columns for a region to be a table")
    min_rows: int = Field(2, ge=1, description="Minimum rows for a region to be a table")
    max_empty_rows: int = Field(
        2, ge=0, description="Consecutive empty rows tolerated while extending a table downward"
    )
    header_density: float = Field(
        0.5, ge=0.0, le=1.0, description="Minimum non-empty ratio for a window to count as dense"
    )
    column_consistency: float = Field(
        0.7, ge=0.0, le=1.0, description="Expected share of rows populating a column"
    )
    expand_merged_cells: bool = Field(
        True, description="Copy the merge origin's value into every cell of the merge"
    )
    track_merge_metadata: bool = Field(
        True, description="Attach merge range information to merged cells"
    )


DEFAULT_DETECTION_CONFIG = DetectionConfig()


class Config(BaseModel):
    """Configuration for GridTables."""

    # Detection Configuration
    detection: DetectionConfig = Field(
        default_factory=DetectionConfig, description="Table and header detection tunables"
    )

    # Processing Configuration
    parallel: bool = Field(False, description="Process sheets with one worker per sheet")
    max_workers: int | None = Field(
        None, ge=1, description="Upper bound on parallel workers (defaults to sheet count)"
    )
    max_file_size_mb: float = Field(2000.0, ge=0.1, description="Maximum file size in MB")

    # Telemetry Configuration
    enable_telemetry: bool = Field(False, description="Enable OpenTelemetry metrics")

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    log_file: Path | None = Field(None, description="Log file path")

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables.

        This method will automatically load from a .env file if present, then read
        configuration from ``GRIDTABLES_*`` environment variables.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        import os

        from dotenv import load_dotenv

        # Load .env file if it exists (will not override existing env vars)
        load_dotenv()

        def flag(name: str, default: str) -> bool:
            return os.getenv(name, default).strip().lower() in ("true", "1", "yes")

        try:
            detection = DetectionConfig(
                min_columns=int(os.getenv("GRIDTABLES_MIN_COLUMNS", "2")),
                min_rows=int(os.getenv("GRIDTABLES_MIN_ROWS", "2")),
                max_empty_rows=int(os.getenv("GRIDTABLES_MAX_EMPTY_ROWS", "2")),
                header_density=float(os.getenv("GRIDTABLES_HEADER_DENSITY", "0.5")),
                column_consistency=float(os.getenv("GRIDTABLES_COLUMN_CONSISTENCY", "0.7")),
                expand_merged_cells=flag("GRIDTABLES_EXPAND_MERGED_CELLS", "true"),
                track_merge_metadata=flag("GRIDTABLES_TRACK_MERGE_METADATA", "true"),
            )
            max_workers = os.getenv("GRIDTABLES_MAX_WORKERS")
            log_file = os.getenv("GRIDTABLES_LOG_FILE")

            return cls(
                detection=detection,
                parallel=flag("GRIDTABLES_PARALLEL", "false"),
                max_workers=int(max_workers) if max_workers else None,
                max_file_size_mb=float(os.getenv("GRIDTABLES_MAX_FILE_SIZE_MB", "2000")),
                enable_telemetry=flag("GRIDTABLES_ENABLE_TELEMETRY", "false"),
                log_level=os.getenv("GRIDTABLES_LOG_LEVEL", "INFO"),
                log_file=Path(log_file) if log_file else None,
            )
        except (ValueError, ValidationError) as e:
            raise ConfigurationError(f"Invalid GridTables environment configuration: {e}") from e
