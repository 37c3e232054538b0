"""Context-aware logging utilities for GridTables.

Sheet and table processing runs several layers deep; these helpers let every
log line carry the workbook, sheet and table it belongs to without threading
that information through each call.
"""

import contextvars
import logging
from collections.abc import MutableMapping
from typing import Any

# Context variables for tracking current processing context
current_file = contextvars.ContextVar[str | None]("current_file", default=None)
current_sheet = contextvars.ContextVar[str | None]("current_sheet", default=None)
current_table = contextvars.ContextVar[str | None]("current_table", default=None)
current_operation = contextvars.ContextVar[str | None]("current_operation", default=None)

_CONTEXT_FIELDS: tuple[tuple[str, contextvars.ContextVar[str | None]], ...] = (
    ("file", current_file),
    ("sheet", current_sheet),
    ("table", current_table),
    ("op", current_operation),
)


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that automatically includes context information."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        """Prefix the message with the active context and expose it as ``extra``."""
        extra = dict(kwargs.get("extra") or {})
        context_parts = []

        for field_name, variable in _CONTEXT_FIELDS:
            value = variable.get()
            if value:
                extra[field_name] = value
                context_parts.append(f"{field_name}={value}")

        kwargs["extra"] = extra
        if context_parts:
            msg = f"[{', '.join(context_parts)}] {msg}"

        return msg, kwargs


def get_contextual_logger(name: str) -> ContextualLogger:
    """Get a logger that automatically includes context information.

    Args:
        name: Logger name (usually __name__)

    Returns:
        ContextualLogger instance
    """
    return ContextualLogger(logging.getLogger(name), {})


class _ContextScope:
    """Sets a context variable for the duration of a ``with`` block."""

    variable: contextvars.ContextVar[str | None]

    def __init__(self, value: str):
        self.value = value
        self.token: contextvars.Token | None = None

    def __enter__(self):
        self.token = self.variable.set(self.value)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            self.variable.reset(self.token)
            self.token = None


class FileContext(_ContextScope):
    """Context manager for tracking current file being processed."""

    variable = current_file


class SheetContext(_ContextScope):
    """Context manager for tracking current sheet being processed."""

    variable = current_sheet


class TableContext(_ContextScope):
    """Context manager for tracking current table being processed."""

    variable = current_table


class OperationContext(_ContextScope):
    """Context manager for tracking current operation."""

    variable = current_operation


def setup_contextual_logging() -> None:
    """Install a structured formatter on the root logger's handlers.

    This should be called once at application startup.
    """
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        handler.setFormatter(formatter)
