"""Logging utilities for gridgeom.

Library modules log through the standard library (``logging.getLogger``).
Batch runs call configure_logging once, which routes those records to a
log file and the console and sets up structlog so the processor can emit
JSON events with per-shape context.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
    structlog.processors.JSONRenderer(),
]

# Handlers added to the root logger by the last configure_logging call
_installed_handlers: list[logging.Handler] = []


@dataclass
class ShapeProcessingStats:
    """Outcome counts of one batch run over the shapes of a document."""

    processed_count: int = 0
    invalid_count: int = 0
    error_count: int = 0
    triangles_produced: int = 0
    errors: list[tuple[int, str]] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    def summary(self) -> dict[str, Any]:
        """Counts as keyword arguments for a log event."""
        return {
            "processed": self.processed_count,
            "invalid": self.invalid_count,
            "errors": self.error_count,
            "triangles": self.triangles_produced,
            "duration_seconds": round(self.duration_seconds, 2),
        }


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Send log records to a file and the console, and set up structlog.

    Calling it again replaces the handlers of the previous call, closing
    its log file.

    Args:
        log_file: Path to log file (gridgeom_<timestamp>.log if None)
        console_level: Level for console output
        file_level: Level for the log file, usually more verbose
        quiet: Only errors reach the console

    Returns:
        structlog logger named "gridgeom"

    Raises:
        ValueError: If a level name is unknown
    """
    if log_file is None:
        log_file = Path(f"gridgeom_{datetime.now():%Y%m%d_%H%M%S}.log")

    levels = (_level(file_level), logging.ERROR if quiet else _level(console_level))

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(levels[0])
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(levels[1])
    console_handler.setFormatter(logging.Formatter("%(message)s"))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers[:] = [file_handler, console_handler]
    for handler in _installed_handlers:
        root_logger.addHandler(handler)

    structlog.configure(
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("gridgeom")
    logger.info("Logging initialized", log_file=str(log_file), level=file_level)
    return logger


class ShapeProcessingLogger:
    """Logs per-shape outcomes and keeps the run's ShapeProcessingStats.

    Every event is bound to the shape's position in the document, so the
    JSON log lines can be filtered by shape.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = ShapeProcessingStats()

    def _for_shape(self, shape_index: int) -> structlog.stdlib.BoundLogger:
        return self._logger.bind(shape=shape_index)

    def log_shape_start(self, shape_index: int, num_vertices: int) -> None:
        self._for_shape(shape_index).debug("Processing shape", vertices=num_vertices)

    def log_shape_complete(self, shape_index: int, triangles: int, duration_ms: float) -> None:
        """Count a triangulated shape."""
        self._for_shape(shape_index).info(
            "Shape processed", triangles=triangles, duration_ms=round(duration_ms, 2)
        )
        self._stats.processed_count += 1
        self._stats.triangles_produced += triangles

    def log_shape_invalid(self, shape_index: int, problems: list[str]) -> None:
        """Count a shape that failed validation."""
        self._for_shape(shape_index).warning("Shape invalid", problems=problems)
        self._stats.invalid_count += 1

    def log_shape_error(
        self,
        shape_index: int,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Count a shape whose processing raised, keeping the message."""
        self._for_shape(shape_index).error(
            "Shape processing failed",
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((shape_index, str(error)))

    def log_run_complete(self, event: str) -> None:
        self._logger.info(event, **self._stats.summary())

    @property
    def stats(self) -> ShapeProcessingStats:
        return self._stats
