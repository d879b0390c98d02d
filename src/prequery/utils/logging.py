"""
Logging configuration for prequery.

Console output goes through Rich (or a plain stream handler), with optional
file output and JSON-formatted records. Records emitted while a job is running
carry that job's name, set via ``job_context()``.
"""

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

# Name of the job whose task is currently executing
_current_job: ContextVar[str | None] = ContextVar("current_job", default=None)


def get_current_job() -> str | None:
    """Return the name of the job running in the current context, if any."""
    return _current_job.get()


@contextmanager
def job_context(name: str) -> Iterator[str]:
    """
    Context manager tagging all log records in the current task with a job name.

    Usage:
        with job_context("download-assets"):
            logger.info("beginning job...")  # -> [download-assets] beginning job...
    """
    token = _current_job.set(name)
    try:
        yield name
    finally:
        _current_job.reset(token)


class JobNameFilter(logging.Filter):
    """Attach the current job name to every record as ``record.job``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.job = get_current_job()
        return True


class JobPrefixFormatter(logging.Formatter):
    """Human-readable formatter: ``[job] message``."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        # RichHandler calls this directly when it renders the traceback itself
        message = super().formatMessage(record)
        job = getattr(record, "job", None)
        if job:
            message = f"[{job}] {message}"
        return message

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        message = self.formatMessage(record)
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


class FileFormatter(logging.Formatter):
    """Formatter for file logs - clean and parseable."""

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        job = getattr(record, "job", None)
        original = record.msg
        if job:
            record.msg = f"[{job}] {record.msg}"
        try:
            return super().format(record)
        finally:
            record.msg = original


class StructuredFormatter(logging.Formatter):
    """
    JSON-formatted log formatter.

    Each record becomes one JSON object with timestamp, level, logger name,
    message, the job name (if set), and exception info (if present).
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        job = getattr(record, "job", None)
        if job:
            log_data["job"] = job
        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(log_data, default=str)


# Map string level names to logging constants
LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _parse_level(level: str | int) -> int:
    """Parse logging level from string or int, defaulting to INFO."""
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level_upper = level.upper()
        if level_upper in LEVEL_MAP:
            return LEVEL_MAP[level_upper]
    return logging.INFO


def setup_logging(
    level: str | int = logging.INFO,
    log_file: str | Path | None = None,
    json_format: bool = False,
    use_rich: bool = True,
    console: Console | None = None,
) -> logging.Logger:
    """
    Setup logging configuration for prequery.

    Args:
        level: Logging level as string (DEBUG, INFO, etc.) or int (default: INFO)
        log_file: Optional file path to write logs to (default: None, console only)
        json_format: Emit one JSON object per record on the console
        use_rich: Use RichHandler for console output (ignored with json_format)
        console: Optional Rich Console instance to log through

    Returns:
        The configured ``prequery`` logger
    """
    logger = logging.getLogger("prequery")

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    for log_filter in logger.filters[:]:
        logger.removeFilter(log_filter)

    level_int = _parse_level(level)
    logger.setLevel(level_int)

    job_filter = JobNameFilter()

    console_handler: logging.Handler
    if json_format:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(StructuredFormatter())
    elif use_rich:
        console_handler = RichHandler(
            console=console or Console(stderr=True),
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        console_handler.setFormatter(JobPrefixFormatter())
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(JobPrefixFormatter())
    console_handler.setLevel(level_int)
    console_handler.addFilter(job_filter)
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a")
        # File captures everything, the logger level still filters
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(FileFormatter())
        file_handler.addFilter(job_filter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "prequery") -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (default: "prequery"); use dotted children such as
            "prequery.core.query" so records reach the configured handlers

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    logger.propagate = True
    return logger
