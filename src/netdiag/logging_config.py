"""
Logging configuration for NetDiag.

Log records go to stderr (so JSON output on stdout stays clean) and,
when a path is given, to a rotating file. Failed checks are counted by
type rather than logged as errors.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
CONSOLE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
FILE_FORMAT = (
    '%(asctime)s | %(levelname)-8s | %(name)-20s | %(module_name)-15s | '
    '%(function_name)-20s | %(lineno)-4d | %(message)s'
)


class StructuredFormatter(logging.Formatter):
    """Pipe-delimited file format with module and function columns."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, 'module_name'):
            record.module_name = record.module
        if not hasattr(record, 'function_name'):
            record.function_name = record.funcName
        return super().format(record)


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    max_bytes: int = 10485760,  # 10MB
    backup_count: int = 5,
    enable_console: bool = True,
) -> logging.Logger:
    """
    Configure the `netdiag` logger tree.

    Args:
        level: Logging level name; unknown names fall back to INFO
        log_file: Write DEBUG and above to this file as well, rotating at max_bytes
        max_bytes: Maximum log file size before rotation
        backup_count: Number of rotated files to keep
        enable_console: Attach the stderr handler

    Returns:
        The package logger
    """
    logger = logging.getLogger("netdiag")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()
    logger.propagate = False

    if enable_console:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logger.level)
        stderr_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
        logger.addHandler(stderr_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(StructuredFormatter(FILE_FORMAT, DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


class ErrorTracker:
    """Per-type counters for failed checks."""

    def __init__(self):
        self.errors: dict[str, int] = {}
        self.logger = logging.getLogger(__name__)

    def log_error(
        self,
        error_type: str,
        message: str,
        exception: Exception | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Count a failure and log it at DEBUG.

        Args:
            error_type: Failure type (e.g., 'tcp_refused', 'icmp_send_failed')
            message: Failure description
            exception: Exception object if available
            context: Host/port details appended to the log line
        """
        self.errors[error_type] = self.errors.get(error_type, 0) + 1

        log_msg = f"{error_type}: {message}"
        if context:
            log_msg += f" | Context: {context}"
        self.logger.debug(log_msg, exc_info=exception)

    def get_error_counts(self) -> dict[str, int]:
        return self.errors.copy()

    def reset_counts(self) -> None:
        self.errors.clear()


# Global error tracker instance
_error_tracker = ErrorTracker()


def track_error(
    error_type: str,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
) -> None:
    """Count a failure on the global tracker."""
    _error_tracker.log_error(error_type, message, exception, context)


def get_error_stats() -> dict[str, int]:
    """Failure counts by type since the last reset."""
    return _error_tracker.get_error_counts()


def reset_error_stats() -> None:
    _error_tracker.reset_counts()
