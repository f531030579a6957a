"""Logging utilities for tablecheck.

Logs go to stderr. The default level is WARNING so that a passing run
prints nothing; ``verbose`` turns on per-table progress at DEBUG, and a
failed verbose run also logs the structured error before the CLI prints
its one-line diagnostic. Provides a structured JSON option for log
aggregation.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from tablecheck.lib.errors import ConfigurationError

__all__ = [
    "JSONFormatter",
    "setup_logging",
]

_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}


class JSONFormatter(logging.Formatter):
    """Formatter that outputs log records as JSON, one object per line.

    Attributes passed through ``extra=`` (such as the ``error`` dict the
    CLI logs on failure) are collected under ``"extra"``.

    Example output:
        {"timestamp": "2025-01-15T10:30:00.123Z", "level": "DEBUG",
         "logger": "tablecheck.lib.validator", "message": "Validating table 'users'"}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_attrs = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra_attrs:
            log_data["extra"] = extra_attrs

        return json.dumps(log_data, default=str)


def _open_log_file(log_file: str) -> logging.FileHandler:
    try:
        return logging.FileHandler(log_file)
    except OSError as e:
        raise ConfigurationError(
            f"Cannot open log file {log_file}: {e.strerror or e}",
            field="log_file",
        ) from e


def setup_logging(
    verbose: bool = False,
    json_format: bool = False,
    log_file: Optional[str] = None,
    level: Optional[str] = None,
) -> None:
    """Configure logging for a tablecheck run.

    Args:
        verbose: Enable debug-level logging (overrides ``level``)
        json_format: Use JSON output format (for log aggregation)
        log_file: Optional file path to write logs to
        level: Level name to use when not verbose (default WARNING)

    Raises:
        ConfigurationError: If ``log_file`` cannot be opened for writing
    """
    if verbose:
        resolved = logging.DEBUG
    else:
        resolved = logging.getLevelName((level or "WARNING").upper())

    if json_format:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    # Open the file first so a bad path leaves the current handlers alone
    file_handler = _open_log_file(log_file) if log_file else None

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(resolved)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if file_handler is not None:
        file_handler.setLevel(resolved)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
