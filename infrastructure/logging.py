"""Centralized logging configuration for the error diagnostics engine."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import LoggingConfig

# Global flag to ensure logging is only configured once
_logging_configured = False


class JsonFormatter(logging.Formatter):
    """Simple JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        log_record = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_record)


def setup_logging(
    logging_config: Optional[LoggingConfig] = None,
    debug: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """Configure root handlers once per process."""
    global _logging_configured

    if _logging_configured:
        return

    logging_config = logging_config or LoggingConfig()

    log_file = log_file or logging_config.file_path
    log_level = (
        logging.DEBUG if debug else getattr(logging, logging_config.level.upper(), logging.INFO)
    )

    handlers = []

    if logging_config.console_output:
        handlers.append(logging.StreamHandler(sys.stderr))

    if logging_config.file_output and log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    # Keep at least one handler so warnings are never lost
    if not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    formatter: logging.Formatter
    if logging_config.json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(logging_config.format)

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    _logging_configured = True

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging initialized at {logging.getLevelName(log_level)}, file: {log_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Handlers are installed by :func:`setup_logging`; modules only ask for a
    named logger so that importing the library never touches the filesystem.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
