"""Structured JSON logging configuration."""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from bigbridge.core.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with consistent fields."""

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict) -> None:
        """Add custom fields to log record."""
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName
        log_record.setdefault("event", record.getMessage())

        log_record.pop("asctime", None)


def setup_logging(level: str | None = None) -> None:
    """Configure JSON logging on the root logger."""
    root_logger = logging.getLogger()
    level_name = (level or settings.LOG_LEVEL).upper()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    root_logger.handlers.clear()

    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(logger)s %(module)s %(function)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # The Google client libraries are chatty at INFO
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
