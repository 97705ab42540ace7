"""Logging configuration for path-owners.

Supports two logging formats:
- JSON logging (production): Structured logs for log aggregation systems
- Standard logging (development): Human-readable logs with stacktraces

Configure via PATH_OWNERS_LOG_FORMAT_JSON environment variable (default: True).
"""

import logging
import sys
from typing import TextIO

from pythonjsonlogger.json import JsonFormatter

from path_owners.settings import Settings, settings

EXCLUDED_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "taskName",
    "exc_info",
    "exc_text",
    "stack_info",
}


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter carrying the ``extra`` fields of a log call.

    Owners log calls pass ``project``, ``branch`` and ``owners_path`` as extra
    fields, they end up as top level keys of the JSON record.
    """

    def add_fields(
        self,
        log_record: dict[str, object],
        record: logging.LogRecord,
        message_dict: dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["message"] = record.getMessage()

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        log_record.update({
            key: value
            for key, value in record.__dict__.items()
            if key not in EXCLUDED_FIELDS and not key.startswith("_")
        })


def setup_logger(
    logger: logging.Logger,
    log_level: str | None = None,
    config: Settings = settings,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Setup a specific logger with JSON or plain formatting.

    Records go to ``stream``, stdout by default.
    """
    formatter: logging.Formatter
    if config.log_format_json:
        formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(logger)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    logger.handlers.clear()
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(log_level or config.log_level)
    # Prevent log messages from being propagated to the root logger and duplicated
    logger.propagate = False
    return logger


def setup_logging(
    config: Settings = settings, stream: TextIO | None = None
) -> logging.Logger:
    """Configure the root logger and return the path_owners logger.

    Loggers listed in ``log_exclude_loggers`` (comma-separated) are raised to
    WARNING so that DEBUG runs stay readable.
    """
    root_logger = logging.getLogger()
    setup_logger(root_logger, config=config, stream=stream)

    excluded_loggers = [
        name.strip() for name in config.log_exclude_loggers.split(",") if name.strip()
    ]
    for logger_name in excluded_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    return logging.getLogger("path_owners")