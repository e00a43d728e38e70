"""
Structured Logging Setup

Every module logs through a child of the ``showroom`` logger. One JSON
handler on that parent writes all records to stderr, so command output
on stdout stays parseable.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

ROOT_LOGGER = "showroom"

# LogRecord attributes that are not caller-supplied extras
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
    | {"message", "asctime", "service", "taskName"}
)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, extras merged in"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        )
        return json.dumps(log_data, default=str)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Tags every record with the owning service name"""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**kwargs.get("extra", {}), "service": self.extra["service"]}
        return msg, kwargs


def setup_logging(log_level: str | None = None) -> logging.Logger:
    """
    Install the JSON stderr handler on the ``showroom`` logger.

    Safe to call repeatedly: the handler is replaced, never duplicated.
    Level defaults to SHOWROOM_LOG_LEVEL, then INFO.
    """
    level_name = (log_level or os.environ.get("SHOWROOM_LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_service_logger(service_name: str) -> ServiceLoggerAdapter:
    """Adapter for ``showroom.<service_name>``; configures logging on first use"""
    if not logging.getLogger(ROOT_LOGGER).handlers:
        setup_logging()
    logger = logging.getLogger(f"{ROOT_LOGGER}.{service_name}")
    return ServiceLoggerAdapter(logger, {"service": service_name})
