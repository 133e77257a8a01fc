"""Structured JSON logging configuration."""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from twofactor.core.config import settings


# Extras that must never reach a log sink in clear, even if passed by mistake.
REDACTED_FIELDS = frozenset(
    {"secret", "code", "submitted_code", "backup_codes", "provisioning_uri", "qr_code", "token", "pending_token"}
)
REDACTED = "[redacted]"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter for two-factor audit lines.

    Every line carries ``event_type`` and ``outcome`` (null outside security
    events) so sinks can filter on them without a schema per logger.
    """

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record.setdefault("event_type", None)
        log_record.setdefault("outcome", None)

        for key in REDACTED_FIELDS.intersection(log_record):
            log_record[key] = REDACTED

        log_record.pop("asctime", None)


def setup_logging(level: str | None = None) -> None:
    """Configure root logging for processes embedding the two-factor core."""
    root_logger = logging.getLogger()
    level_name = (level or settings.LOG_LEVEL).upper()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    root_logger.handlers.clear()

    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(logger)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # PIL logs every PNG chunk at DEBUG when rendering QR codes
    logging.getLogger("PIL").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
