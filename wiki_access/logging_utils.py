"""
Structured JSON logging utilities.

The library itself only emits records through ``logging.getLogger(__name__)``;
applications that ship logs to a collector can opt into single-line JSON
output with :func:`configure_structured_logging`.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

# Attributes every LogRecord carries; anything else came in through ``extra``
RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}

# Request parameters that must never reach a log sink
REDACTED_KEYS = frozenset({"password", "lgpassword", "token", "lgtoken", "logintoken"})
REDACTED = "***"


class StructuredJsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as single-line JSON objects with consistent fields:
    - timestamp: ISO 8601 time the record was created, in UTC
    - level: Log level (INFO, WARNING, ERROR, etc.)
    - logger: Logger name
    - message: Log message
    - Context fields passed through ``extra`` (title, wiki_file, revid, ...)

    Context fields named like credentials are replaced by ``***``.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in RECORD_ATTRS or key.startswith("_"):
                continue
            if key in REDACTED_KEYS:
                log_obj[key] = REDACTED
                continue
            try:
                json.dumps(value)
                log_obj[key] = value
            except (TypeError, ValueError):
                log_obj[key] = str(value)

        return json.dumps(log_obj, default=str)


def configure_structured_logging(
    level: int = logging.INFO,
    logger_name: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Configure structured JSON logging.

    Args:
        level: Logging level (default: INFO)
        logger_name: Specific logger to configure (default: root logger)
        stream: Output stream (default: stderr, so CLI output stays clean)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(StructuredJsonFormatter())

    logger.addHandler(handler)
    logger.setLevel(level)

    return logger


class EntityLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that adds entity context to all log messages.

    Pages log with ``{"title": ...}``, files with ``{"wiki_file": ...}``.
    Context keys that shadow LogRecord attributes (``filename``, ``name``,
    ...) are rejected up front, since ``Logger.makeRecord`` would raise on
    every call.
    """

    def __init__(self, logger: logging.Logger, extra: dict[str, Any]):
        clashes = sorted(RECORD_ATTRS.intersection(extra))
        if clashes:
            raise ValueError(f"Log context keys clash with LogRecord attributes: {clashes}")
        super().__init__(logger, extra)

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Add entity context to the record's extra fields."""
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs
