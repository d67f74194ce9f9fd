"""
Tract Lookup - Logging Setup

Configures the root logger from the `logging` config section:
- "text": the pipeline's plain line format
- "json": one JSON object per record, including `extra` fields

Usage:
    from tract_lookup.shared.logging_setup import configure_logging

    configure_logging(get_config())
    logger = logging.getLogger(__name__)
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from tract_lookup.shared.config import Settings, get_config

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {}
        if self.include_timestamp:
            payload["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()
        payload["level"] = record.levelname
        payload["logger"] = record.name
        payload["message"] = record.getMessage()

        extra = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS
        }
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging(
    config: Settings | None = None,
    handlers: list[logging.Handler] | None = None,
) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        config: Configuration object (uses default if not provided)
        handlers: Handlers to install (defaults to a single stream handler)

    Returns:
        The configured root logger
    """
    config = config or get_config()
    log_config = config.logging

    if log_config.format == "json":
        formatter: logging.Formatter = JsonFormatter(log_config.include_timestamp)
    elif log_config.include_timestamp:
        formatter = logging.Formatter(TEXT_FORMAT)
    else:
        formatter = logging.Formatter("%(name)s - %(levelname)s - %(message)s")

    handlers = handlers or [logging.StreamHandler()]
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(log_config.level.upper())

    return root
