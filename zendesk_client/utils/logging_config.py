"""Logging configuration for applications embedding the client.

The library itself only creates module loggers; ``setup_logging`` is
offered for scripts that want the structured JSON output.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

# Attributes every LogRecord carries; anything else came in through extra=
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render a record and its ``extra`` fields as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                data[key] = value
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def setup_logging(
    level: int = logging.INFO,
    json_format: bool = True,
    stream=None,
) -> logging.Logger:
    """Configure the ``zendesk_client`` logger hierarchy.

    Args:
        level: Log level for the package logger
        json_format: Emit JSON lines instead of plain text
        stream: Output stream (defaults to stderr)

    Returns:
        The configured package logger
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    package_logger = logging.getLogger("zendesk_client")
    package_logger.handlers = [handler]
    package_logger.setLevel(level)
    package_logger.propagate = False
    return package_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger below the package namespace."""
    if not name:
        return logging.getLogger("zendesk_client")
    if name.startswith("zendesk_client"):
        return logging.getLogger(name)
    return logging.getLogger(f"zendesk_client.{name}")
