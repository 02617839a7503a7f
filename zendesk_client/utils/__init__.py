"""Utility modules for the client.

Includes:
- Logging configuration
- Structured request logging
"""

from .logging_config import setup_logging, get_logger, JsonFormatter
from .request_log import RequestLogContext, timed_operation

__all__ = [
    "setup_logging",
    "get_logger",
    "JsonFormatter",
    "RequestLogContext",
    "timed_operation",
]
