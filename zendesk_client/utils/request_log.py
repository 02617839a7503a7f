"""Structured request logging helpers.

Fields attached to request log records:
- method
- url
- status_code
- attempt
- duration_ms
- retry_after
- page
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Optional


@dataclass
class RequestLogContext:
    """Context for one physical request, passed to loggers via ``extra``."""

    method: str
    url: str
    status_code: Optional[int] = None
    attempt: Optional[int] = None
    duration_ms: Optional[float] = None
    retry_after: Optional[float] = None
    page: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary, dropping unset fields."""
        data = asdict(self)
        if data["duration_ms"] is not None:
            data["duration_ms"] = round(data["duration_ms"], 2)
        return {k: v for k, v in data.items() if v is not None}


class Timer:
    """Elapsed time holder yielded by ``timed_operation``."""

    def __init__(self):
        self.start_time = time.monotonic()
        self.end_time: Optional[float] = None
        self.duration_ms: float = 0

    def stop(self) -> float:
        self.end_time = time.monotonic()
        self.duration_ms = (self.end_time - self.start_time) * 1000
        return self.duration_ms


@contextmanager
def timed_operation(name: str, logger: Optional[logging.Logger] = None):
    """Context manager to time an operation.

    Usage:
        with timed_operation("GET organizations") as timer:
            response = session.request(...)
        print(f"Took {timer.duration_ms}ms")

    Args:
        name: Operation name for logging
        logger: Optional logger instance

    Yields:
        Timer object with duration_ms attribute
    """
    timer = Timer()

    try:
        yield timer
    finally:
        timer.stop()

        if logger:
            logger.debug(
                f"Operation '{name}' completed",
                extra={"operation": name, "duration_ms": round(timer.duration_ms, 2)}
            )
