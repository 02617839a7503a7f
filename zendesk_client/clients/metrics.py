"""Request counters shared by every call made through one client."""

import threading
from dataclasses import dataclass, field


@dataclass
class RequestMetrics:
    """Metrics for API requests.

    A single client may be used from several threads, so every update
    goes through ``_lock``.
    """

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    network_errors: int = 0
    total_retries: int = 0
    total_duration_ms: float = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_request(self, duration_ms: float, success: bool) -> None:
        """Record a completed HTTP exchange."""
        with self._lock:
            self.total_requests += 1
            self.total_duration_ms += duration_ms
            if success:
                self.successful_requests += 1
            else:
                self.failed_requests += 1

    def record_network_error(self, duration_ms: float) -> None:
        """Record an exchange that produced no response."""
        with self._lock:
            self.total_requests += 1
            self.network_errors += 1
            self.total_duration_ms += duration_ms

    def record_retry(self) -> None:
        """Record a retry."""
        with self._lock:
            self.total_retries += 1

    @property
    def avg_duration_ms(self) -> float:
        """Average request duration."""
        if not self.total_requests:
            return 0
        return self.total_duration_ms / self.total_requests

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        with self._lock:
            return {
                "total_requests": self.total_requests,
                "successful_requests": self.successful_requests,
                "failed_requests": self.failed_requests,
                "network_errors": self.network_errors,
                "total_retries": self.total_retries,
                "total_duration_ms": round(self.total_duration_ms, 2),
                "avg_duration_ms": round(self.avg_duration_ms, 2),
            }
