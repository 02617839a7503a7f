"""Rate-limit and transient-failure retries around one Transport call."""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, Optional

from urllib3.exceptions import InvalidHeader
from urllib3.util.retry import Retry

from zendesk_client.clients.metrics import RequestMetrics
from zendesk_client.clients.transport import ApiRequest, ApiResponse, Transport
from zendesk_client.utils.request_log import RequestLogContext

logger = logging.getLogger(__name__)

# Reset headers that carry an absolute epoch rather than a duration
_EPOCH_THRESHOLD = 1_000_000_000

# Only used for its Retry-After parser (seconds or HTTP-date)
_RETRY_AFTER_PARSER = Retry(total=0)


class RetryOutcome(Enum):
    """How a governed call ended."""

    SUCCESS = "success"
    PASSTHROUGH = "passthrough"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


@dataclass
class RetryState:
    """Bookkeeping for one logical call spanning several attempts."""

    attempts: int = 0
    delays: list[float] = field(default_factory=list)
    outcome: Optional[RetryOutcome] = None

    @property
    def retries(self) -> int:
        return len(self.delays)

    @property
    def last_delay(self) -> Optional[float]:
        return self.delays[-1] if self.delays else None


@dataclass(frozen=True)
class RetryPolicy:
    """When and how long to wait before re-sending a request.

    ``max_attempts`` counts physical requests, the first one included.
    """

    max_attempts: int = 3
    retry_statuses: FrozenSet[int] = frozenset({429, 502, 503, 504})
    max_wait: float = 60
    fallback_delay: float = 1.0
    backoff_factor: float = 2.0

    @classmethod
    def from_config(cls, config) -> "RetryPolicy":
        return cls(
            max_attempts=config.max_attempts,
            retry_statuses=frozenset(config.retry_statuses),
            max_wait=config.max_retry_wait,
            fallback_delay=config.fallback_delay,
        )

    def is_retryable(self, status_code: int) -> bool:
        return status_code in self.retry_statuses

    def server_hint(self, response: ApiResponse, now: Optional[float] = None) -> Optional[float]:
        """Seconds the server asked us to wait, if it said so."""
        headers = response.headers
        retry_after = headers.get("Retry-After")
        if retry_after is not None:
            try:
                return float(_RETRY_AFTER_PARSER.parse_retry_after(str(retry_after)))
            except InvalidHeader:
                logger.warning(
                    "Ignoring malformed Retry-After header",
                    extra={"retry_after": retry_after, "url": response.url}
                )

        for name in ("ratelimit-reset", "X-RateLimit-Reset", "X-Rate-Limit-Reset"):
            value = headers.get(name)
            if value is None:
                continue
            try:
                reset = float(value)
            except ValueError:
                continue
            if reset > _EPOCH_THRESHOLD:
                reset -= now if now is not None else time.time()
            return max(reset, 0.0)
        return None

    def delay_for(self, response: ApiResponse, attempt: int) -> float:
        """Delay before attempt ``attempt + 1``, clamped to ``max_wait``."""
        hint = self.server_hint(response)
        if hint is None:
            hint = self.fallback_delay * (self.backoff_factor ** (attempt - 1))
        return min(max(hint, 0.0), self.max_wait)


class RateLimitGovernor:
    """Send a request, waiting and re-sending on 429 and transient 5xx.

    When the attempt budget runs out the last response is returned as is;
    classifying it is the caller's job.
    """

    def __init__(
        self,
        transport: Transport,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        metrics: Optional[RequestMetrics] = None,
    ):
        self.transport = transport
        self.policy = policy or RetryPolicy()
        self.sleep = sleep
        self.metrics = metrics

    def execute(self, request: ApiRequest, cancel=None) -> tuple[ApiResponse, RetryState]:
        """Send ``request`` under the retry policy.

        Args:
            request: Request descriptor
            cancel: Optional object with ``is_set()``, checked before each wait

        Returns:
            Tuple of (last response, retry state)
        """
        state = RetryState()

        while True:
            state.attempts += 1
            response = self.transport.send(request)

            if response.ok:
                state.outcome = RetryOutcome.SUCCESS
                return response, state

            if not self.policy.is_retryable(response.status_code):
                state.outcome = RetryOutcome.PASSTHROUGH
                return response, state

            if state.attempts >= self.policy.max_attempts:
                state.outcome = RetryOutcome.EXHAUSTED
                logger.warning(
                    "Retry budget exhausted",
                    extra=RequestLogContext(
                        method=request.method,
                        url=response.url,
                        status_code=response.status_code,
                        attempt=state.attempts,
                    ).to_dict()
                )
                return response, state

            if cancel is not None and cancel.is_set():
                state.outcome = RetryOutcome.CANCELLED
                logger.info(
                    "Cancelled before retry wait",
                    extra={"url": response.url, "attempt": state.attempts}
                )
                return response, state

            delay = self.policy.delay_for(response, state.attempts)
            state.delays.append(delay)
            if self.metrics:
                self.metrics.record_retry()

            logger.warning(
                f"Received {response.status_code}, waiting {delay:.2f}s before retrying",
                extra=RequestLogContext(
                    method=request.method,
                    url=response.url,
                    status_code=response.status_code,
                    attempt=state.attempts,
                    retry_after=delay,
                ).to_dict()
            )
            self.sleep(delay)
