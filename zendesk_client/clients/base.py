"""Resource client: the one HTTP entry point shared by every resource wrapper."""

import logging
import time
from typing import Any, Callable, Mapping, Optional, Sequence

import requests

from zendesk_client.clients.governor import RateLimitGovernor, RetryPolicy
from zendesk_client.clients.metrics import RequestMetrics
from zendesk_client.clients.pagination import AggregatedResult, PaginationWalker
from zendesk_client.clients.paths import EndpointPath, QueryParams, build_path
from zendesk_client.clients.transport import ApiRequest, ApiResponse, Transport
from zendesk_client.config import ClientConfig
from zendesk_client.exceptions import raise_for_response

logger = logging.getLogger(__name__)


class ResourceClient:
    """Compose path building, transport, retries and pagination.

    Public operations:
    - ``get``: one page, no pagination follow-through
    - ``get_all``: every page concatenated
    - ``post`` / ``put``: create, update, upsert and bulk calls
    - ``delete``: single and bulk deletes

    All of them raise the classified ``ApiError`` for non-2xx responses.
    The instance holds only read-only configuration plus thread-safe
    metrics, so concurrent calls may share it.
    """

    def __init__(
        self,
        config: ClientConfig,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize resource client.

        Args:
            config: Client configuration
            session: Optional requests session
            sleep: Sleep function used between retries
        """
        self.config = config
        self.metrics = RequestMetrics()

        self.transport = Transport(
            base_url=config.base_url,
            auth=config.build_auth(),
            timeout=config.timeout,
            default_headers=self._default_headers(config),
            session=session,
            metrics=self.metrics,
        )
        self.governor = RateLimitGovernor(
            self.transport,
            policy=RetryPolicy.from_config(config),
            sleep=sleep,
            metrics=self.metrics,
        )
        self.walker = PaginationWalker(
            self.governor,
            check_response=raise_for_response,
            max_pages=config.max_pages,
        )

    @staticmethod
    def _default_headers(config: ClientConfig) -> dict:
        headers = {"User-Agent": config.user_agent}
        if config.as_user:
            headers["X-On-Behalf-Of"] = config.as_user
        headers.update(config.custom_headers)
        return headers

    def build_path(self, segments: Sequence[Any]) -> EndpointPath:
        return build_path(segments, sideload=self.config.sideload)

    def request(
        self,
        method: str,
        segments: Sequence[Any],
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        cancel=None,
    ) -> ApiResponse:
        """Send one governed request and classify its response.

        Raises:
            InvalidPathError: Malformed segments
            NetworkError: No response obtained
            ApiError: Non-2xx response (subclass by status)
        """
        path = self.build_path(segments)
        request = ApiRequest(method, str(path), body=body, headers=headers or {})
        response, state = self.governor.execute(request, cancel=cancel)

        if state.retries:
            logger.info(
                "Request completed after retries",
                extra={
                    "method": request.method,
                    "path": path.path,
                    "attempts": state.attempts,
                    "last_delay": state.last_delay,
                    "outcome": state.outcome.value,
                }
            )
        return raise_for_response(response)

    def get(self, segments: Sequence[Any], headers: Optional[Mapping[str, str]] = None) -> ApiResponse:
        """GET a single page."""
        return self.request("GET", segments, headers=headers)

    def _with_page_size(self, segments: Sequence[Any]) -> list:
        segments = list(segments)
        if not self.config.page_size:
            return segments

        last = segments[-1] if segments else None
        if isinstance(last, QueryParams):
            params = dict(last.params)
        elif isinstance(last, Mapping):
            params = dict(last)
        else:
            params = None
        if params is None:
            return segments + [{"per_page": self.config.page_size}]
        if "per_page" in params or "page" in params:
            return segments
        params["per_page"] = self.config.page_size
        return segments[:-1] + [params]

    def get_all(
        self,
        segments: Sequence[Any],
        result_keys: Sequence[str] = (),
        cancel=None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> AggregatedResult:
        """GET every page of a collection.

        Args:
            segments: Path segments of the first page
            result_keys: Resource JSON names, plural first
            cancel: Optional object with ``is_set()`` (e.g. ``threading.Event``)
            headers: Extra request headers

        Returns:
            AggregatedResult with records in page order

        Raises:
            PaginationError: Malformed page or page ceiling reached
            ApiError: Non-2xx page response
        """
        path = self.build_path(self._with_page_size(segments))
        return self.walker.walk(
            path,
            result_keys=result_keys,
            cancel=cancel,
            headers=dict(headers or {}),
        )

    def post(self, segments: Sequence[Any], body: Any = None) -> ApiResponse:
        """POST a JSON body."""
        return self.request("POST", segments, body=body)

    def put(self, segments: Sequence[Any], body: Any = None) -> ApiResponse:
        """PUT a JSON body."""
        return self.request("PUT", segments, body=body)

    def delete(self, segments: Sequence[Any], body: Any = None) -> ApiResponse:
        """DELETE a resource or, with ``destroy_many`` segments, many of them."""
        return self.request("DELETE", segments, body=body)

    def close(self) -> None:
        logger.debug("Closing client", extra=self.metrics.to_dict())
        self.transport.close()

    def __enter__(self) -> "ResourceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
