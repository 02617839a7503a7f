"""Single HTTP exchange against the Zendesk API.

``Transport.send`` performs exactly one physical request. Any HTTP
response, including 4xx/5xx, comes back as an ``ApiResponse``; only a
missing response raises ``NetworkError``.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

import requests
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict
from urllib3.util.retry import Retry

from zendesk_client.clients.metrics import RequestMetrics
from zendesk_client.exceptions import InvalidPathError, NetworkError
from zendesk_client.utils.request_log import RequestLogContext, timed_operation

logger = logging.getLogger(__name__)

METHODS = frozenset({"GET", "POST", "PUT", "DELETE"})


@dataclass(frozen=True)
class ApiRequest:
    """Immutable description of one logical request."""

    method: str
    url: str
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        method = self.method.upper()
        if method not in METHODS:
            raise ValueError(f"unsupported HTTP method: {self.method}")
        object.__setattr__(self, "method", method)

    def with_url(self, url: str) -> "ApiRequest":
        """Copy of this request pointed at another URL (next page)."""
        return ApiRequest(self.method, url, self.body, self.headers)


@dataclass(frozen=True)
class ApiResponse:
    """Status, case-insensitive headers and decoded body of one response."""

    status_code: int
    headers: CaseInsensitiveDict
    body: Any
    method: str = "GET"
    url: str = ""
    duration_ms: float = 0

    @classmethod
    def from_requests(
        cls, response: requests.Response, method: str, url: str, duration_ms: float = 0
    ) -> "ApiResponse":
        """Envelope for a raw ``requests`` response."""
        return cls(
            status_code=response.status_code,
            headers=CaseInsensitiveDict(response.headers),
            body=decode_body(response),
            method=method,
            url=url,
            duration_ms=duration_ms,
        )

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def result(self) -> Any:
        """Decoded body, with an empty body (e.g. 204) as ``{}``."""
        return {} if self.body is None else self.body


def decode_body(response: requests.Response) -> Any:
    """Decode a response body; empty bodies decode to ``None``."""
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        # HTML error pages from proxies, plain text bodies
        return response.text


class Transport:
    """Issue authenticated JSON requests over a pooled ``requests`` session."""

    def __init__(
        self,
        base_url: str,
        auth,
        timeout: float = 30,
        default_headers: Optional[Mapping[str, str]] = None,
        session: Optional[requests.Session] = None,
        metrics: Optional[RequestMetrics] = None,
    ):
        """Initialize transport.

        Args:
            base_url: API root that base-relative paths are joined onto
            auth: Object with ``get_auth_header()``
            timeout: Request timeout in seconds
            default_headers: Headers added to every request
            session: Optional requests session (tests, connection reuse). Its
                adapters are used as configured, so retries mounted on it
                stack with the governor's
            metrics: Optional shared metrics collector
        """
        self.base_url = base_url.rstrip("/")
        self._base_host = urlsplit(self.base_url).netloc
        self.auth = auth
        self.timeout = timeout
        self.default_headers = dict(default_headers or {})
        self.metrics = metrics

        if session is None:
            session = requests.Session()
            # Retries belong to the governor; the adapter makes one attempt only
            adapter = HTTPAdapter(max_retries=Retry(total=0, raise_on_status=False))
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session

    def resolve_url(self, url: str) -> str:
        """Return an absolute URL for a base-relative path or a next-page URL."""
        if url.startswith(("http://", "https://")):
            host = urlsplit(url).netloc
            if host != self._base_host:
                raise InvalidPathError(
                    f"refusing to send credentials to {host}, expected {self._base_host}"
                )
            return url
        return f"{self.base_url}/{url.lstrip('/')}"

    def build_headers(self, request: ApiRequest) -> dict:
        headers = {"Accept": "application/json"}
        headers.update(self.default_headers)
        headers.update(self.auth.get_auth_header())
        if request.body is not None:
            headers["Content-Type"] = "application/json"
        headers.update(request.headers)
        return headers

    def send(self, request: ApiRequest) -> ApiResponse:
        """Perform one HTTP exchange.

        Raises:
            NetworkError: When no HTTP response was received
        """
        url = self.resolve_url(request.url)
        data = None
        if request.body is not None:
            data = json.dumps(request.body, default=str)

        headers = self.build_headers(request)

        log_ctx = RequestLogContext(method=request.method, url=url)
        logger.debug(f"Making {request.method} request", extra=log_ctx.to_dict())

        try:
            with timed_operation(f"{request.method} {url}", logger=logger) as timer:
                response = self.session.request(
                    method=request.method,
                    url=url,
                    data=data,
                    headers=headers,
                    timeout=self.timeout,
                )
        except requests.exceptions.RequestException as e:
            if self.metrics:
                self.metrics.record_network_error(timer.duration_ms)
            log_ctx.duration_ms = timer.duration_ms
            logger.error(
                "API request failed without a response",
                extra={**log_ctx.to_dict(), "error": str(e)}
            )
            raise NetworkError(
                f"{request.method} {url} failed: {e}", method=request.method, url=url
            ) from e

        ok = 200 <= response.status_code < 300
        if self.metrics:
            self.metrics.record_request(timer.duration_ms, success=ok)

        log_ctx.status_code = response.status_code
        log_ctx.duration_ms = timer.duration_ms
        logger.debug("API request completed", extra=log_ctx.to_dict())

        return ApiResponse.from_requests(
            response, method=request.method, url=url, duration_ms=timer.duration_ms
        )

    def close(self) -> None:
        self.session.close()
