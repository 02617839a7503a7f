"""Exhaustive collection of paginated endpoints.

Zendesk endpoint families page differently and the walker recognises
them from the payload alone:

    offset       {"organizations": [...], "next_page": "https://...?page=2"}
    cursor       {"organizations": [...], "meta": {"has_more": true,
                  "after_cursor": "xyz"}, "links": {"next": "https://..."}}
    incremental  {"organizations": [...], "after_url": "https://...",
                  "end_of_stream": false}
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence
from urllib.parse import parse_qsl, urlencode

from zendesk_client.clients.governor import RateLimitGovernor, RetryOutcome
from zendesk_client.clients.paths import EndpointPath
from zendesk_client.clients.transport import ApiRequest, ApiResponse
from zendesk_client.exceptions import PaginationError, raise_for_response
from zendesk_client.utils.request_log import RequestLogContext

logger = logging.getLogger(__name__)

CURSOR_FIELDS = ("next_page", "after_url", "end_of_stream", "meta", "links")
# Top-level list fields that never hold the primary records
NON_RECORD_FIELDS = frozenset({"meta", "links"})


@dataclass
class AggregatedResult:
    """Records of every page in arrival order plus the last page's envelope."""

    items: list = field(default_factory=list)
    response: Optional[ApiResponse] = None
    pages: int = 0
    requests: int = 0
    count: Optional[int] = None
    cancelled: bool = False

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index):
        return self.items[index]


@dataclass(frozen=True)
class PageToken:
    """Opaque cursor token sent back as ``page[after]``."""

    value: str


def next_cursor(body: dict) -> Any:
    """Return the continuation of a page, or ``None`` on the last page.

    The result is a URL string, a page number (int or digit string), or a
    ``PageToken``.
    """
    if body.get("end_of_stream") is True:
        return None

    meta = body.get("meta")
    if isinstance(meta, dict) and "has_more" in meta:
        if not meta["has_more"]:
            return None
        links = body.get("links") if isinstance(body.get("links"), dict) else {}
        if links.get("next"):
            return links["next"]
        if meta.get("after_cursor"):
            return PageToken(str(meta["after_cursor"]))
        return None

    for key in ("next_page", "after_url"):
        value = body.get(key)
        if value not in (None, ""):
            return value
    return None


def has_cursor_field(body: dict) -> bool:
    return any(key in body for key in CURSOR_FIELDS)


def extract_records(body: dict, result_keys: Sequence[str] = ()) -> Optional[list]:
    """Pick the primary records of a page.

    ``result_keys`` lists the resource's JSON names, plural first. A
    singular object is returned as a one-item list. Without names the
    single top-level list field is used. ``None`` means no records field.

    Raises:
        PaginationError: Without names, when several list fields compete
    """
    for key in result_keys:
        if key not in body:
            continue
        value = body[key]
        if isinstance(value, list):
            return value
        if isinstance(value, dict):
            return [value]
        return None

    if result_keys:
        return None

    candidates = [
        key for key, value in body.items()
        if key not in NON_RECORD_FIELDS and isinstance(value, list)
    ]
    if len(candidates) > 1:
        raise PaginationError(
            f"ambiguous records field, pass result_keys to pick one of: {', '.join(candidates)}"
        )
    return body[candidates[0]] if candidates else None


def _count_hint(body: dict) -> Optional[int]:
    count = body.get("count")
    if isinstance(count, dict):
        count = count.get("value")
    return count if isinstance(count, int) and not isinstance(count, bool) else None


def with_query(path: EndpointPath, overrides: dict) -> EndpointPath:
    """Copy of ``path`` with query parameters replaced or added."""
    params = dict(parse_qsl(path.query, keep_blank_values=True))
    params.update({key: str(value) for key, value in overrides.items()})
    return EndpointPath(path.path, urlencode(list(params.items()), safe=",[]"))


class PaginationWalker:
    """Follow next-page cursors until a collection is exhausted.

    Pages are fetched strictly one after another; each page goes through
    the governor, so rate limiting is handled per page.
    """

    def __init__(
        self,
        governor: RateLimitGovernor,
        check_response: Callable[[ApiResponse], Any] = raise_for_response,
        max_pages: Optional[int] = None,
    ):
        """Initialize walker.

        Args:
            governor: Governor used for every page request
            check_response: Raises the classified error for non-2xx pages
            max_pages: Hard ceiling on pages per walk (None for unbounded)
        """
        self.governor = governor
        self.check_response = check_response
        self.max_pages = max_pages

    def _resolve(self, url: str) -> str:
        return self.governor.transport.resolve_url(url)

    def _next_request(self, request: ApiRequest, path: EndpointPath, cursor: Any) -> ApiRequest:
        if isinstance(cursor, PageToken):
            return request.with_url(str(with_query(path, {"page[after]": cursor.value})))
        if isinstance(cursor, int) and not isinstance(cursor, bool):
            return request.with_url(str(with_query(path, {"page": cursor})))
        # Offset endpoints sometimes send the page number as a string
        if isinstance(cursor, str) and cursor.isdigit():
            return request.with_url(str(with_query(path, {"page": int(cursor)})))
        return request.with_url(str(cursor))

    def walk(
        self,
        path: EndpointPath,
        result_keys: Sequence[str] = (),
        cancel=None,
        headers: Optional[dict] = None,
    ) -> AggregatedResult:
        """Collect every page of ``path``.

        Args:
            path: First page endpoint
            result_keys: Resource JSON names, e.g. ("organizations", "organization")
            cancel: Optional object with ``is_set()``, checked before each page
            headers: Extra request headers

        Returns:
            AggregatedResult; ``cancelled`` is set if the walk was stopped early

        Raises:
            PaginationError: On a malformed page or when ``max_pages`` is hit
        """
        result = AggregatedResult()
        request = ApiRequest("GET", str(path), headers=headers or {})
        seen = {self._resolve(request.url)}

        while True:
            if cancel is not None and cancel.is_set():
                result.cancelled = True
                logger.info(
                    "Pagination cancelled",
                    extra={"path": path.path, "pages": result.pages, "record_count": len(result.items)}
                )
                return result

            if self.max_pages is not None and result.pages >= self.max_pages:
                logger.error(
                    "Pagination ceiling reached",
                    extra={"path": path.path, "max_pages": self.max_pages}
                )
                raise PaginationError(
                    f"{path.path}: more than {self.max_pages} pages",
                    partial=result,
                    page=result.pages + 1,
                )

            logger.debug(
                f"Fetching page {result.pages + 1}",
                extra=RequestLogContext(
                    method=request.method, url=request.url, page=result.pages + 1
                ).to_dict()
            )
            response, state = self.governor.execute(request, cancel=cancel)
            result.requests += state.attempts

            if state.outcome is RetryOutcome.CANCELLED:
                result.cancelled = True
                logger.info(
                    "Pagination cancelled during retry",
                    extra={"path": path.path, "pages": result.pages}
                )
                return result

            self.check_response(response)
            result.pages += 1
            result.response = response

            body = response.body
            if not isinstance(body, dict):
                raise PaginationError(
                    f"{response.url}: page body is not a JSON object",
                    partial=result,
                    page=result.pages,
                )

            try:
                records = extract_records(body, result_keys)
            except PaginationError as e:
                raise PaginationError(
                    f"{response.url}: {e}", partial=result, page=result.pages
                ) from e
            if records is None and not has_cursor_field(body):
                raise PaginationError(
                    f"{response.url}: page has neither records nor a next-page cursor",
                    partial=result,
                    page=result.pages,
                )
            if records:
                result.items.extend(records)
            if result.count is None:
                result.count = _count_hint(body)

            cursor = next_cursor(body)
            if cursor is None:
                break

            request = self._next_request(request, path, cursor)
            identity = self._resolve(request.url)
            if identity in seen:
                logger.warning(
                    "Next page cursor repeats an earlier page, stopping",
                    extra={"url": identity, "page": result.pages}
                )
                break
            seen.add(identity)

        logger.info(
            f"Pagination complete: {len(result.items)} records in {result.pages} pages",
            extra={"path": path.path, "record_count": len(result.items), "pages": result.pages}
        )
        return result
