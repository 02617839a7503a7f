"""Exception hierarchy for Zendesk API calls.

Every non-2xx response is translated into one of these by
``raise_for_response``. Resource wrappers never catch them.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class ZendeskError(Exception):
    """Base exception for all client errors."""
    pass


class InvalidPathError(ZendeskError, ValueError):
    """Malformed endpoint path segments."""
    pass


class NetworkError(ZendeskError):
    """No HTTP response was obtained (DNS, connection reset, timeout)."""

    def __init__(self, message: str, method: Optional[str] = None, url: Optional[str] = None):
        super().__init__(message)
        self.method = method
        self.url = url


class ApiError(ZendeskError):
    """Zendesk answered with a non-2xx status."""

    def __init__(self, message: str, response: Any = None):
        """Initialize API error.

        Args:
            message: Human readable message
            response: The ``ApiResponse`` envelope that caused the error
        """
        super().__init__(message)
        self.response = response
        self.status_code = getattr(response, "status_code", None)
        self.body = getattr(response, "body", None)

        payload = self.body if isinstance(self.body, dict) else {}
        error = payload.get("error")
        # Some endpoints nest {"error": {"title": ..., "message": ...}}
        if isinstance(error, dict):
            self.error = error.get("title")
            self.description = error.get("message") or payload.get("description")
        else:
            self.error = error
            self.description = payload.get("description")


class AuthenticationError(ApiError):
    """Credentials rejected (401)."""
    pass


class AuthorizationError(ApiError):
    """Authenticated but not allowed (403)."""
    pass


class NotFoundError(ApiError):
    """Resource not found (404)."""
    pass


class ConflictError(ApiError):
    """Conflicting concurrent modification (409)."""
    pass


class ValidationError(ApiError):
    """Record invalid (422).

    ``details`` maps field names to the list of per-field errors Zendesk
    returns, e.g. ``{"name": [{"error": "DuplicateValue", ...}]}``.
    """

    def __init__(self, message: str, response: Any = None):
        super().__init__(message, response)
        payload = self.body if isinstance(self.body, dict) else {}
        self.details = payload.get("details") or {}


class RateLimitExceededError(ApiError):
    """Still rate limited (429) after the retry budget was spent."""

    def __init__(self, message: str, response: Any = None):
        super().__init__(message, response)
        headers = getattr(response, "headers", None) or {}
        self.retry_after = headers.get("Retry-After")


class ServerError(ApiError):
    """5xx not resolved by retrying."""
    pass


class PaginationError(ZendeskError):
    """A page of a collection could not be walked.

    ``partial`` holds the ``AggregatedResult`` collected before the fault.
    """

    def __init__(self, message: str, partial: Any = None, page: Optional[int] = None):
        super().__init__(message)
        self.partial = partial
        self.page = page


_STATUS_ERRORS = {
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
    429: RateLimitExceededError,
}


def error_class_for_status(status_code: int) -> type:
    """Map an HTTP status code to its exception class."""
    if status_code in _STATUS_ERRORS:
        return _STATUS_ERRORS[status_code]
    if status_code >= 500:
        return ServerError
    return ApiError


def raise_for_response(response: Any) -> Any:
    """Raise the classified error for a non-2xx envelope.

    Args:
        response: ``ApiResponse`` envelope

    Returns:
        The same envelope when the status is 2xx

    Raises:
        ApiError: (or a subclass) for any other status
    """
    if 200 <= response.status_code < 300:
        return response

    error_class = error_class_for_status(response.status_code)
    message = f"{response.status_code} error for {response.method} {response.url}"
    err = error_class(message, response)
    if err.error or err.description:
        message = f"{message}: {err.error or ''} {err.description or ''}".rstrip()
        err.args = (message,)

    logger.debug(
        "Classified error response",
        extra={
            "status_code": response.status_code,
            "error_class": error_class.__name__,
            "url": response.url,
        }
    )
    raise err
