"""Zendesk API clients.

The ``ResourceClient`` handles:
- Path construction
- Authentication
- Pagination
- Rate limiting and retries

Resource wrappers hold a ``ResourceClient`` and only describe endpoints.
"""

from .base import ResourceClient
from .governor import RateLimitGovernor, RetryOutcome, RetryPolicy, RetryState
from .job_statuses import JobState, JobStatus, JobStatuses
from .metrics import RequestMetrics
from .organizations import Organizations
from .pagination import AggregatedResult, PaginationWalker
from .paths import EndpointPath, Identifier, Literal, QueryParams, build_path
from .transport import ApiRequest, ApiResponse, Transport

__all__ = [
    "ResourceClient",
    "RateLimitGovernor",
    "RetryOutcome",
    "RetryPolicy",
    "RetryState",
    "JobState",
    "JobStatus",
    "JobStatuses",
    "RequestMetrics",
    "Organizations",
    "AggregatedResult",
    "PaginationWalker",
    "EndpointPath",
    "Identifier",
    "Literal",
    "QueryParams",
    "build_path",
    "ApiRequest",
    "ApiResponse",
    "Transport",
]
