"""Zendesk API client.

One ``ResourceClient`` does path building, authentication, pagination and
rate-limit recovery; resource wrappers such as ``Organizations`` describe
endpoints on top of it.
"""

from .client import ZendeskClient
from .clients import AggregatedResult, ApiResponse, JobStatus, Organizations, ResourceClient
from .config import ClientConfig
from .exceptions import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidPathError,
    NetworkError,
    NotFoundError,
    PaginationError,
    RateLimitExceededError,
    ServerError,
    ValidationError,
    ZendeskError,
)

__version__ = "1.0.0"

__all__ = [
    "ZendeskClient",
    "ClientConfig",
    "ResourceClient",
    "Organizations",
    "AggregatedResult",
    "ApiResponse",
    "JobStatus",
    "ZendeskError",
    "ApiError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "InvalidPathError",
    "NetworkError",
    "NotFoundError",
    "PaginationError",
    "RateLimitExceededError",
    "ServerError",
    "ValidationError",
]
