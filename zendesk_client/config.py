"""Client configuration.

One ``ClientConfig`` is built per process (or per tenant) and handed to
``ResourceClient``; it is read-only afterwards.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from zendesk_client.auth import ApiTokenAuth, BasicAuth, BearerAuth

logger = logging.getLogger(__name__)

DEFAULT_RETRY_STATUSES = (429, 502, 503, 504)


@dataclass(frozen=True)
class ClientConfig:
    """Immutable settings shared by every request of a client."""

    subdomain: Optional[str] = None
    endpoint_uri: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    token: Optional[str] = field(default=None, repr=False)
    oauth_token: Optional[str] = field(default=None, repr=False)
    token_provider: Optional[object] = field(default=None, repr=False)
    timeout: float = 30
    page_size: Optional[int] = 100
    max_pages: Optional[int] = 10_000
    max_attempts: int = 3
    max_retry_wait: float = 60
    fallback_delay: float = 1.0
    retry_statuses: Tuple[int, ...] = DEFAULT_RETRY_STATUSES
    sideload: Tuple[str, ...] = ()
    as_user: Optional[str] = None
    custom_headers: Mapping[str, str] = field(default_factory=dict)
    user_agent: str = "zendesk-client-python/1.0"

    def __post_init__(self):
        if not self.endpoint_uri and not self.subdomain:
            raise ValueError("subdomain or endpoint_uri is required")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.page_size is not None and self.page_size < 1:
            raise ValueError("page_size must be positive")
        if self.max_pages is not None and self.max_pages < 1:
            raise ValueError("max_pages must be positive")
        # Fail on ambiguous credentials at construction, not on first request
        self.build_auth()

    @property
    def base_url(self) -> str:
        """API root, e.g. ``https://acme.zendesk.com/api/v2``."""
        if self.endpoint_uri:
            return self.endpoint_uri.rstrip("/")
        return f"https://{self.subdomain}.zendesk.com/api/v2"

    def build_auth(self):
        """Return the single configured auth scheme.

        Raises:
            ValueError: If no scheme or more than one scheme is configured
        """
        configured = [
            name for name, value in (
                ("password", self.password),
                ("token", self.token),
                ("oauth_token", self.oauth_token),
                ("token_provider", self.token_provider),
            ) if value
        ]
        if not configured:
            raise ValueError("one of password, token, oauth_token or token_provider is required")
        if len(configured) > 1:
            raise ValueError(
                f"exactly one auth scheme may be configured, got: {', '.join(configured)}"
            )

        if self.oauth_token:
            return BearerAuth(token=self.oauth_token)
        if self.token_provider:
            return BearerAuth(token_provider=self.token_provider)
        if self.token:
            return ApiTokenAuth(self.username, self.token)
        return BasicAuth(self.username, self.password)

    @classmethod
    def from_env(
        cls,
        env_file: Optional[str] = None,
        prefix: str = "ZENDESK_",
        **overrides,
    ) -> "ClientConfig":
        """Build config from environment variables (and an optional .env file).

        Reads ``{prefix}SUBDOMAIN``, ``ENDPOINT_URI``, ``USERNAME``,
        ``PASSWORD``, ``TOKEN``, ``OAUTH_TOKEN``, ``TIMEOUT``, ``PAGE_SIZE``,
        ``MAX_ATTEMPTS`` and ``AS_USER``. Keyword overrides win.
        """
        load_dotenv(env_file)

        def env(name: str) -> Optional[str]:
            value = os.getenv(f"{prefix}{name}")
            return value or None

        values = {
            "subdomain": env("SUBDOMAIN"),
            "endpoint_uri": env("ENDPOINT_URI"),
            "username": env("USERNAME"),
            "password": env("PASSWORD"),
            "token": env("TOKEN"),
            "oauth_token": env("OAUTH_TOKEN"),
            "as_user": env("AS_USER"),
        }
        if env("TIMEOUT"):
            values["timeout"] = float(env("TIMEOUT"))
        if env("PAGE_SIZE"):
            values["page_size"] = int(env("PAGE_SIZE"))
        if env("MAX_ATTEMPTS"):
            values["max_attempts"] = int(env("MAX_ATTEMPTS"))
        values.update(overrides)

        logger.debug(
            "Loaded client config from environment",
            extra={"subdomain": values.get("subdomain"), "prefix": prefix}
        )
        return cls(**values)
