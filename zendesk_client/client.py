"""ZendeskClient - one shared ResourceClient threaded into every wrapper."""

import logging
import time
from typing import Callable, Optional

import requests

from zendesk_client.clients.base import ResourceClient
from zendesk_client.clients.job_statuses import JobStatuses
from zendesk_client.clients.organizations import Organizations
from zendesk_client.config import ClientConfig

logger = logging.getLogger(__name__)


class ZendeskClient:
    """Entry point for applications.

    Usage:
        client = ZendeskClient(ClientConfig(subdomain="acme", username="a@acme.com", token="..."))
        orgs = client.organizations.list()
        job = client.job_statuses.show(client.organizations.bulk_delete([1, 2]).result["job_status"]["id"])
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        **config_kwargs,
    ):
        """Initialize client.

        Args:
            config: Client configuration (built from ``config_kwargs`` if omitted)
            session: Optional requests session
            sleep: Sleep function used between retries
            **config_kwargs: ``ClientConfig`` fields when no config is given
        """
        if config is None:
            config = ClientConfig(**config_kwargs)
        elif config_kwargs:
            raise TypeError("pass either config or config keyword arguments, not both")

        self.config = config
        self.core = ResourceClient(config, session=session, sleep=sleep)
        self.organizations = Organizations(self.core)
        self.job_statuses = JobStatuses(self.core)

        logger.debug(
            "ZendeskClient initialized",
            extra={"base_url": config.base_url, "auth_scheme": self.core.transport.auth.scheme}
        )

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides) -> "ZendeskClient":
        """Build a client from ``ZENDESK_*`` environment variables."""
        return cls(ClientConfig.from_env(env_file=env_file, **overrides))

    @property
    def metrics(self):
        return self.core.metrics

    def close(self) -> None:
        self.core.close()

    def __enter__(self) -> "ZendeskClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
