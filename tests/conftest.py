"""Pytest configuration and fixtures."""

import pytest

from zendesk_client.clients.base import ResourceClient
from zendesk_client.client import ZendeskClient
from zendesk_client.config import ClientConfig

BASE_URL = "https://acme.zendesk.com/api/v2"

ENV_KEYS = [
    "ZENDESK_SUBDOMAIN",
    "ZENDESK_ENDPOINT_URI",
    "ZENDESK_USERNAME",
    "ZENDESK_PASSWORD",
    "ZENDESK_TOKEN",
    "ZENDESK_OAUTH_TOKEN",
    "ZENDESK_TIMEOUT",
    "ZENDESK_PAGE_SIZE",
    "ZENDESK_MAX_ATTEMPTS",
    "ZENDESK_AS_USER",
]


@pytest.fixture
def config():
    """Config with API token auth and a small retry budget."""
    return ClientConfig(
        subdomain="acme",
        username="agent@acme.com",
        token="secret-token",
        max_attempts=3,
    )


@pytest.fixture
def sleeps():
    """Records requested sleep durations instead of sleeping."""
    return []


@pytest.fixture
def core(config, sleeps):
    """ResourceClient that never really sleeps."""
    client = ResourceClient(config, sleep=sleeps.append)
    yield client
    client.close()


@pytest.fixture
def zendesk(config, sleeps):
    """Full ZendeskClient with wrappers."""
    client = ZendeskClient(config, sleep=sleeps.append)
    yield client
    client.close()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove ZENDESK_* variables and restore them afterwards."""
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


def org_page(ids, next_page=None, **extra):
    """Offset-style organizations page."""
    body = {
        "organizations": [{"id": i, "name": f"Org {i}"} for i in ids],
        "next_page": next_page,
    }
    body.update(extra)
    return body
