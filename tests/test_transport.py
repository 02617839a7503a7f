"""Tests for the single-exchange transport."""

import base64
import json

import pytest
import requests
import responses
from requests.adapters import HTTPAdapter

from zendesk_client.auth import ApiTokenAuth, BearerAuth
from zendesk_client.clients.metrics import RequestMetrics
from zendesk_client.clients.transport import ApiRequest, ApiResponse, Transport
from zendesk_client.exceptions import InvalidPathError, NetworkError

from conftest import BASE_URL


@pytest.fixture
def transport():
    return Transport(
        BASE_URL,
        auth=ApiTokenAuth("agent@acme.com", "secret-token"),
        default_headers={"User-Agent": "tests"},
        metrics=RequestMetrics(),
    )


class TestApiRequest:
    """Tests for the request descriptor."""

    def test_method_is_normalized(self):
        """Test lower case methods are upper-cased."""
        assert ApiRequest("get", "organizations").method == "GET"

    def test_unknown_method(self):
        """Test unsupported verbs are rejected."""
        with pytest.raises(ValueError):
            ApiRequest("PATCH", "organizations")

    def test_immutable(self):
        """Test descriptors cannot be modified."""
        request = ApiRequest("GET", "organizations")
        with pytest.raises(Exception):
            request.url = "users"

    def test_with_url(self):
        """Test copying onto a next-page URL keeps method and headers."""
        request = ApiRequest("GET", "organizations", headers={"X-A": "1"})
        copy = request.with_url(f"{BASE_URL}/organizations?page=2")

        assert copy.method == "GET"
        assert copy.headers == {"X-A": "1"}
        assert copy.url.endswith("page=2")


class TestTransportSend:
    """Tests for Transport.send."""

    @responses.activate
    def test_get_decodes_json(self, transport):
        """Test JSON bodies are decoded and headers exposed case-insensitively."""
        responses.add(
            responses.GET,
            f"{BASE_URL}/organizations/1",
            json={"organization": {"id": 1}},
            headers={"X-Rate-Limit-Remaining": "99"},
        )

        response = transport.send(ApiRequest("GET", "organizations/1"))

        assert isinstance(response, ApiResponse)
        assert response.status_code == 200
        assert response.body == {"organization": {"id": 1}}
        assert response.headers["x-rate-limit-remaining"] == "99"
        assert response.url == f"{BASE_URL}/organizations/1"

    @responses.activate
    def test_auth_and_standard_headers(self, transport):
        """Test API token auth and JSON headers are sent."""
        responses.add(responses.POST, f"{BASE_URL}/organizations", json={}, status=201)

        transport.send(ApiRequest("POST", "organizations", body={"organization": {"name": "Acme"}}))

        sent = responses.calls[0].request
        expected = base64.b64encode(b"agent@acme.com/token:secret-token").decode()
        assert sent.headers["Authorization"] == f"Basic {expected}"
        assert sent.headers["Content-Type"] == "application/json"
        assert sent.headers["Accept"] == "application/json"
        assert sent.headers["User-Agent"] == "tests"
        assert json.loads(sent.body) == {"organization": {"name": "Acme"}}

    @responses.activate
    def test_no_body_no_content_type(self, transport):
        """Test bodiless requests carry no Content-Type."""
        responses.add(responses.GET, f"{BASE_URL}/organizations", json={})

        transport.send(ApiRequest("GET", "organizations"))

        sent = responses.calls[0].request
        assert "Content-Type" not in sent.headers
        assert sent.body is None

    @responses.activate
    def test_error_status_is_returned(self, transport):
        """Test 4xx/5xx come back as envelopes, not exceptions."""
        responses.add(
            responses.GET,
            f"{BASE_URL}/organizations/404",
            json={"error": "RecordNotFound"},
            status=404,
        )

        response = transport.send(ApiRequest("GET", "organizations/404"))

        assert response.status_code == 404
        assert not response.ok
        assert transport.metrics.failed_requests == 1

    @responses.activate
    def test_empty_body(self, transport):
        """Test 204 decodes to None and result to {}."""
        responses.add(responses.DELETE, f"{BASE_URL}/organizations/1", status=204)

        response = transport.send(ApiRequest("DELETE", "organizations/1"))

        assert response.body is None
        assert response.result == {}

    @responses.activate
    def test_non_json_body(self, transport):
        """Test non-JSON bodies are kept as text."""
        responses.add(
            responses.GET,
            f"{BASE_URL}/status",
            body="<html>maintenance</html>",
            status=503,
            content_type="text/html",
        )

        response = transport.send(ApiRequest("GET", "status"))

        assert response.body == "<html>maintenance</html>"

    @responses.activate
    def test_connection_failure(self, transport):
        """Test a missing response raises NetworkError."""
        responses.add(
            responses.GET,
            f"{BASE_URL}/organizations",
            body=requests.exceptions.ConnectionError("reset"),
        )

        with pytest.raises(NetworkError) as exc_info:
            transport.send(ApiRequest("GET", "organizations"))

        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)
        assert transport.metrics.network_errors == 1

    def test_own_session_adapter_makes_one_attempt(self, transport):
        """Test the transport's own session never retries at the adapter."""
        adapter = transport.session.get_adapter(f"{BASE_URL}/organizations")
        assert adapter.max_retries.total == 0

    def test_supplied_session_adapters_kept(self):
        """Test a caller supplied session keeps its mounted adapters."""
        session = requests.Session()
        adapter = HTTPAdapter(pool_maxsize=32)
        session.mount("https://", adapter)

        transport = Transport(BASE_URL, auth=BearerAuth(token="t"), session=session)

        assert transport.session is session
        assert session.get_adapter(f"{BASE_URL}/organizations") is adapter

    @responses.activate
    def test_bearer_auth(self):
        """Test OAuth tokens are sent as Bearer."""
        transport = Transport(BASE_URL, auth=BearerAuth(token="oauth-abc"))
        responses.add(responses.GET, f"{BASE_URL}/users/me", json={})

        transport.send(ApiRequest("GET", "users/me"))

        assert responses.calls[0].request.headers["Authorization"] == "Bearer oauth-abc"


class TestResolveUrl:
    """Tests for URL resolution."""

    def test_relative(self, transport):
        """Test base-relative paths are joined."""
        assert transport.resolve_url("/organizations") == f"{BASE_URL}/organizations"

    def test_absolute_same_host(self, transport):
        """Test next-page URLs on the same host pass through."""
        url = "https://acme.zendesk.com/api/v2/organizations.json?page=2"
        assert transport.resolve_url(url) == url

    def test_foreign_host(self, transport):
        """Test credentials are never sent to another host."""
        with pytest.raises(InvalidPathError):
            transport.resolve_url("https://evil.example.com/api/v2/organizations")
