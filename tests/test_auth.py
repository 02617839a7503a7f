"""Tests for authentication schemes."""

import base64
import json

import pytest
import requests
import responses

from zendesk_client.auth import ApiTokenAuth, BasicAuth, BearerAuth, OAuth2TokenProvider
from zendesk_client.clients.base import ResourceClient
from zendesk_client.config import ClientConfig
from zendesk_client.exceptions import AuthenticationError, NetworkError

from conftest import BASE_URL

TOKEN_URL = "https://acme.zendesk.com/oauth/tokens"


class TestCredentials:
    """Tests for header-producing schemes."""

    def test_basic(self):
        """Test basic auth header."""
        header = BasicAuth("a@acme.com", "pw").get_auth_header()
        assert header == {"Authorization": "Basic " + base64.b64encode(b"a@acme.com:pw").decode()}

    def test_api_token(self):
        """Test API token header uses the /token suffix."""
        header = ApiTokenAuth("a@acme.com", "t").get_auth_header()
        assert header == {"Authorization": "Basic " + base64.b64encode(b"a@acme.com/token:t").decode()}

    def test_repr_hides_secret(self):
        """Test passwords are not in repr."""
        assert "pw" not in repr(BasicAuth("a@acme.com", "pw"))

    def test_bearer_requires_one_source(self):
        """Test bearer auth needs a token or a provider, not both."""
        with pytest.raises(ValueError):
            BearerAuth()
        with pytest.raises(ValueError):
            BearerAuth(token="a", token_provider=object())


class TestOAuth2TokenProvider:
    """Tests for OAuth token retrieval."""

    @responses.activate
    def test_client_credentials_cached(self):
        """Test the token is requested once and reused."""
        responses.add(
            responses.POST,
            TOKEN_URL,
            json={"access_token": "tok-1", "token_type": "bearer", "expires_in": 3600},
        )
        provider = OAuth2TokenProvider(TOKEN_URL, "client", "secret")
        auth = BearerAuth(token_provider=provider)

        assert auth.get_auth_header() == {"Authorization": "Bearer tok-1"}
        assert auth.get_auth_header() == {"Authorization": "Bearer tok-1"}
        assert len(responses.calls) == 1
        sent = json.loads(responses.calls[0].request.body)
        assert sent["grant_type"] == "client_credentials"

    @responses.activate
    def test_refresh_token_rotation(self):
        """Test expired tokens are refreshed and refresh tokens rotated."""
        responses.add(
            responses.POST,
            TOKEN_URL,
            json={"access_token": "tok-1", "expires_in": 1, "refresh_token": "r2"},
        )
        responses.add(
            responses.POST,
            TOKEN_URL,
            json={"access_token": "tok-2", "expires_in": 3600, "refresh_token": "r3"},
        )
        provider = OAuth2TokenProvider(TOKEN_URL, "client", "secret", refresh_token="r1")

        assert provider.get_access_token() == "tok-1"
        assert provider.get_access_token() == "tok-2"
        assert provider.refresh_token == "r3"
        second = json.loads(responses.calls[1].request.body)
        assert second["grant_type"] == "refresh_token"
        assert second["refresh_token"] == "r2"

    @responses.activate
    def test_non_expiring_token(self):
        """Test tokens without expires_in are fetched once."""
        responses.add(responses.POST, TOKEN_URL, json={"access_token": "forever"})
        provider = OAuth2TokenProvider(TOKEN_URL, "client", "secret")

        provider.get_access_token()
        provider.get_access_token()

        assert len(responses.calls) == 1

    def test_required_fields(self):
        """Test missing client settings are rejected."""
        with pytest.raises(ValueError):
            OAuth2TokenProvider(TOKEN_URL, "", "secret")

    @responses.activate
    def test_rejected_token_request(self):
        """Test a 401 from the token endpoint raises AuthenticationError."""
        responses.add(
            responses.POST,
            TOKEN_URL,
            status=401,
            json={"error": "invalid_client", "error_description": "Client authentication failed"},
        )
        provider = OAuth2TokenProvider(TOKEN_URL, "client", "wrong")

        with pytest.raises(AuthenticationError) as exc_info:
            provider.get_access_token()

        assert exc_info.value.status_code == 401
        assert exc_info.value.error == "invalid_client"

    @responses.activate
    def test_token_endpoint_unreachable(self):
        """Test a token request without a response raises NetworkError."""
        responses.add(
            responses.POST,
            TOKEN_URL,
            body=requests.exceptions.ConnectionError("reset"),
        )
        provider = OAuth2TokenProvider(TOKEN_URL, "client", "secret")

        with pytest.raises(NetworkError) as exc_info:
            provider.get_access_token()

        assert exc_info.value.url == TOKEN_URL
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)


class TestTokenProviderThroughClient:
    """Tests for token failures surfacing from client calls."""

    @pytest.fixture
    def core(self):
        provider = OAuth2TokenProvider(TOKEN_URL, "client", "secret")
        client = ResourceClient(ClientConfig(subdomain="acme", token_provider=provider))
        yield client
        client.close()

    @responses.activate
    def test_rejected_token_fails_call(self, core):
        """Test a rejected token request surfaces as AuthenticationError."""
        responses.add(responses.POST, TOKEN_URL, status=401, json={"error": "invalid_client"})
        responses.add(responses.GET, f"{BASE_URL}/organizations", json={"organizations": []})

        with pytest.raises(AuthenticationError):
            core.get(["organizations"])

        assert [call.request.url for call in responses.calls] == [TOKEN_URL]

    @responses.activate
    def test_unreachable_token_endpoint_fails_call(self, core):
        """Test a token request without a response surfaces as NetworkError."""
        responses.add(
            responses.POST,
            TOKEN_URL,
            body=requests.exceptions.ConnectionError("reset"),
        )

        with pytest.raises(NetworkError):
            core.get(["organizations"])

    @responses.activate
    def test_token_is_sent_as_bearer(self, core):
        """Test a fetched token authorizes the API call."""
        responses.add(responses.POST, TOKEN_URL, json={"access_token": "tok-1"})
        responses.add(responses.GET, f"{BASE_URL}/organizations", json={"organizations": []})

        core.get(["organizations"])

        assert responses.calls[1].request.headers["Authorization"] == "Bearer tok-1"
