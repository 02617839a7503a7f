"""OAuth2 access tokens from Zendesk's ``/oauth/tokens`` endpoint."""

import threading
import time
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from zendesk_client.exceptions import NetworkError, raise_for_response

logger = logging.getLogger(__name__)


@dataclass
class TokenInfo:
    """OAuth2 token information."""

    access_token: str
    token_type: str
    expires_at: Optional[float]
    refresh_token: Optional[str] = None
    scope: Optional[str] = None


class OAuth2TokenProvider:
    """Obtain and refresh OAuth2 access tokens.

    Supports ``client_credentials`` and ``refresh_token`` grants. Zendesk
    tokens without ``expires_in`` never expire and are fetched once.
    """

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        refresh_token: Optional[str] = None,
        scope: Optional[str] = "read write",
        token_expiry_buffer: int = 60,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        """Initialize token provider.

        Args:
            token_url: Token endpoint, e.g. https://acme.zendesk.com/oauth/tokens
            client_id: OAuth client unique identifier
            client_secret: OAuth client secret
            refresh_token: Optional refresh token for the refresh_token grant
            scope: Scope(s) to request
            token_expiry_buffer: Seconds before expiry to trigger refresh
            timeout: Token request timeout in seconds
            session: Optional requests session to reuse
        """
        if not (token_url and client_id and client_secret):
            raise ValueError("token_url, client_id and client_secret are required")
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.scope = scope
        self.token_expiry_buffer = token_expiry_buffer
        self.timeout = timeout
        self.session = session or requests.Session()
        self._token_info: Optional[TokenInfo] = None
        self._lock = threading.Lock()

    def get_access_token(self) -> str:
        """Get valid access token, refreshing if necessary."""
        with self._lock:
            if self._is_token_expired():
                self._request_token(self._grant_payload())
            return self._token_info.access_token

    def _is_token_expired(self) -> bool:
        """Check if current token is missing, expired or about to expire."""
        if self._token_info is None:
            return True
        if self._token_info.expires_at is None:
            return False
        return time.time() >= (self._token_info.expires_at - self.token_expiry_buffer)

    def _grant_payload(self) -> dict:
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        if self.refresh_token:
            logger.info("Refreshing access token via refresh_token grant")
            data["grant_type"] = "refresh_token"
            data["refresh_token"] = self.refresh_token
        else:
            logger.info("Requesting new access token via client_credentials grant")
            data["grant_type"] = "client_credentials"
        if self.scope:
            data["scope"] = self.scope
        return data

    def _request_token(self, data: dict) -> None:
        """Make token request and update token info.

        Raises:
            NetworkError: When the token endpoint gave no response
            ApiError: For a non-2xx token response (401 as AuthenticationError)
        """
        # Imported here: zendesk_client.clients imports config, which imports auth
        from zendesk_client.clients.transport import ApiResponse

        try:
            response = self.session.post(self.token_url, json=data, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(
                "Token request failed without a response",
                extra={"url": self.token_url, "error": str(e)}
            )
            raise NetworkError(
                f"POST {self.token_url} failed: {e}", method="POST", url=self.token_url
            ) from e

        if not response.ok:
            logger.error(
                "Token request rejected",
                extra={"url": self.token_url, "status_code": response.status_code}
            )
            raise_for_response(
                ApiResponse.from_requests(response, method="POST", url=self.token_url)
            )

        token_data = response.json()
        expires_in = token_data.get("expires_in")

        self._token_info = TokenInfo(
            access_token=token_data["access_token"],
            token_type=token_data.get("token_type", "bearer"),
            expires_at=time.time() + expires_in if expires_in else None,
            refresh_token=token_data.get("refresh_token", self.refresh_token),
            scope=token_data.get("scope", self.scope),
        )

        # Zendesk rotates refresh tokens on use
        if token_data.get("refresh_token"):
            self.refresh_token = token_data["refresh_token"]

        logger.info(
            "Token obtained successfully",
            extra={
                "token_type": self._token_info.token_type,
                "expires_in": expires_in,
            }
        )
