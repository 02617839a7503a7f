"""Zendesk credential schemes.

Exactly one scheme is active per client:
- Basic: agent email + password
- API token: ``{email}/token`` as username, token as password
- Bearer: OAuth access token, static or refreshed by a token provider
"""

import base64
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class BasicAuth:
    """HTTP Basic authentication with username and password."""

    scheme = "basic"

    def __init__(self, username: str, password: str):
        if not username:
            raise ValueError("username is required for basic authentication")
        if not password:
            raise ValueError("password is required for basic authentication")
        self.username = username
        self._password = password

        logger.debug("BasicAuth initialized", extra={"username": username})

    def _encode(self, username: str, password: str) -> str:
        raw = f"{username}:{password}".encode("utf-8")
        return base64.b64encode(raw).decode("ascii")

    def get_auth_header(self) -> dict:
        """Get authorization header dict for requests."""
        return {"Authorization": f"Basic {self._encode(self.username, self._password)}"}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(username={self.username!r})"


class ApiTokenAuth(BasicAuth):
    """Basic authentication using an API token.

    Zendesk expects ``{email}/token:{api_token}`` in the Basic credential.
    """

    scheme = "api_token"

    def __init__(self, email: str, token: str):
        if not email:
            raise ValueError("username (email) is required for API token authentication")
        if not token:
            raise ValueError("token is required for API token authentication")
        super().__init__(f"{email}/token", token)
        self.email = email


class BearerAuth:
    """OAuth bearer authentication.

    Either a fixed ``token`` or a ``token_provider`` exposing
    ``get_access_token()`` (see ``OAuth2TokenProvider``).
    """

    scheme = "bearer"

    def __init__(self, token: Optional[str] = None, token_provider=None):
        if bool(token) == bool(token_provider):
            raise ValueError("BearerAuth needs exactly one of token or token_provider")
        self._token = token
        self.token_provider = token_provider

    def get_auth_header(self) -> dict:
        """Get authorization header dict for requests."""
        token = self._token or self.token_provider.get_access_token()
        return {"Authorization": f"Bearer {token}"}

    def __repr__(self) -> str:
        source = "provider" if self.token_provider else "static"
        return f"BearerAuth({source})"
