"""Authentication schemes for the Zendesk API.

Supports:
- Basic (email + password)
- API token
- OAuth bearer tokens, static or refreshed
"""

from .credentials import ApiTokenAuth, BasicAuth, BearerAuth
from .oauth2 import OAuth2TokenProvider

__all__ = ["BasicAuth", "ApiTokenAuth", "BearerAuth", "OAuth2TokenProvider"]
