"""
Base classes and interfaces for identity provider integrations.

The OAuth flow controller never talks to a provider's HTTP API directly; it
receives a ProviderClient and calls exchange_code() and fetch_identity() on
it. Production wires in GoogleAuthClient, tests wire in a fake.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol


# ---------------------------------------------------------------------------
# CUSTOM EXCEPTIONS
# ---------------------------------------------------------------------------
# Specific exceptions for provider operations.
# Routes and the flow controller catch these instead of raw httpx errors.


class EnvironmentError(Exception):
    """Base exception for all provider-related errors."""
    pass


class AuthenticationError(EnvironmentError):
    """Raised when a call to the provider's OAuth endpoints fails."""
    pass


# ---------------------------------------------------------------------------
# DATA STRUCTURES
# ---------------------------------------------------------------------------


@dataclass
class OAuthTokens:
    """
    Token data returned by a provider's token endpoint.

    Only access_token is used by the login flow; the rest is kept for
    logging and for whoever needs it next.
    """
    access_token: str
    token_type: str = "Bearer"
    expires_at: Optional[datetime] = None
    scopes: Optional[List[str]] = None
    extra_data: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class ProviderIdentity:
    """
    A verified identity handed to the identity resolver.

    provider_user_id is the provider's stable subject identifier and is
    always non-empty; the profile fields are informational and may be "".
    """
    provider: str
    provider_user_id: str
    email: str = ""
    given_name: str = ""
    family_name: str = ""


class IdentityPayload(Protocol):
    """Shape of a provider userinfo response as the flow controller reads it."""
    email: Optional[str]
    given_name: Optional[str]
    family_name: Optional[str]

    def get_user_id(self) -> str: ...


# ---------------------------------------------------------------------------
# ABSTRACT BASE CLASSES
# ---------------------------------------------------------------------------


class ProviderClient(ABC):
    """
    Abstract base class for OAuth identity providers.

    Each provider must implement these methods to take part in the login
    flow:
    - Building the authorization (consent) URL
    - Exchanging the authorization code for an access token
    - Fetching the user's identity with that token
    """

    # Unique identifier for this provider (stored as users.auth_provider)
    provider_name: str = ""

    @abstractmethod
    def get_authorization_url(self, state: str) -> str:
        """
        Build the URL the browser is redirected to for consent.

        Args:
            state: CSRF state token; the provider echoes it back unmodified

        Returns:
            Absolute URL of the provider's authorization endpoint
        """
        pass

    @abstractmethod
    async def exchange_code(self, code: str) -> OAuthTokens:
        """
        Exchange an authorization code for tokens.

        Raises:
            AuthenticationError: On transport errors, timeouts or a non-200 answer
        """
        pass

    @abstractmethod
    async def fetch_identity(self, access_token: str) -> IdentityPayload:
        """
        Fetch the raw identity payload for the access token.

        The payload is returned as-is; picking the stable identifier out of
        it (get_user_id) is left to the caller.

        Raises:
            AuthenticationError: On transport errors, timeouts or a non-200 answer
        """
        pass
