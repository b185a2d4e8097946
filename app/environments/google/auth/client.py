"""
Google OAuth Client - the provider side of "Sign in with Google".

Implements ProviderClient for Google's authorization code flow:
1. get_authorization_url() → User redirected to Google
2. exchange_code() → Called in the callback, gets an access token
3. fetch_identity() → Fetches the Google account profile

Both network calls carry an explicit timeout (AuthConfig.http_timeout);
a timeout is reported like any other transport failure and is not retried.

References:
===========
- OAuth 2.0: https://developers.google.com/identity/protocols/oauth2
- Token endpoint: https://oauth2.googleapis.com/token
- Userinfo (v2): https://www.googleapis.com/oauth2/v2/userinfo
"""

import logging
from typing import Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from app.core.config import AuthConfig
from app.environments.base import (
    AuthenticationError,
    OAuthTokens,
    ProviderClient,
)
from app.environments.google.auth.schemas import (
    GoogleTokenResponse,
    GoogleUserInfo,
)


logger = logging.getLogger("family_calendar.environments.google.auth")


class GoogleAuthClient(ProviderClient):
    """
    Google OAuth 2.0 Client implementation.

    Example Usage:
        client = GoogleAuthClient(config=settings.auth_config())

        # Step 1: Generate auth URL
        auth_url = client.get_authorization_url(state="random-csrf-token")
        # Redirect user to auth_url

        # Step 2: Handle callback
        tokens = await client.exchange_code(code="abc123")

        # Step 3: Get user info
        user_info = await client.fetch_identity(tokens.access_token)
    """

    # Provider identifier (stored as users.auth_provider)
    provider_name = "google"

    # Google OAuth endpoints
    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

    def __init__(
        self,
        config: AuthConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Google OAuth client.

        Args:
            config: Client credentials, redirect URL, scopes and timeout
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.config = config
        self._transport = transport

        if not config.client_id or not config.client_secret:
            logger.warning(
                "Google OAuth not configured. Set GOOGLE_CLIENT_ID and "
                "GOOGLE_CLIENT_SECRET in environment variables."
            )

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.http_timeout,
            transport=self._transport,
        )

    # -------------------------------------------------------------------------
    # AUTHORIZATION URL
    # -------------------------------------------------------------------------

    def get_authorization_url(self, state: str) -> str:
        """
        Generate the Google OAuth consent URL.

        Args:
            state: CSRF protection token; Google echoes it back unmodified

        Returns:
            Full authorization URL to redirect the user to

        Example:
            url = client.get_authorization_url(state=generate_state_token())
            # Returns: https://accounts.google.com/o/oauth2/auth?...
        """
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_url,
            "response_type": "code",  # Authorization code flow
            "scope": " ".join(self.config.scopes),  # Space-separated scopes
            "state": state,  # CSRF protection
        }

        return f"{self.AUTHORIZATION_URL}?{urlencode(params)}"

    # -------------------------------------------------------------------------
    # TOKEN EXCHANGE
    # -------------------------------------------------------------------------

    async def exchange_code(self, code: str) -> OAuthTokens:
        """
        Exchange an authorization code for an access token.

        Args:
            code: Authorization code from the Google callback

        Returns:
            OAuthTokens with the access token and its expiry

        Raises:
            AuthenticationError: Missing code, network error, timeout,
                                 non-200 response or malformed body
        """
        if not code:
            raise AuthenticationError("Token exchange failed: missing authorization code")

        token_data = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.config.redirect_url,
        }

        logger.info("Exchanging authorization code for tokens")

        async with self._http_client() as client:
            try:
                response = await client.post(self.TOKEN_URL, data=token_data)
            except httpx.HTTPError as e:
                logger.error(f"Network error during token exchange: {e}")
                raise AuthenticationError(f"Network error: {e}") from e

        if response.status_code != 200:
            error_msg = _error_description(response)
            logger.error(f"Token exchange failed: {error_msg}")
            raise AuthenticationError(f"Token exchange failed: {error_msg}")

        try:
            token_response = GoogleTokenResponse(**response.json())
        except (TypeError, ValueError, ValidationError) as e:
            raise AuthenticationError(f"Malformed token response: {e}") from e

        logger.info(
            "Successfully obtained Google tokens",
            extra={
                "expires_in": token_response.expires_in,
                "scopes": token_response.get_scopes_list(),
            }
        )

        return OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            expires_at=token_response.get_expires_at(),
            scopes=token_response.get_scopes_list(),
            extra_data={"id_token": token_response.id_token} if token_response.id_token else None,
        )

    # -------------------------------------------------------------------------
    # USER INFO
    # -------------------------------------------------------------------------

    async def fetch_identity(self, access_token: str) -> GoogleUserInfo:
        """
        Get the signed-in user's profile from Google.

        Args:
            access_token: Access token from exchange_code()

        Returns:
            GoogleUserInfo as sent by Google (id/sub not yet resolved)

        Raises:
            AuthenticationError: Network error, timeout, non-200 response
                                 or malformed body
        """
        logger.info("Fetching user info from Google")

        async with self._http_client() as client:
            try:
                response = await client.get(
                    self.USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
            except httpx.HTTPError as e:
                logger.error(f"Network error fetching user info: {e}")
                raise AuthenticationError(f"Network error: {e}") from e

        if response.status_code != 200:
            logger.error(f"Failed to fetch user info: HTTP {response.status_code}")
            raise AuthenticationError("Failed to fetch user info")

        try:
            google_user = GoogleUserInfo(**response.json())
        except (TypeError, ValueError, ValidationError) as e:
            raise AuthenticationError(f"Malformed user info response: {e}") from e

        logger.info("Successfully fetched Google user info")

        return google_user


def _error_description(response: httpx.Response) -> str:
    """Best-effort error text from a failed token endpoint response."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        return data.get("error_description") or data.get("error") or response.text
    return response.text
