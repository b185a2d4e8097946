"""
OAuth Flow Service - the two-phase "Sign in with Google" state machine.

Per login attempt:  Idle → Initiated → (provider consent) → Completed

begin_login():
    1. Reject a supplied callback URL unless it is exactly on the allowlist
    2. Generate a fresh state token
    3. Return the provider URL (with state embedded) plus what the router
       must store in the short-lived oauth_state / oauth_callback cookies

complete_login():
    1. State cookie must exist                       → else 400
    2. ?state= must equal the cookie, byte for byte  → else 400
    3. Exchange ?code= for a provider access token   → else 500
    4. Fetch the provider identity                   → else 500
    5. Pick the stable account ID ("id", then "sub") → else 500
    6. Resolve it to an application user             → else 500
    7. Issue a session token for that user           → else 500

The controller keeps no state of its own: a login attempt lives only in the
browser's cookies, and everything else (config, provider client, resolver,
token issuer) is injected. Nothing is retried; a failed attempt has to start
again from begin_login().
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional

from app.core.config import AuthConfig
from app.environments.base import ProviderClient, ProviderIdentity
from app.models.user import User


logger = logging.getLogger("family_calendar.services.oauth_flow")


# Cookie names shared by the login and callback endpoints
STATE_COOKIE_NAME = "oauth_state"
CALLBACK_COOKIE_NAME = "oauth_callback"

# Both cookies only need to survive the round trip to the consent screen
LOGIN_COOKIE_MAX_AGE = 300  # 5 minutes

# 32 random bytes → 43 URL-safe characters
STATE_TOKEN_BYTES = 32


# ---------------------------------------------------------------------------
# ERRORS
# ---------------------------------------------------------------------------
# Each error carries the HTTP status and the short message the client sees.
# Anything more detailed goes to the server log only.


class OAuthFlowError(Exception):
    """Base class for login flow failures."""

    status_code = 500
    detail = "Authentication failed"

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class CallbackNotAllowedError(OAuthFlowError):
    status_code = 403
    detail = "callback URL is not allowed"


class StateCookieMissingError(OAuthFlowError):
    status_code = 400
    detail = "State cookie not found"


class InvalidStateError(OAuthFlowError):
    status_code = 400
    detail = "Invalid state parameter"


class TokenExchangeError(OAuthFlowError):
    detail = "Failed to exchange token"


class UserInfoError(OAuthFlowError):
    detail = "Failed to get user info"


class InvalidUserInfoError(OAuthFlowError):
    detail = "Invalid user info from provider"


class UserResolutionError(OAuthFlowError):
    detail = "Failed to process user"


class TokenIssueError(OAuthFlowError):
    detail = "Failed to generate token"


# ---------------------------------------------------------------------------
# RESULTS
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoginRedirect:
    """Outcome of begin_login(): where to send the browser and what to remember."""
    authorization_url: str
    state: str
    callback: Optional[str] = None


@dataclass(frozen=True)
class LoginResult:
    """Outcome of a completed login."""
    token: str
    user_id: int
    identity: ProviderIdentity
    callback: Optional[str] = None

    @property
    def redirect_url(self) -> Optional[str]:
        """Where to send the token, or None to render the inline page."""
        if not self.callback:
            return None
        return f"{self.callback}?token={self.token}"


# Collaborator signatures
UserResolver = Callable[[str, str, str, str, str], User]
TokenIssuer = Callable[[int], str]


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------


def generate_state_token() -> str:
    """
    Generate a one-time CSRF state token.

    32 bytes from the OS CSPRNG, URL-safe base64 without padding, so the
    value can sit in a cookie and a query string unchanged.
    """
    return secrets.token_urlsafe(STATE_TOKEN_BYTES)


def is_callback_allowed(callback: str, allowed_callbacks: frozenset[str]) -> bool:
    """
    Check a post-login redirect target against the allowlist.

    Exact string equality only: no prefix, origin or normalisation rules,
    so "https://app.example.com/cb?x=1" does not match "https://app.example.com/cb".
    """
    return callback in allowed_callbacks


def states_match(expected: str, received: Optional[str]) -> bool:
    """Constant-time comparison of the state cookie and the ?state= value."""
    if received is None:
        return False
    return secrets.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))


# ---------------------------------------------------------------------------
# CONTROLLER
# ---------------------------------------------------------------------------


class OAuthFlowController:
    """
    Drives one provider login from consent redirect to session token.

    Usage:
        controller = OAuthFlowController(
            config=settings.auth_config(),
            provider=GoogleAuthClient(settings.auth_config()),
            resolve_user=lambda *identity: find_or_create_user(db, *identity),
            issue_token=lambda user_id: create_access_token(user_id, settings),
        )

        redirect = controller.begin_login(callback="http://localhost:3000/auth/callback")
        ...
        result = await controller.complete_login(state_cookie, state, callback_cookie, code)
    """

    def __init__(
        self,
        config: AuthConfig,
        provider: ProviderClient,
        resolve_user: UserResolver,
        issue_token: TokenIssuer,
    ):
        self.config = config
        self.provider = provider
        self.resolve_user = resolve_user
        self.issue_token = issue_token

    # -------------------------------------------------------------------------
    # INITIATE
    # -------------------------------------------------------------------------

    def begin_login(self, callback: Optional[str] = None) -> LoginRedirect:
        """
        Start a login attempt.

        Args:
            callback: Optional URL to send the session token to afterwards

        Returns:
            LoginRedirect with the provider URL, the new state token and the
            accepted callback (None when none was requested)

        Raises:
            CallbackNotAllowedError: callback given but not on the allowlist
        """
        if callback:
            if not is_callback_allowed(callback, self.config.allowed_callbacks):
                logger.warning(f"Rejected login with non-allowlisted callback: {callback!r}")
                raise CallbackNotAllowedError()
        else:
            callback = None

        state = generate_state_token()
        authorization_url = self.provider.get_authorization_url(state)

        logger.info(
            "Initiating OAuth login",
            extra={"provider": self.config.provider_name, "has_callback": callback is not None},
        )

        return LoginRedirect(
            authorization_url=authorization_url,
            state=state,
            callback=callback,
        )

    # -------------------------------------------------------------------------
    # COMPLETE
    # -------------------------------------------------------------------------

    async def complete_login(
        self,
        state_cookie: Optional[str],
        state_param: Optional[str],
        callback_cookie: Optional[str],
        code: Optional[str],
    ) -> LoginResult:
        """
        Finish a login attempt started by begin_login().

        Args:
            state_cookie: Value of the oauth_state cookie (None if absent)
            state_param: The ?state= query parameter echoed by the provider
            callback_cookie: Value of the oauth_callback cookie (None if absent)
            code: The ?code= authorization code

        Returns:
            LoginResult with the session token and the resolved identity

        Raises:
            StateCookieMissingError, InvalidStateError: client errors (400)
            TokenExchangeError, UserInfoError, InvalidUserInfoError,
            UserResolutionError, TokenIssueError: upstream errors (500)
        """
        # Step 1-2: CSRF check
        if not state_cookie:
            logger.warning("OAuth callback without state cookie")
            raise StateCookieMissingError()

        if not states_match(state_cookie, state_param):
            logger.warning("OAuth callback state mismatch")
            raise InvalidStateError()

        # Step 3: optional callback (absent → inline page)
        callback = callback_cookie or None

        # Step 4: code → access token
        try:
            tokens = await self.provider.exchange_code(code or "")
        except Exception as e:
            logger.error(f"Failed to exchange token: {e}")
            raise TokenExchangeError() from e

        # Step 5: access token → identity
        try:
            user_info = await self.provider.fetch_identity(tokens.access_token)
        except Exception as e:
            logger.error(f"Failed to get user info: {e}")
            raise UserInfoError() from e

        # Step 6: stable identifier ("id" wins over "sub")
        provider_user_id = user_info.get_user_id()
        if not provider_user_id:
            logger.error("Provider user info missing both id and sub fields")
            raise InvalidUserInfoError()

        identity = ProviderIdentity(
            provider=self.config.provider_name,
            provider_user_id=provider_user_id,
            email=user_info.email or "",
            given_name=user_info.given_name or "",
            family_name=user_info.family_name or "",
        )

        # Step 7: identity → application user (create or refresh)
        try:
            user = self.resolve_user(
                identity.provider,
                identity.provider_user_id,
                identity.given_name,
                identity.family_name,
                identity.email,
            )
        except Exception as e:
            logger.error(f"Failed to find or create user: {e}")
            raise UserResolutionError() from e

        # Step 8: session token
        try:
            token = self.issue_token(user.id)
        except Exception as e:
            logger.error(f"Failed to generate JWT for user {user.id}: {e}")
            raise TokenIssueError() from e

        logger.info(
            f"OAuth login completed for user {user.id}",
            extra={"provider": identity.provider, "has_callback": callback is not None},
        )

        return LoginResult(
            token=token,
            user_id=user.id,
            identity=identity,
            callback=callback,
        )
