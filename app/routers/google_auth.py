"""
Google Auth Router - "Sign in with Google" endpoints.

Endpoints:
==========
- GET /auth/google          → Redirect to Google OAuth consent screen
- GET /auth/google/login    → Same as above
- GET /auth/google/callback → Handle OAuth callback, hand out a session token

OAuth Flow:
===========
1. Frontend sends the browser to /auth/google?callback=<frontend URL>
2. Backend checks the callback against ALLOWED_CALLBACKS, sets the
   oauth_state (and oauth_callback) cookies and redirects to Google
3. User grants permissions
4. Google redirects to /auth/google/callback with code and state
5. Backend checks state against the cookie, exchanges the code, resolves
   the user and issues a session token
6. Browser is sent to <callback>?token=<jwt>, or shown the token inline

Errors from these endpoints are plain text, not the JSON envelope used
by /api.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from starlette.responses import Response

from app.core.config import AuthConfig
from app.core.templating import TemplateRenderError, render_auth_success
from app.deps import get_oauth_flow
from app.services.oauth_flow import (
    CALLBACK_COOKIE_NAME,
    LOGIN_COOKIE_MAX_AGE,
    STATE_COOKIE_NAME,
    OAuthFlowController,
    OAuthFlowError,
)


logger = logging.getLogger("family_calendar.routers.google_auth")


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/auth/google", tags=["google-auth"])


# ---------------------------------------------------------------------------
# COOKIE HELPERS
# ---------------------------------------------------------------------------
# Set and cleared with identical attributes; browsers only overwrite a
# cookie whose path matches.


def _set_login_cookie(response: Response, name: str, value: str, config: AuthConfig) -> None:
    # Built by hand: response.set_cookie() would wrap a URL value in quotes,
    # and the browser would then store the quotes as part of the value.
    # Values are state tokens (URL-safe base64) or allowlisted callback URLs.
    attributes = [
        f"{name}={value}",
        "HttpOnly",
        f"Max-Age={LOGIN_COOKIE_MAX_AGE}",
        "Path=/",
        "SameSite=lax",
    ]
    if config.use_secure_connections:
        attributes.append("Secure")
    response.headers.append("set-cookie", "; ".join(attributes))


def _clear_login_cookie(response: Response, name: str, config: AuthConfig) -> None:
    response.delete_cookie(
        key=name,
        path="/",
        secure=config.use_secure_connections,
        httponly=True,
        samesite="lax",
    )


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------


@router.get("")
@router.get("/login")
async def google_login(
    callback: Optional[str] = Query(None, description="URL to send the session token to"),
    flow: OAuthFlowController = Depends(get_oauth_flow),
):
    """
    Initiate the Google OAuth login flow.

    Args:
        callback: Optional frontend URL; must be listed in ALLOWED_CALLBACKS

    Returns:
        307 redirect to Google's consent screen, or 403 if the callback
        is not allowed (no cookies are set in that case)
    """
    try:
        login = flow.begin_login(callback)
    except OAuthFlowError as e:
        return PlainTextResponse(e.detail, status_code=e.status_code)

    response = RedirectResponse(url=login.authorization_url, status_code=307)
    _set_login_cookie(response, STATE_COOKIE_NAME, login.state, flow.config)
    if login.callback:
        _set_login_cookie(response, CALLBACK_COOKIE_NAME, login.callback, flow.config)

    return response


@router.get("/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = Query(None, description="Authorization code from Google"),
    state: Optional[str] = Query(None, description="CSRF state token"),
    error: Optional[str] = Query(None, description="Error from Google"),
    flow: OAuthFlowController = Depends(get_oauth_flow),
):
    """
    Handle the Google OAuth callback.

    Flow:
        1. Validate state against the oauth_state cookie (CSRF protection)
        2. Exchange code for tokens and fetch the Google profile
        3. Find or create the user, issue a session token
        4. Clear the login cookies
        5. Redirect to the stored callback with ?token=, or render the token
    """
    if error:
        # The user denied consent; with no code the exchange step fails below
        logger.warning(f"Google OAuth error: {error}")

    callback_cookie = request.cookies.get(CALLBACK_COOKIE_NAME)

    try:
        result = await flow.complete_login(
            state_cookie=request.cookies.get(STATE_COOKIE_NAME),
            state_param=state,
            callback_cookie=callback_cookie,
            code=code,
        )
    except OAuthFlowError as e:
        return PlainTextResponse(e.detail, status_code=e.status_code)

    response: Response
    if result.redirect_url:
        response = RedirectResponse(url=result.redirect_url, status_code=307)
    else:
        try:
            html = render_auth_success(
                token=result.token,
                given_name=result.identity.given_name,
                family_name=result.identity.family_name,
                email=result.identity.email,
            )
            response = HTMLResponse(html)
        except TemplateRenderError as e:
            response = PlainTextResponse(str(e), status_code=500)

    _clear_login_cookie(response, STATE_COOKIE_NAME, flow.config)
    if callback_cookie is not None:
        _clear_login_cookie(response, CALLBACK_COOKIE_NAME, flow.config)

    return response
