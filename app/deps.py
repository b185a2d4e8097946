"""
Dependencies module - reusable FastAPI dependencies for route handlers.

- get_current_user_id: validates the session token on protected /api routes
- get_current_user: the same, plus loading the user row
- get_provider_client / get_oauth_flow: wire the OAuth flow controller

Everything is read from request.app.state, which create_app() fills in, so
tests can build an app from their own Settings and swap the provider client
through app.dependency_overrides.
"""

import logging
from functools import partial
from typing import Optional

from fastapi import Depends, HTTPException, Request, status  # FastAPI components
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials  # Auth header extraction
from jose import JWTError  # JWT decoding errors
from pydantic import ValidationError
from sqlalchemy.orm import Session  # Database session type

from app.core.config import Settings
from app.core.security import create_access_token, decode_access_token
from app.db.session import get_db  # Database session dependency
from app.environments.base import ProviderClient
from app.models.user import User  # User ORM model
from app.services.oauth_flow import OAuthFlowController
from app.services.user_service import find_or_create_user, get_user


logger = logging.getLogger("family_calendar.auth")

# ---------------------------------------------------------------------------
# SECURITY SCHEME
# ---------------------------------------------------------------------------
# HTTPBearer adds the lock icon in Swagger UI for protected endpoints.
# auto_error=False: the header is checked below so each failure gets its
# own message instead of FastAPI's generic one.
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},  # Standard header per RFC 6750
    )


# ---------------------------------------------------------------------------
# APPLICATION STATE
# ---------------------------------------------------------------------------


def get_settings_dep(request: Request) -> Settings:
    """The Settings instance the running app was built from."""
    return request.app.state.settings


def get_provider_client(request: Request) -> ProviderClient:
    """The identity provider client (GoogleAuthClient in production)."""
    return request.app.state.provider_client


def get_oauth_flow(
    settings: Settings = Depends(get_settings_dep),
    provider: ProviderClient = Depends(get_provider_client),
    db: Session = Depends(get_db),
) -> OAuthFlowController:
    """
    Build the flow controller for this request.

    The user resolver is bound to the request's DB session; the token
    issuer to the app's JWT settings.
    """
    return OAuthFlowController(
        config=settings.auth_config(),
        provider=provider,
        resolve_user=partial(find_or_create_user, db),
        issue_token=partial(_issue_token, settings=settings),
    )


def _issue_token(user_id: int, settings: Settings) -> str:
    return create_access_token(user_id, settings)


# ---------------------------------------------------------------------------
# AUTHENTICATION
# ---------------------------------------------------------------------------


def get_current_user_id(
    request: Request,
    _credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings_dep),
) -> int:
    """
    Validate the session token and return the user ID it carries.

    Flow:
        1. Authorization header must be present
        2. It must be exactly "Bearer <token>"
        3. The token must verify (signature, algorithm, issuer, expiry)
        4. It must carry a positive integer user ID

    Raises:
        401 Unauthorized with a specific message for each failed step
    """
    # The raw header is parsed here rather than taken from HTTPBearer, which
    # accepts any casing of "Bearer" and extra spaces
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise _unauthorized("Authorization header required")

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise _unauthorized("Invalid authorization header format. Expected: Bearer <token>")

    try:
        payload = decode_access_token(parts[1], settings)
    except (JWTError, ValidationError) as e:
        logger.info(f"Rejected session token: {e}")
        raise _unauthorized("Invalid or expired token")

    user_id = payload.get_user_id()
    if user_id is None:
        raise _unauthorized("Invalid token claims")

    request.state.user_id = user_id
    return user_id


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    """
    Load the authenticated user.

    Raises:
        404 Not Found: the token is valid but the user row is gone
    """
    user = get_user(db, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user
