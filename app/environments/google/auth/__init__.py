"""
Google Auth Module - OAuth 2.0 login with Google.

OAuth 2.0 Flow Overview:
========================
1. User clicks "Sign in with Google" in the app
2. Backend redirects to Google's consent screen with a state token
3. Google redirects back with an authorization code and the same state
4. Backend exchanges the code for an access token
5. Backend fetches the user's profile with that token
"""

from app.environments.google.auth.client import GoogleAuthClient
from app.environments.google.auth.schemas import (
    GoogleTokenResponse,
    GoogleUserInfo,
)

__all__ = [
    "GoogleAuthClient",
    "GoogleTokenResponse",
    "GoogleUserInfo",
]
