"""
Google Environment Module - Google account sign-in.

Usage:
======
    from app.environments.google import GoogleAuthClient

    auth_client = GoogleAuthClient(config=settings.auth_config())
    auth_url = auth_client.get_authorization_url(state="...")

    # After callback
    tokens = await auth_client.exchange_code(code)
    user_info = await auth_client.fetch_identity(tokens.access_token)
"""

from app.environments.google.auth import GoogleAuthClient, GoogleUserInfo

__all__ = [
    "GoogleAuthClient",
    "GoogleUserInfo",
]
