"""
Environments Module - External identity provider integrations.

Architecture Overview:
======================
environments/
├── __init__.py           # Module exports
├── base.py               # ProviderClient interface, shared data + errors
└── google/
    └── auth/             # Google OAuth sign-in
        ├── client.py     # Authorization URL, code exchange, userinfo
        └── schemas.py    # Token and userinfo response models
"""

from app.environments.base import (
    AuthenticationError,
    EnvironmentError,
    OAuthTokens,
    ProviderClient,
    ProviderIdentity,
)

__all__ = [
    "AuthenticationError",
    "EnvironmentError",
    "OAuthTokens",
    "ProviderClient",
    "ProviderIdentity",
]
