"""
Google OAuth Schemas - Data structures for Google authentication.

Using Pydantic models ensures the token and userinfo responses are
validated before the login flow reads them.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# TOKEN RESPONSES
# ---------------------------------------------------------------------------

class GoogleTokenResponse(BaseModel):
    """
    Response from Google's token endpoint.

    Example response from Google:
    {
        "access_token": "ya29.a0AfB_byC...",
        "expires_in": 3599,
        "scope": "https://www.googleapis.com/auth/userinfo.email ...",
        "token_type": "Bearer",
        "id_token": "eyJhbGciOiJSUzI1NiIs..."
    }
    """
    access_token: str = Field(..., description="OAuth access token")
    token_type: str = Field(default="Bearer", description="Token type (usually Bearer)")
    expires_in: Optional[int] = Field(None, description="Seconds until expiration")
    scope: Optional[str] = Field(None, description="Space-separated scopes granted")
    id_token: Optional[str] = Field(None, description="JWT with user info (OpenID)")

    def get_scopes_list(self) -> List[str]:
        """Convert space-separated scope string to list."""
        if self.scope:
            return self.scope.split()
        return []

    def get_expires_at(self) -> Optional[datetime]:
        """Calculate expiration datetime from expires_in seconds."""
        if self.expires_in:
            return datetime.now(timezone.utc) + timedelta(seconds=self.expires_in)
        return None


# ---------------------------------------------------------------------------
# USER INFO
# ---------------------------------------------------------------------------

class GoogleUserInfo(BaseModel):
    """
    User information from Google's userinfo endpoint.

    The v2 endpoint (oauth2/v2/userinfo) returns the account ID as "id";
    the v3 / OpenID endpoint returns it as "sub". Both are optional here so
    either API generation parses; get_user_id() picks one.

    Example (v2):
    {
        "id": "123456789",
        "email": "user@gmail.com",
        "verified_email": true,
        "name": "John Doe",
        "given_name": "John",
        "family_name": "Doe",
        "picture": "https://lh3.googleusercontent.com/a/..."
    }
    """
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = Field(None, description="Unique Google user ID (v2 API)")
    sub: Optional[str] = Field(None, description="Unique Google user ID (v3/OpenID API)")
    email: Optional[str] = Field(None, description="User's email address")
    verified_email: Optional[bool] = Field(None, description="Is email verified?")
    name: Optional[str] = Field(None, description="User's display name")
    given_name: Optional[str] = Field(None, description="First name")
    family_name: Optional[str] = Field(None, description="Last name")
    picture: Optional[str] = Field(None, description="Profile picture URL")

    def get_user_id(self) -> str:
        """
        Return the stable account ID, preferring "id" and falling back to "sub".

        The precedence is relied on by existing users' auth_provider_id rows,
        don't swap it. Returns "" when neither field is populated.
        """
        if self.id:
            return self.id
        return self.sub or ""
