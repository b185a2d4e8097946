"""
Auth schemas - Pydantic models for session token payloads.
"""

from pydantic import BaseModel


class TokenPayload(BaseModel):
    """
    Schema for a decoded session token (used internally).

    When we decode a JWT, we get a payload like:
    {
        "sub": "42",
        "user_id": 42,
        "iss": "family-calendar-backend",
        "iat": 1701500000,
        "exp": 1701586400
    }
    """
    # sub: Subject claim - the user's ID as a string
    sub: str | None = None

    # user_id: the same ID as an integer, for clients that read the claims
    user_id: int | None = None

    iss: str | None = None
    iat: int | None = None
    exp: int | None = None

    def get_user_id(self) -> int | None:
        """
        Return the user ID carried by the token.

        Prefers the integer user_id claim and falls back to parsing "sub".
        Returns None if neither yields a positive integer.
        """
        if self.user_id is not None:
            return self.user_id if self.user_id > 0 else None
        if self.sub and self.sub.isdigit():
            value = int(self.sub)
            return value if value > 0 else None
        return None
