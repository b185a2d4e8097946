"""
Security utilities - session token (JWT) creation and verification.

Tokens are the only session state this service hands out: they carry the
application user ID and an expiry, and are verified on every protected
request by app.deps.get_current_user_id. There is no revocation list.
"""

from datetime import datetime, timedelta, timezone  # For token expiration

from jose import jwt  # python-jose library for JWT encoding/decoding

from app.core.config import Settings
from app.schemas.auth import TokenPayload


def create_access_token(
    user_id: int,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed session token for an application user.

    Args:
        user_id: Primary key of the user the token is for
        settings: Application settings (secret, algorithm, issuer, lifetime)
        expires_delta: Optional custom lifetime; defaults to
                       ACCESS_TOKEN_EXPIRE_MINUTES (24 hours)

    Returns:
        A signed JWT string (e.g., "eyJhbGciOiJIUzI1NiIs...")

    JWT payload:
        {"sub": "42", "user_id": 42, "iss": "family-calendar-backend",
         "iat": 1701500000, "exp": 1701586400}

    Security notes:
        - The payload is NOT encrypted, just base64 encoded (anyone can read it)
        - The signature proves the token wasn't tampered with
        - Only someone with JWT_SECRET can create valid signatures
    """
    # Always use UTC to avoid timezone issues
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta
        if expires_delta
        else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    to_encode = {
        "sub": str(user_id),
        "user_id": user_id,
        "iss": settings.JWT_ISSUER,
        "iat": now,
        "exp": expire,
    }

    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> TokenPayload:
    """
    Verify a session token and return its claims.

    jwt.decode checks the signature, rejects any algorithm other than the
    configured one (so "none" and RS/HS confusion are refused) and rejects
    expired tokens.

    Raises:
        jose.JWTError: If the token is malformed, tampered with or expired
        pydantic.ValidationError: If the claims don't have the expected shape
    """
    payload = jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        issuer=settings.JWT_ISSUER,
    )
    return TokenPayload(**payload)
