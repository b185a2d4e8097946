"""
Users router - the signed-in user's profile.
All endpoints here require authentication (JWT token in Authorization header).
"""

from fastapi import APIRouter, Depends  # FastAPI components

from app.deps import get_current_user  # Validates the session token and loads the User
from app.models.user import User  # User ORM model
from app.schemas.user import UserInfoResponse  # Pydantic schema for the response

# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/api", tags=["users"])


# ---------------------------------------------------------------------------
# GET /api/userinfo - Get the current user's profile
# ---------------------------------------------------------------------------
@router.get("/userinfo", response_model=UserInfoResponse)
def read_user_info(current_user: User = Depends(get_current_user)):
    """
    Get the currently authenticated user's profile.

    The frontend calls this right after receiving the token from the OAuth
    callback, and on every page load to check the stored token still works.

    Returns:
        UserInfoResponse: id, given_name, family_name, email
        (404 if the user was deleted after the token was issued)
    """
    return current_user
