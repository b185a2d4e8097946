"""
User schemas - Pydantic models for user-related API responses.
"""

from pydantic import BaseModel, ConfigDict


class UserInfoResponse(BaseModel):
    """
    Schema for GET /api/userinfo.

    Example response:
    {
        "id": 123,
        "given_name": "John",
        "family_name": "Doe",
        "email": "john@example.com"
    }

    Email is a plain string: Google accounts without a public email
    come back with an empty one, which EmailStr would reject.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    given_name: str
    family_name: str
    email: str
