"""
Tests for bearer-token authentication on /api routes.

These tests verify:
- Each header/token failure returns 401 with its own message
- 401s carry WWW-Authenticate: Bearer and the JSON error envelope
- /api/userinfo returns the signed-in user's profile
"""

from datetime import timedelta

from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.security import create_access_token
from app.models.user import User


class TestBearerAuthentication:
    """Tests for get_current_user_id via GET /api/userinfo."""

    def test_missing_header(self, client: TestClient):
        response = client.get("/api/userinfo")

        assert response.status_code == 401
        assert response.json() == {"error": "Authorization header required"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_wrong_scheme(self, client: TestClient, test_user_token: str):
        response = client.get("/api/userinfo", headers={"Authorization": f"Token {test_user_token}"})

        assert response.status_code == 401
        assert response.json()["error"] == (
            "Invalid authorization header format. Expected: Bearer <token>"
        )

    def test_lowercase_scheme(self, client: TestClient, test_user_token: str):
        response = client.get("/api/userinfo", headers={"Authorization": f"bearer {test_user_token}"})

        assert response.status_code == 401
        assert "Invalid authorization header format" in response.json()["error"]

    def test_extra_parts(self, client: TestClient, test_user_token: str):
        response = client.get(
            "/api/userinfo", headers={"Authorization": f"Bearer {test_user_token} extra"}
        )

        assert response.status_code == 401
        assert "Invalid authorization header format" in response.json()["error"]

    def test_garbage_token(self, client: TestClient):
        response = client.get("/api/userinfo", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired token"

    def test_expired_token(self, client: TestClient, test_user: User, settings: Settings):
        token = create_access_token(test_user.id, settings, expires_delta=timedelta(seconds=-10))

        response = client.get("/api/userinfo", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired token"

    def test_wrong_secret(self, client: TestClient, test_user: User):
        token = jwt.encode(
            {"sub": str(test_user.id), "user_id": test_user.id, "iss": "family-calendar-backend"},
            "some-other-secret",
            algorithm="HS256",
        )

        response = client.get("/api/userinfo", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid or expired token"

    def test_token_without_user_id(self, client: TestClient, settings: Settings):
        token = jwt.encode(
            {"sub": "not-a-number", "iss": settings.JWT_ISSUER},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )

        response = client.get("/api/userinfo", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token claims"


class TestUserInfo:
    """Tests for GET /api/userinfo."""

    def test_returns_profile(self, client: TestClient, test_user: User, auth_headers: dict):
        response = client.get("/api/userinfo", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "id": test_user.id,
            "given_name": "Test",
            "family_name": "User",
            "email": "test@example.com",
        }

    def test_deleted_user(self, client: TestClient, test_user: User, auth_headers: dict, db: Session):
        db.delete(test_user)
        db.commit()

        response = client.get("/api/userinfo", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}
