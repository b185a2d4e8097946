"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test settings (SQLite in-memory, fixed JWT secret, one allowed callback)
- The application built by create_app() and its TestClient
- A fake identity provider swapped in through app.dependency_overrides
- Authentication helpers
"""

from http.cookies import Morsel, SimpleCookie
from typing import Generator, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.security import create_access_token
from app.deps import get_provider_client
from app.environments.base import AuthenticationError, OAuthTokens, ProviderClient
from app.environments.google.auth.schemas import GoogleUserInfo
from app.main import create_app
from app.models.user import User


ALLOWED_CALLBACK = "http://localhost:3000/auth/callback"
TEST_JWT_SECRET = "test-secret-key-for-unit-tests"


# ---------------------------------------------------------------------------
# FAKE PROVIDER
# ---------------------------------------------------------------------------


class FakeProviderClient(ProviderClient):
    """
    In-memory stand-in for GoogleAuthClient.

    Set exchange_error / identity_error to make a step fail, or replace
    identity to change what the "provider" reports.
    """

    provider_name = "google"

    def __init__(self):
        self.identity = GoogleUserInfo(
            id="google-123",
            email="jane@example.com",
            given_name="Jane",
            family_name="Doe",
        )
        self.exchange_error: Optional[Exception] = None
        self.identity_error: Optional[Exception] = None
        self.exchanged_codes: list[str] = []
        self.identity_requests: list[str] = []

    def get_authorization_url(self, state: str) -> str:
        return f"https://accounts.google.com/o/oauth2/auth?client_id=test-client-id&state={state}"

    async def exchange_code(self, code: str) -> OAuthTokens:
        self.exchanged_codes.append(code)
        if self.exchange_error is not None:
            raise self.exchange_error
        if not code:
            raise AuthenticationError("missing authorization code")
        return OAuthTokens(access_token=f"access-for-{code}")

    async def fetch_identity(self, access_token: str) -> GoogleUserInfo:
        self.identity_requests.append(access_token)
        if self.identity_error is not None:
            raise self.identity_error
        return self.identity


# ---------------------------------------------------------------------------
# APPLICATION FIXTURES
# ---------------------------------------------------------------------------


def make_settings(**overrides) -> Settings:
    """Settings for tests; the environment and any .env file are ignored for these keys."""
    values = {
        "JWT_SECRET": TEST_JWT_SECRET,
        "DB_TYPE": "sqlite",
        "SQLITE_PATH": ":memory:",
        "GOOGLE_CLIENT_ID": "test-client-id",
        "GOOGLE_CLIENT_SECRET": "test-client-secret",
        "GOOGLE_REDIRECT_URL": "http://localhost:8080/auth/google/callback",
        "ALLOWED_CALLBACKS": ALLOWED_CALLBACK,
        "USE_SECURE_CONNECTIONS": True,
        "LOG_LEVEL": "INFO",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings) -> Generator[FastAPI, None, None]:
    """A fresh application with its own in-memory database."""
    application = create_app(settings)
    yield application
    application.dependency_overrides.clear()
    application.state.engine.dispose()


@pytest.fixture
def fake_provider() -> FakeProviderClient:
    return FakeProviderClient()


@pytest.fixture
def client(app: FastAPI, fake_provider: FakeProviderClient) -> Generator[TestClient, None, None]:
    """
    Test client with the fake provider wired in.

    Redirects are not followed so tests can inspect the 307s.
    """
    app.dependency_overrides[get_provider_client] = lambda: fake_provider

    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture
def db(app: FastAPI) -> Generator[Session, None, None]:
    """A session on the same in-memory database the app uses."""
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


# ---------------------------------------------------------------------------
# USER FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def test_user(db: Session) -> User:
    """A user who signed in with Google before."""
    user = User(
        auth_provider="google",
        auth_provider_id="google-existing",
        given_name="Test",
        family_name="User",
        email="test@example.com",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def other_user(db: Session) -> User:
    user = User(
        auth_provider="google",
        auth_provider_id="google-other",
        given_name="Other",
        family_name="Person",
        email="other@example.com",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user_token(test_user: User, settings: Settings) -> str:
    return create_access_token(test_user.id, settings)


@pytest.fixture
def auth_headers(test_user_token: str) -> dict:
    """Authorization header with the test user's session token."""
    return {"Authorization": f"Bearer {test_user_token}"}


# ---------------------------------------------------------------------------
# COOKIE HELPERS
# ---------------------------------------------------------------------------


def parse_set_cookies(response) -> dict[str, Morsel]:
    """
    Parse every Set-Cookie header of a response.

    The client's cookie jar drops expired cookies, so cleared cookies
    are only visible in the raw headers.
    """
    cookies: dict[str, Morsel] = {}
    for header in response.headers.get_list("set-cookie"):
        jar = SimpleCookie()
        jar.load(header)
        cookies.update(jar)
    return cookies


def cookie_header(**cookies: str) -> dict:
    """Build a Cookie request header."""
    return {"Cookie": "; ".join(f"{name}={value}" for name, value in cookies.items())}
