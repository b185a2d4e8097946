"""
Tests for GoogleAuthClient.

Google's endpoints are replaced with httpx.MockTransport handlers; no
network access is needed.
"""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.core.config import AuthConfig, GOOGLE_LOGIN_SCOPES
from app.environments.base import AuthenticationError
from app.environments.google import GoogleAuthClient


def make_config(http_timeout: float = 5.0) -> AuthConfig:
    return AuthConfig(
        client_id="client-id",
        client_secret="client-secret",
        redirect_url="http://localhost:8080/auth/google/callback",
        scopes=GOOGLE_LOGIN_SCOPES,
        allowed_callbacks=frozenset(),
        use_secure_connections=True,
        http_timeout=http_timeout,
    )


def make_client(handler) -> GoogleAuthClient:
    return GoogleAuthClient(make_config(), transport=httpx.MockTransport(handler))


class TestAuthorizationUrl:

    def test_contains_oauth_parameters(self):
        client = GoogleAuthClient(make_config())

        url = client.get_authorization_url("state-abc")

        parsed = urlparse(url)
        params = parse_qs(parsed.query)
        assert url.startswith("https://accounts.google.com/o/oauth2")
        assert params["client_id"] == ["client-id"]
        assert params["redirect_uri"] == ["http://localhost:8080/auth/google/callback"]
        assert params["response_type"] == ["code"]
        assert params["state"] == ["state-abc"]
        assert params["scope"] == [" ".join(GOOGLE_LOGIN_SCOPES)]

    def test_warns_when_not_configured(self, caplog):
        config = AuthConfig(
            client_id="",
            client_secret="",
            redirect_url="http://localhost:8080/auth/google/callback",
            scopes=GOOGLE_LOGIN_SCOPES,
            allowed_callbacks=frozenset(),
            use_secure_connections=True,
            http_timeout=5.0,
        )

        GoogleAuthClient(config)

        assert "Google OAuth not configured" in caplog.text


class TestExchangeCode:

    @pytest.mark.asyncio
    async def test_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={
                "access_token": "ya29.token",
                "expires_in": 3599,
                "scope": "email profile",
                "token_type": "Bearer",
            })

        tokens = await make_client(handler).exchange_code("auth-code")

        assert tokens.access_token == "ya29.token"
        assert tokens.scopes == ["email", "profile"]
        assert tokens.expires_at is not None
        assert seen["url"] == GoogleAuthClient.TOKEN_URL
        assert seen["form"]["code"] == ["auth-code"]
        assert seen["form"]["grant_type"] == ["authorization_code"]
        assert seen["form"]["client_secret"] == ["client-secret"]

    @pytest.mark.asyncio
    async def test_empty_code_rejected_without_request(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(AuthenticationError):
            await make_client(handler).exchange_code("")

    @pytest.mark.asyncio
    async def test_error_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={
                "error": "invalid_grant",
                "error_description": "Bad Request",
            })

        with pytest.raises(AuthenticationError, match="Bad Request"):
            await make_client(handler).exchange_code("used-code")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(AuthenticationError, match="Network error"):
            await make_client(handler).exchange_code("code")

    @pytest.mark.asyncio
    async def test_configured_timeout_applied_to_requests(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.extensions["timeout"])
            return httpx.Response(200, json={"access_token": "at", "token_type": "Bearer"})

        client = GoogleAuthClient(make_config(http_timeout=2.5), transport=httpx.MockTransport(handler))
        await client.exchange_code("code")

        assert seen == httpx.Timeout(2.5).as_dict()

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"token_type": "Bearer"})

        with pytest.raises(AuthenticationError, match="Malformed token response"):
            await make_client(handler).exchange_code("code")


class TestFetchIdentity:

    @pytest.mark.asyncio
    async def test_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json={
                "id": "123456789",
                "email": "jane@example.com",
                "verified_email": True,
                "given_name": "Jane",
                "family_name": "Doe",
                "locale": "en",
            })

        user_info = await make_client(handler).fetch_identity("ya29.token")

        assert seen["auth"] == "Bearer ya29.token"
        assert user_info.get_user_id() == "123456789"
        assert user_info.given_name == "Jane"

    @pytest.mark.asyncio
    async def test_sub_only_payload(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"sub": "oidc-42", "email": "a@example.com"})

        user_info = await make_client(handler).fetch_identity("token")

        assert user_info.get_user_id() == "oidc-42"

    @pytest.mark.asyncio
    async def test_unauthorized(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "invalid_token"})

        with pytest.raises(AuthenticationError):
            await make_client(handler).fetch_identity("expired")

    @pytest.mark.asyncio
    async def test_not_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(AuthenticationError, match="Malformed user info response"):
            await make_client(handler).fetch_identity("token")
