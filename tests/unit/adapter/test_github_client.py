"""Unit tests for the GitHub OAuth clients."""

from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from skullking.adapter.error import OAuthProviderError
from skullking.adapter.github.client import (
    MockGitHubOAuthClient,
    RealGitHubOAuthClient,
)
from skullking.domain.value import AuthProvider


@pytest.fixture
def oauth_client() -> RealGitHubOAuthClient:
    return RealGitHubOAuthClient(
        client_id="github-client-id",
        client_secret="github-client-secret",
        redirect_uri="http://localhost:8000/api/auth/github/callback",
    )


class TestRealGitHubOAuthClient:
    """Tests for RealGitHubOAuthClient."""

    @pytest.mark.asyncio
    async def test_authorization_url(self, oauth_client: RealGitHubOAuthClient):
        url = await oauth_client.initiate_authorization("state-abc")

        parsed = urlparse(url)
        params = parse_qs(parsed.query)
        assert parsed.netloc == "github.com"
        assert parsed.path == "/login/oauth/authorize"
        assert params["client_id"] == ["github-client-id"]
        assert params["scope"] == ["read:user user:email"]
        assert params["state"] == ["state-abc"]

    @pytest.mark.asyncio
    async def test_complete_maps_profile(self, oauth_client: RealGitHubOAuthClient):
        """Numeric IDs become strings and the login is the nickname."""
        # Arrange
        profile = {
            "id": 583231,
            "login": "octocat",
            "name": "The Octocat",
            "email": "octocat@github.com",
            "avatar_url": "https://avatars.githubusercontent.com/u/583231",
        }

        # Act
        with (
            patch.object(
                oauth_client, "_exchange_code_for_token", new_callable=AsyncMock
            ) as mock_exchange,
            patch.object(oauth_client, "_get_json", new_callable=AsyncMock) as mock_get,
        ):
            mock_exchange.return_value = "access-token"
            mock_get.return_value = profile

            identity = await oauth_client.complete_authorization("code", "state")

        # Assert
        assert identity.provider == AuthProvider.GITHUB
        assert identity.provider_user_id == "583231"
        assert identity.nickname == "octocat"
        assert identity.display_name == "The Octocat"
        assert identity.email == "octocat@github.com"
        mock_get.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_private_email_read_from_emails_endpoint(
        self, oauth_client: RealGitHubOAuthClient
    ):
        """Should fall back to the primary verified address."""
        # Arrange
        responses = [
            {"id": 1, "login": "octocat", "email": None},
            [
                {"email": "old@example.com", "primary": False, "verified": True},
                {"email": "unverified@example.com", "primary": True, "verified": False},
                {"email": "main@example.com", "primary": True, "verified": True},
            ],
        ]

        # Act
        with (
            patch.object(
                oauth_client, "_exchange_code_for_token", new_callable=AsyncMock
            ) as mock_exchange,
            patch.object(oauth_client, "_get_json", new_callable=AsyncMock) as mock_get,
        ):
            mock_exchange.return_value = "access-token"
            mock_get.side_effect = responses

            identity = await oauth_client.complete_authorization("code", "state")

        # Assert
        assert identity.email == "main@example.com"
        assert mock_get.await_count == 2

    @pytest.mark.asyncio
    async def test_no_verified_email(self, oauth_client: RealGitHubOAuthClient):
        with (
            patch.object(
                oauth_client, "_exchange_code_for_token", new_callable=AsyncMock
            ) as mock_exchange,
            patch.object(oauth_client, "_get_json", new_callable=AsyncMock) as mock_get,
        ):
            mock_exchange.return_value = "access-token"
            mock_get.side_effect = [{"id": 1, "login": "octocat"}, []]

            identity = await oauth_client.complete_authorization("code", "state")

        assert identity.email is None

    @pytest.mark.asyncio
    async def test_error_body_with_200_is_rejected(
        self, oauth_client: RealGitHubOAuthClient
    ):
        """GitHub reports a bad code as 200 with an error field."""

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["accept"] == "application/json"
            return httpx.Response(200, json={"error": "bad_verification_code"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(OAuthProviderError, match="bad_verification_code"):
                await oauth_client._exchange_code_for_token(client, "code", "state")

    @pytest.mark.asyncio
    async def test_api_failure(self, oauth_client: RealGitHubOAuthClient):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "Bad credentials"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(OAuthProviderError, match="401"):
                await oauth_client._get_json(client, oauth_client.user_url, {})


class TestMockGitHubOAuthClient:
    """Tests for MockGitHubOAuthClient."""

    @pytest.mark.asyncio
    async def test_default_identity(self):
        identity = await MockGitHubOAuthClient().complete_authorization("any", "s")

        assert identity.provider == AuthProvider.GITHUB
        assert identity.provider_user_id == "4242"
        assert identity.nickname == "mockplayer"
