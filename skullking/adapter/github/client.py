"""GitHub OAuth 2.0 client implementation."""

from urllib.parse import urlencode

import httpx
import logfire

from skullking.adapter.error import OAuthProviderError
from skullking.domain.service.auth_service import OAuthClient
from skullking.domain.value import AuthProvider, ExternalIdentity


class GitHubOAuthClient(OAuthClient):
    """Base class for GitHub OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealGitHubOAuthClient(GitHubOAuthClient):
    """GitHub OAuth 2.0 client (OAuth App flow)."""

    authorize_url = "https://github.com/login/oauth/authorize"
    token_url = "https://github.com/login/oauth/access_token"
    user_url = "https://api.github.com/user"
    emails_url = "https://api.github.com/user/emails"

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str) -> None:
        """Initialize GitHub OAuth client.

        Args:
            client_id: GitHub OAuth App client ID
            client_secret: GitHub OAuth App client secret
            redirect_uri: Callback URL registered with GitHub
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    async def initiate_authorization(self, state: str) -> str:
        """Build the GitHub authorization URL.

        Args:
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": "read:user user:email",
            "state": state,
        }
        logfire.info("GitHub OAuth authorization initiated", redirect_uri=self.redirect_uri)
        return f"{self.authorize_url}?{urlencode(params)}"

    async def complete_authorization(self, code: str, state: str) -> ExternalIdentity:
        """Exchange the code and fetch the GitHub profile.

        GitHub omits the email from the profile when the user keeps it
        private; the primary verified address is then read from the emails
        endpoint.

        Args:
            code: Authorization code from GitHub callback
            state: State parameter (verified by the caller)

        Returns:
            Identity reported by GitHub

        Raises:
            OAuthProviderError: If the exchange or profile request fails
        """
        async with httpx.AsyncClient(timeout=30.0) as client:
            access_token = await self._exchange_code_for_token(client, code, state)
            headers = {
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/vnd.github+json",
            }
            profile = await self._get_json(client, self.user_url, headers)
            email = profile.get("email")
            if not email:
                email = await self._get_primary_email(client, headers)

        if profile.get("id") is None:
            raise OAuthProviderError("github", "Profile has no user ID")

        logfire.info(
            "GitHub OAuth completed",
            provider_user_id=profile["id"],
            login=profile.get("login"),
        )

        return ExternalIdentity(
            provider=AuthProvider.GITHUB,
            provider_user_id=str(profile["id"]),
            email=email,
            display_name=profile.get("name"),
            nickname=profile.get("login"),
            avatar_url=profile.get("avatar_url"),
        )

    async def _exchange_code_for_token(
        self, client: httpx.AsyncClient, code: str, state: str
    ) -> str:
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "redirect_uri": self.redirect_uri,
            "state": state,
        }
        try:
            response = await client.post(
                self.token_url, data=data, headers={"Accept": "application/json"}
            )
        except httpx.HTTPError as e:
            logfire.error("GitHub token exchange HTTP error", error=str(e))
            raise OAuthProviderError("github", f"HTTP error during token exchange: {e}")

        if response.status_code != 200:
            logfire.error(
                "GitHub token exchange failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise OAuthProviderError(
                "github", f"Token exchange failed: {response.status_code}"
            )

        # GitHub reports exchange errors with a 200 and an error body
        token_data = response.json()
        if "access_token" not in token_data:
            logfire.error("GitHub token exchange rejected", error=token_data.get("error"))
            raise OAuthProviderError(
                "github", f"Token exchange rejected: {token_data.get('error')}"
            )

        return token_data["access_token"]

    async def _get_json(
        self, client: httpx.AsyncClient, url: str, headers: dict[str, str]
    ):
        try:
            response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logfire.error("GitHub API HTTP error", url=url, error=str(e))
            raise OAuthProviderError("github", f"HTTP error calling {url}: {e}")

        if response.status_code != 200:
            logfire.error(
                "GitHub API request failed",
                url=url,
                status_code=response.status_code,
                error=response.text,
            )
            raise OAuthProviderError(
                "github", f"Request to {url} failed: {response.status_code}"
            )

        return response.json()

    async def _get_primary_email(
        self, client: httpx.AsyncClient, headers: dict[str, str]
    ) -> str | None:
        emails = await self._get_json(client, self.emails_url, headers)
        for entry in emails:
            if entry.get("primary") and entry.get("verified"):
                return entry.get("email")
        return None


class MockGitHubOAuthClient(GitHubOAuthClient):
    """Mock GitHub OAuth client for testing.

    Returns the identity registered for the callback code, or a fixed
    default identity.
    """

    def __init__(self, default_identity: ExternalIdentity | None = None) -> None:
        self.default_identity = default_identity or ExternalIdentity(
            provider=AuthProvider.GITHUB,
            provider_user_id="4242",
            email="mock.player@users.noreply.github.com",
            display_name="Mock Player",
            nickname="mockplayer",
            avatar_url="https://example.com/github-avatar.png",
        )
        self.identities: dict[str, ExternalIdentity] = {}

    def register(self, code: str, identity: ExternalIdentity) -> None:
        """Return ``identity`` when ``code`` is exchanged."""
        self.identities[code] = identity

    async def initiate_authorization(self, state: str) -> str:
        """Return mock authorization URL."""
        return f"https://github.com/login/oauth/authorize?state={state}&mock=true"

    async def complete_authorization(self, code: str, state: str) -> ExternalIdentity:
        """Return the registered or default identity."""
        return self.identities.get(code, self.default_identity)
