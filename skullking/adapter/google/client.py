"""Google OAuth 2.0 client implementation.

Uses the authorization code flow with the OpenID Connect userinfo endpoint.
"""

from urllib.parse import urlencode

import httpx
import logfire

from skullking.adapter.error import OAuthProviderError
from skullking.domain.service.auth_service import OAuthClient
from skullking.domain.value import AuthProvider, ExternalIdentity


class GoogleOAuthClient(OAuthClient):
    """Base class for Google OAuth clients.

    Provides type distinction for dependency injection.
    """

    pass


class RealGoogleOAuthClient(GoogleOAuthClient):
    """Google OAuth 2.0 client."""

    authorize_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    user_info_url = "https://www.googleapis.com/oauth2/v3/userinfo"

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str) -> None:
        """Initialize Google OAuth client.

        Args:
            client_id: Google OAuth client ID
            client_secret: Google OAuth client secret
            redirect_uri: Callback URL registered with Google
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    async def initiate_authorization(self, state: str) -> str:
        """Build the Google consent screen URL.

        Args:
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to
        """
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": "openid email profile",
            "state": state,
            "access_type": "online",
            "prompt": "select_account",
        }
        logfire.info("Google OAuth authorization initiated", redirect_uri=self.redirect_uri)
        return f"{self.authorize_url}?{urlencode(params)}"

    async def complete_authorization(self, code: str, state: str) -> ExternalIdentity:
        """Exchange the code and fetch the Google profile.

        Args:
            code: Authorization code from Google callback
            state: State parameter (verified by the caller)

        Returns:
            Identity reported by Google

        Raises:
            OAuthProviderError: If the exchange or profile request fails
        """
        async with httpx.AsyncClient(timeout=30.0) as client:
            access_token = await self._exchange_code_for_token(client, code)
            profile = await self._get_user_info(client, access_token)

        if not profile.get("sub"):
            raise OAuthProviderError("google", "Profile has no subject ID")

        logfire.info("Google OAuth completed", provider_user_id=profile["sub"])

        email = profile.get("email")
        if email and profile.get("email_verified") is False:
            # Unverified addresses must not drive account merging
            email = None

        return ExternalIdentity(
            provider=AuthProvider.GOOGLE,
            provider_user_id=str(profile["sub"]),
            email=email,
            display_name=profile.get("name"),
            nickname=profile.get("given_name"),
            avatar_url=profile.get("picture"),
        )

    async def _exchange_code_for_token(self, client: httpx.AsyncClient, code: str) -> str:
        data = {
            "code": code,
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
        }
        try:
            response = await client.post(self.token_url, data=data)
        except httpx.HTTPError as e:
            logfire.error("Google token exchange HTTP error", error=str(e))
            raise OAuthProviderError("google", f"HTTP error during token exchange: {e}")

        if response.status_code != 200:
            logfire.error(
                "Google token exchange failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise OAuthProviderError(
                "google", f"Token exchange failed: {response.status_code}"
            )

        return response.json()["access_token"]

    async def _get_user_info(self, client: httpx.AsyncClient, access_token: str) -> dict:
        try:
            response = await client.get(
                self.user_info_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as e:
            logfire.error("Google user info HTTP error", error=str(e))
            raise OAuthProviderError("google", f"HTTP error fetching user info: {e}")

        if response.status_code != 200:
            logfire.error(
                "Google user info request failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise OAuthProviderError(
                "google", f"User info request failed: {response.status_code}"
            )

        return response.json()


class MockGoogleOAuthClient(GoogleOAuthClient):
    """Mock Google OAuth client for testing.

    Returns the identity registered for the callback code, or a fixed
    default identity.
    """

    def __init__(self, default_identity: ExternalIdentity | None = None) -> None:
        self.default_identity = default_identity or ExternalIdentity(
            provider=AuthProvider.GOOGLE,
            provider_user_id="google-mock-123",
            email="mock.player@gmail.com",
            display_name="Mock Player",
            nickname="Mock",
            avatar_url="https://example.com/google-avatar.png",
        )
        self.identities: dict[str, ExternalIdentity] = {}

    def register(self, code: str, identity: ExternalIdentity) -> None:
        """Return ``identity`` when ``code`` is exchanged."""
        self.identities[code] = identity

    async def initiate_authorization(self, state: str) -> str:
        """Return mock authorization URL."""
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state}&mock=true"

    async def complete_authorization(self, code: str, state: str) -> ExternalIdentity:
        """Return the registered or default identity."""
        return self.identities.get(code, self.default_identity)
