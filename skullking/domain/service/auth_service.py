"""Authentication domain service."""

from skullking.domain.error import ValidationError
from skullking.domain.value import AuthProvider, ExternalIdentity

from .base import Service


class OAuthClient:
    """Generic OAuth client interface for all providers."""

    async def initiate_authorization(self, state: str) -> str:
        """Initiate OAuth authorization flow.

        Args:
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to
        """
        raise NotImplementedError

    async def complete_authorization(self, code: str, state: str) -> ExternalIdentity:
        """Complete OAuth authorization flow.

        Args:
            code: Authorization code from OAuth callback
            state: State parameter echoed by the provider

        Returns:
            Identity asserted by the provider
        """
        raise NotImplementedError


class AuthService(Service):
    """Domain service for multi-provider OAuth operations."""

    def __init__(self, oauth_clients: dict[AuthProvider, OAuthClient]) -> None:
        """Initialize auth service.

        Args:
            oauth_clients: Map of provider to OAuth client implementation
        """
        self.oauth_clients = oauth_clients

    def _client_for(self, provider: AuthProvider) -> OAuthClient:
        client = self.oauth_clients.get(provider)
        if not client:
            raise ValidationError(f"Unsupported provider: {provider}")
        return client

    async def initiate_login(self, provider: AuthProvider, state: str) -> str:
        """Build the provider authorization URL.

        Args:
            provider: Authentication provider to use
            state: State parameter for CSRF protection

        Returns:
            Authorization URL to redirect user to

        Raises:
            ValidationError: If provider not supported
        """
        return await self._client_for(provider).initiate_authorization(state)

    async def complete_login(
        self, provider: AuthProvider, code: str, state: str
    ) -> ExternalIdentity:
        """Exchange the callback code for the provider identity.

        Args:
            provider: Authentication provider used
            code: Authorization code from OAuth callback
            state: State parameter from the callback

        Returns:
            Identity asserted by the provider

        Raises:
            ValidationError: If provider not supported
        """
        return await self._client_for(provider).complete_authorization(code, state)
