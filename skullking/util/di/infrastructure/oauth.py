"""OAuth infrastructure provider for multi-provider authentication."""

from dishka import Scope, provide

from skullking.adapter.github.client import GitHubOAuthClient
from skullking.adapter.google.client import GoogleOAuthClient
from skullking.domain.service.auth_service import OAuthClient
from skullking.domain.value import AuthProvider
from skullking.util.di.base import ProviderBase


class OAuthAggregatorProvider(ProviderBase):
    """Provider that aggregates all OAuth clients into a dictionary."""

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_oauth_clients(
        self,
        google_oauth_client: GoogleOAuthClient,
        github_oauth_client: GitHubOAuthClient,
    ) -> dict[AuthProvider, OAuthClient]:
        """Provide dictionary of all OAuth clients by provider.

        Args:
            google_oauth_client: Google OAuth client (specific type)
            github_oauth_client: GitHub OAuth client (specific type)

        Returns:
            Dictionary mapping AuthProvider to OAuthClient
        """
        return {
            AuthProvider.GOOGLE: google_oauth_client,
            AuthProvider.GITHUB: github_oauth_client,
        }
