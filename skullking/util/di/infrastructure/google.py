"""Google infrastructure providers."""

from dishka import Scope, provide

from skullking.adapter.google.client import GoogleOAuthClient, RealGoogleOAuthClient
from skullking.config import Settings
from skullking.util.di.base import ProviderBase
from skullking.util.error import ConfigurationError


class GoogleProvider(ProviderBase):
    """Google component base."""

    __mock_component__ = "google"


class ProdGoogleProvider(GoogleProvider):
    """Production Google provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_google_oauth_client(self, settings: Settings) -> GoogleOAuthClient:
        """Provide Google OAuth client.

        Raises:
            ConfigurationError: If Google OAuth credentials are not configured
        """
        if not settings.auth.google.client_id:
            raise ConfigurationError("Google OAuth client ID must be configured")
        if not settings.auth.google.client_secret:
            raise ConfigurationError("Google OAuth client secret must be configured")

        return RealGoogleOAuthClient(
            client_id=settings.auth.google.client_id,
            client_secret=settings.auth.google.client_secret,
            redirect_uri=settings.auth.google_callback_url,
        )
