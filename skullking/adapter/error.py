"""Adapter layer errors."""


class AdapterError(Exception):
    """Base adapter error."""

    pass


class OAuthProviderError(AdapterError):
    """OAuth provider exchange failed or returned unusable data."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class OAuthStateError(AdapterError):
    """OAuth state returned by the provider does not match the session."""

    pass


class ProviderMismatchError(OAuthProviderError):
    """The identity returned by the exchange is for a different provider."""

    def __init__(self, provider: str):
        super().__init__(provider, "Provider mismatch during authentication callback")
