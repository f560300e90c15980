"""Login use case."""

import logfire
from pydantic import BaseModel

from skullking.adapter.error import OAuthStateError, ProviderMismatchError
from skullking.application.usecase.base import BaseUseCase
from skullking.config import Settings
from skullking.domain.error import EmailTakenError, UsernameTakenError
from skullking.domain.model import Session
from skullking.domain.service import (
    AuthService,
    ReconciliationResult,
    ReconciliationService,
    SessionService,
)
from skullking.domain.value import AuthProvider, ExternalIdentity


class LoginRequest(BaseModel):
    """Login request from OAuth callback.

    ``session`` is the caller's session state; it is updated in place.
    """

    provider: AuthProvider  # Provider named in the callback URL
    code: str  # OAuth authorization code
    state: str  # State parameter echoed by the provider
    session: Session


class LoginResponse(BaseModel):
    """Login response."""

    user_id: str
    user_name: str
    redirect_path: str  # Frontend path to send the browser to
    linked: bool


class LoginUseCase(BaseUseCase):
    """Completes an OAuth callback and logs the user in."""

    def __init__(
        self,
        auth_service: AuthService,
        session_service: SessionService,
        reconciliation_service: ReconciliationService,
        settings: Settings,
    ) -> None:
        """Initialize login use case.

        Args:
            auth_service: Authentication domain service (handles all providers)
            session_service: Session state domain service
            reconciliation_service: Identity reconciliation domain service
            settings: Application settings
        """
        self.auth_service = auth_service
        self.session_service = session_service
        self.reconciliation_service = reconciliation_service
        self.settings = settings

    async def execute(self, request: LoginRequest) -> LoginResponse:
        """Execute the OAuth callback flow.

        Steps:
        1. Check the state parameter against the session nonce
        2. Complete OAuth with the provider
        3. Reconcile the identity, retrying registration collisions
        4. Return the redirect path (settings page after linking)

        Args:
            request: Login request with OAuth callback parameters

        Returns:
            Logged-in user and where to redirect

        Raises:
            OAuthStateError: If the state does not match the session
            OAuthProviderError: If the provider exchange fails
            ProviderMismatchError: If the provider reports a different provider
            ConflictError: If reconciliation hits a conflict
        """
        with logfire.span("login_use_case.execute", provider=request.provider.value):
            if not self.session_service.consume_oauth_state(
                request.session, request.state
            ):
                logfire.warn("OAuth state mismatch", provider=request.provider.value)
                raise OAuthStateError("OAuth state does not match the session")

            external = await self.auth_service.complete_login(
                request.provider, request.code, request.state
            )

            if external.provider != request.provider:
                logfire.error(
                    "Provider mismatch during authentication callback",
                    expected=request.provider.value,
                    actual=external.provider.value,
                )
                raise ProviderMismatchError(request.provider.value)

            logfire.info(
                "OAuth completed",
                provider=external.provider.value,
                provider_user_id=external.provider_user_id,
            )

            result = await self._reconcile(external, request.session)

            return LoginResponse(
                user_id=str(result.user.id),
                user_name=result.user.session_label,
                redirect_path="/settings" if result.linked else "/",
                linked=result.linked,
            )

    async def _reconcile(
        self, external: ExternalIdentity, session: Session
    ) -> ReconciliationResult:
        # Collisions only come from registration, which never runs with a
        # linking intent
        max_attempts = max(1, self.settings.registration.max_attempts)
        attempt = 0
        while True:
            try:
                return await self.reconciliation_service.reconcile(
                    external, session, attempt=attempt
                )
            except (UsernameTakenError, EmailTakenError) as e:
                attempt += 1
                if attempt >= max_attempts:
                    logfire.error(
                        "Registration failed after retries",
                        attempts=max_attempts,
                        error=str(e),
                    )
                    raise
                logfire.warn(
                    "Registration collided, retrying",
                    attempt=attempt,
                    error=str(e),
                )
