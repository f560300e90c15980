"""Domain layer DI providers."""

from dishka import Scope, provide

from skullking.config import AuthSettings
from skullking.domain.repository import UnitOfWork
from skullking.domain.service import (
    AuthService,
    OAuthClient,
    ProviderIdentityService,
    ReconciliationService,
    SessionService,
    UserService,
)
from skullking.domain.value import AuthProvider
from skullking.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Services are REQUEST-scoped and share the request's unit of work, so
    everything one use case does lands in the same transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_auth_service(
        self, oauth_clients: dict[AuthProvider, OAuthClient]
    ) -> AuthService:
        """Provide multi-provider authentication domain service.

        Args:
            oauth_clients: Dictionary mapping providers to their OAuth clients

        Returns:
            AuthService configured with all available OAuth clients
        """
        return AuthService(oauth_clients=oauth_clients)

    @provide
    def get_session_service(self, auth_settings: AuthSettings) -> SessionService:
        """Provide session state domain service."""
        return SessionService(auth_settings=auth_settings)

    @provide
    def get_user_service(self, uow: UnitOfWork) -> UserService:
        """Provide user domain service."""
        return UserService(uow=uow)

    @provide
    def get_provider_identity_service(
        self, uow: UnitOfWork
    ) -> ProviderIdentityService:
        """Provide provider identity domain service."""
        return ProviderIdentityService(uow=uow)

    @provide
    def get_reconciliation_service(
        self,
        uow: UnitOfWork,
        user_service: UserService,
        provider_identity_service: ProviderIdentityService,
        session_service: SessionService,
    ) -> ReconciliationService:
        """Provide identity reconciliation domain service."""
        return ReconciliationService(
            uow=uow,
            user_service=user_service,
            provider_identity_service=provider_identity_service,
            session_service=session_service,
        )
