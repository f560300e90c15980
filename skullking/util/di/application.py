"""Application layer DI providers."""

from dishka import Scope, provide

from skullking.application.usecase.auth import GetCurrentUserUseCase, LoginUseCase
from skullking.application.usecase.settings import (
    GetLinkedAccountsUseCase,
    UnlinkAccountUseCase,
    UpdateUserProfileUseCase,
    UpdateUserThemeUseCase,
)
from skullking.application.usecase.user import (
    GetUserProfileUseCase,
    SearchUsersUseCase,
)
from skullking.config import Settings
from skullking.domain.repository import UnitOfWork
from skullking.domain.service import (
    AuthService,
    ProviderIdentityService,
    ReconciliationService,
    SessionService,
    UserService,
)
from skullking.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Auth use cases
    @provide(scope=Scope.REQUEST)
    def get_login_use_case(
        self,
        auth_service: AuthService,
        session_service: SessionService,
        reconciliation_service: ReconciliationService,
        settings: Settings,
    ) -> LoginUseCase:
        """Provide login use case."""
        return LoginUseCase(
            auth_service=auth_service,
            session_service=session_service,
            reconciliation_service=reconciliation_service,
            settings=settings,
        )

    @provide(scope=Scope.REQUEST)
    def get_current_user_use_case(
        self,
        uow: UnitOfWork,
        user_service: UserService,
        provider_identity_service: ProviderIdentityService,
    ) -> GetCurrentUserUseCase:
        """Provide get current user use case."""
        return GetCurrentUserUseCase(
            uow=uow,
            user_service=user_service,
            provider_identity_service=provider_identity_service,
        )

    # Settings use cases
    @provide(scope=Scope.REQUEST)
    def get_update_user_profile_use_case(
        self, uow: UnitOfWork, user_service: UserService
    ) -> UpdateUserProfileUseCase:
        """Provide update user profile use case."""
        return UpdateUserProfileUseCase(uow=uow, user_service=user_service)

    @provide(scope=Scope.REQUEST)
    def get_update_user_theme_use_case(
        self, uow: UnitOfWork, user_service: UserService
    ) -> UpdateUserThemeUseCase:
        """Provide update user theme use case."""
        return UpdateUserThemeUseCase(uow=uow, user_service=user_service)

    @provide(scope=Scope.REQUEST)
    def get_linked_accounts_use_case(
        self, uow: UnitOfWork, provider_identity_service: ProviderIdentityService
    ) -> GetLinkedAccountsUseCase:
        """Provide get linked accounts use case."""
        return GetLinkedAccountsUseCase(
            uow=uow, provider_identity_service=provider_identity_service
        )

    @provide(scope=Scope.REQUEST)
    def get_unlink_account_use_case(
        self, uow: UnitOfWork, provider_identity_service: ProviderIdentityService
    ) -> UnlinkAccountUseCase:
        """Provide unlink account use case."""
        return UnlinkAccountUseCase(
            uow=uow, provider_identity_service=provider_identity_service
        )

    # Public user use cases
    @provide(scope=Scope.REQUEST)
    def get_user_profile_use_case(
        self, uow: UnitOfWork, user_service: UserService
    ) -> GetUserProfileUseCase:
        """Provide get user profile use case."""
        return GetUserProfileUseCase(uow=uow, user_service=user_service)

    @provide(scope=Scope.REQUEST)
    def get_search_users_use_case(
        self, uow: UnitOfWork, user_service: UserService
    ) -> SearchUsersUseCase:
        """Provide search users use case."""
        return SearchUsersUseCase(uow=uow, user_service=user_service)
