"""Get current user use case."""

from datetime import datetime

from pydantic import BaseModel

from skullking.application.usecase.base import BaseUseCase
from skullking.domain.model import User
from skullking.domain.repository import UnitOfWork
from skullking.domain.service import ProviderIdentityService, UserService
from skullking.domain.value import AuthProvider, StatsPrivacy, UserId


class UserInfo(BaseModel):
    """User as exposed by the API."""

    user_id: str
    username: str
    email: str | None
    display_name: str | None
    avatar_url: str | None
    stats_privacy: StatsPrivacy
    ui_theme: str | None
    color_theme: str | None
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None

    @classmethod
    def from_user(cls, user: User) -> "UserInfo":
        return cls(
            user_id=str(user.id),
            username=user.username,
            email=user.email,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
            stats_privacy=user.stats_privacy,
            ui_theme=user.ui_theme,
            color_theme=user.color_theme,
            created_at=user.created_at,
            updated_at=user.updated_at,
            last_login_at=user.last_login_at,
        )


class GetCurrentUserRequest(BaseModel):
    """Get current user request."""

    user_id: UserId  # From the authenticated session


class GetCurrentUserResponse(BaseModel):
    """Get current user response."""

    user: UserInfo
    linked_providers: list[AuthProvider]


class GetCurrentUserUseCase(BaseUseCase):
    """Use case for getting the logged-in user."""

    def __init__(
        self,
        uow: UnitOfWork,
        user_service: UserService,
        provider_identity_service: ProviderIdentityService,
    ) -> None:
        """Initialize get current user use case.

        Args:
            uow: Unit of work for the request
            user_service: User domain service
            provider_identity_service: Provider identity domain service
        """
        self.uow = uow
        self.user_service = user_service
        self.provider_identity_service = provider_identity_service

    async def execute(self, request: GetCurrentUserRequest) -> GetCurrentUserResponse:
        """Load the user and the providers linked to it.

        Raises:
            NotFoundError: If user not found
        """
        async with self.uow:
            user = await self.user_service.get_by_id(request.user_id)
            identities = await self.provider_identity_service.get_all_identities_for_user(
                user.id
            )

        return GetCurrentUserResponse(
            user=UserInfo.from_user(user),
            linked_providers=[identity.provider for identity in identities],
        )
