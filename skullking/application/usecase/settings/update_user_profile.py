"""Update user profile use case."""

import pydantic
from pydantic import BaseModel

from skullking.application.usecase.auth.get_current_user import UserInfo
from skullking.application.usecase.base import BaseUseCase
from skullking.domain.error import ValidationError
from skullking.domain.repository import UnitOfWork
from skullking.domain.service import UserService
from skullking.domain.value import StatsPrivacy, UserId, UserProfilePatch


class UpdateUserProfileRequest(BaseModel):
    """Update user profile request.

    Fields left as None are not changed.
    """

    user_id: UserId  # From the authenticated session
    display_name: str | None = None
    avatar_url: str | None = None
    stats_privacy: StatsPrivacy | None = None


class UpdateUserProfileResponse(BaseModel):
    """Update user profile response."""

    message: str
    user: UserInfo


class UpdateUserProfileUseCase(BaseUseCase):
    """Use case for updating a user's profile.

    Users can change their display name, avatar URL and stats privacy.
    Username and email cannot be changed through this endpoint.
    """

    def __init__(self, uow: UnitOfWork, user_service: UserService) -> None:
        """Initialize update user profile use case.

        Args:
            uow: Unit of work for the request
            user_service: User domain service
        """
        self.uow = uow
        self.user_service = user_service

    async def execute(
        self, request: UpdateUserProfileRequest
    ) -> UpdateUserProfileResponse:
        """Apply the profile changes in one transaction.

        Args:
            request: Request with user ID and fields to update

        Returns:
            Updated user profile

        Raises:
            ValidationError: If the display name is blank
            NotFoundError: If user not found
        """
        try:
            patch = UserProfilePatch(
                display_name=request.display_name,
                avatar_url=request.avatar_url,
                stats_privacy=request.stats_privacy,
            )
        except pydantic.ValidationError as e:
            raise ValidationError(e.errors()[0]["msg"].removeprefix("Value error, "))

        async with self.uow:
            user = await self.user_service.update_profile(request.user_id, patch)

        message = (
            "No profile information was updated"
            if patch.is_empty()
            else "Profile updated successfully"
        )
        return UpdateUserProfileResponse(message=message, user=UserInfo.from_user(user))
