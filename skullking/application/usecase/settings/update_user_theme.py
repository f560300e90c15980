"""Update user theme use case."""

from pydantic import BaseModel, Field

from skullking.application.usecase.auth.get_current_user import UserInfo
from skullking.application.usecase.base import BaseUseCase
from skullking.domain.repository import UnitOfWork
from skullking.domain.service import UserService
from skullking.domain.value import UserId


class UpdateUserThemeRequest(BaseModel):
    """Update user theme request. Both themes are required."""

    user_id: UserId
    ui_theme: str = Field(min_length=1, max_length=50)
    color_theme: str = Field(min_length=1, max_length=50)


class UpdateUserThemeUseCase(BaseUseCase):
    """Use case for storing a user's theme preferences."""

    def __init__(self, uow: UnitOfWork, user_service: UserService) -> None:
        self.uow = uow
        self.user_service = user_service

    async def execute(self, request: UpdateUserThemeRequest) -> UserInfo:
        """Store both themes and return the updated user.

        Raises:
            NotFoundError: If user not found
        """
        async with self.uow:
            user = await self.user_service.update_theme(
                request.user_id, request.ui_theme, request.color_theme
            )
        return UserInfo.from_user(user)
