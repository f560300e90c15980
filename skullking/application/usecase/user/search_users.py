"""Search users use case."""

from pydantic import BaseModel

from skullking.application.usecase.base import BaseUseCase
from skullking.domain.error import ValidationError
from skullking.domain.repository import UnitOfWork
from skullking.domain.service import UserService

DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 50


class SearchUsersRequest(BaseModel):
    """Search users request."""

    query: str
    limit: int = DEFAULT_SEARCH_LIMIT


class UserSearchItem(BaseModel):
    """One search hit."""

    user_id: str
    username: str
    display_name: str | None
    avatar_url: str | None


class SearchUsersResponse(BaseModel):
    """Search users response."""

    users: list[UserSearchItem]


class SearchUsersUseCase(BaseUseCase):
    """Use case for finding users by username or display name.

    Non-positive limits fall back to the default; large ones are capped.
    """

    def __init__(self, uow: UnitOfWork, user_service: UserService) -> None:
        """Initialize search users use case.

        Args:
            uow: Unit of work for the request
            user_service: User domain service
        """
        self.uow = uow
        self.user_service = user_service

    async def execute(self, request: SearchUsersRequest) -> SearchUsersResponse:
        """Run the search.

        Raises:
            ValidationError: If the query is blank
        """
        query = request.query.strip()
        if not query:
            raise ValidationError("Search query 'q' is required")

        limit = request.limit if request.limit > 0 else DEFAULT_SEARCH_LIMIT
        limit = min(limit, MAX_SEARCH_LIMIT)

        async with self.uow:
            users = await self.user_service.search(query, limit)

        return SearchUsersResponse(
            users=[
                UserSearchItem(
                    user_id=str(user.id),
                    username=user.username,
                    display_name=user.display_name,
                    avatar_url=user.avatar_url,
                )
                for user in users
            ]
        )
