"""Get user profile use case."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from skullking.application.usecase.base import BaseUseCase
from skullking.domain.error import NotFoundError
from skullking.domain.repository import UnitOfWork
from skullking.domain.service import UserService
from skullking.domain.value import StatsPrivacy, UserId


class ViewerRelationship(str, Enum):
    """How the viewer of a profile relates to its owner."""

    NOT_AUTHENTICATED = "not_authenticated"
    SELF = "self"
    OTHER = "other"


class GetUserProfileRequest(BaseModel):
    """Get user profile request."""

    user_id: UserId
    viewer_id: UserId | None = None  # None for anonymous viewers


class GetUserProfileResponse(BaseModel):
    """Public view of a user.

    Email and theme preferences are private and never included.
    """

    user_id: str
    username: str
    display_name: str | None
    avatar_url: str | None
    stats_privacy: StatsPrivacy
    created_at: datetime
    viewer_relationship: ViewerRelationship
    stats_visible: bool


class GetUserProfileUseCase(BaseUseCase):
    """Use case for viewing another user's public profile."""

    def __init__(self, uow: UnitOfWork, user_service: UserService) -> None:
        """Initialize get user profile use case.

        Args:
            uow: Unit of work for the request
            user_service: User domain service
        """
        self.uow = uow
        self.user_service = user_service

    async def execute(
        self, request: GetUserProfileRequest
    ) -> GetUserProfileResponse | None:
        """Load the profile as seen by the viewer.

        Args:
            request: Profile owner and optional viewer

        Returns:
            The public profile if the user exists, None otherwise
        """
        try:
            async with self.uow:
                user = await self.user_service.get_by_id(request.user_id)
        except NotFoundError:
            return None

        if request.viewer_id is None:
            relationship = ViewerRelationship.NOT_AUTHENTICATED
        elif request.viewer_id == user.id:
            relationship = ViewerRelationship.SELF
        else:
            relationship = ViewerRelationship.OTHER

        return GetUserProfileResponse(
            user_id=str(user.id),
            username=user.username,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
            stats_privacy=user.stats_privacy,
            created_at=user.created_at,
            viewer_relationship=relationship,
            stats_visible=user.stats_visible_to(request.viewer_id),
        )
