"""Public user routes."""

import logging
from uuid import UUID

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, HTTPException, Request, status

from skullking.application.usecase.user import (
    GetUserProfileUseCase,
    SearchUsersUseCase,
)
from skullking.application.usecase.user.get_user_profile import (
    GetUserProfileRequest,
    GetUserProfileResponse,
)
from skullking.application.usecase.user.search_users import (
    DEFAULT_SEARCH_LIMIT,
    SearchUsersRequest,
    SearchUsersResponse,
)
from skullking.config import Settings
from skullking.domain.error import ValidationError
from skullking.domain.service import SessionService
from skullking.domain.value import UserId
from skullking.interface.api.session import load_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"], route_class=DishkaRoute)


@router.get("/search", response_model=SearchUsersResponse)
async def search_users(
    use_case: FromDishka[SearchUsersUseCase],
    q: str | None = None,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> SearchUsersResponse:
    """Search users by username or display name.

    Example:
        GET /api/users/search?q=flint&limit=5

        Response:
        {
            "users": [
                {
                    "user_id": "123e4567-e89b-12d3-a456-426614174000",
                    "username": "flint",
                    "display_name": "Captain Flint",
                    "avatar_url": null
                }
            ]
        }
    """
    try:
        return await use_case.execute(SearchUsersRequest(query=q or "", limit=limit))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{user_id}", response_model=GetUserProfileResponse)
async def get_user_profile(
    user_id: str,
    request: Request,
    use_case: FromDishka[GetUserProfileUseCase],
    session_service: FromDishka[SessionService],
    settings: FromDishka[Settings],
) -> GetUserProfileResponse:
    """Get a user's public profile.

    Works without a session; ``viewer_relationship`` and ``stats_visible``
    depend on who is asking.

    Raises:
        HTTPException: 404 if no user has this ID
    """
    session = load_session(request, settings, session_service)
    viewer_id = session_service.get_authenticated_user_id(session)

    try:
        profile_user_id = UserId(UUID(user_id))
    except ValueError:
        profile_user_id = None

    profile = None
    if profile_user_id is not None:
        profile = await use_case.execute(
            GetUserProfileRequest(user_id=profile_user_id, viewer_id=viewer_id)
        )

    if not profile:
        logger.info(f"Profile not found: user_id={user_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User profile not found"
        )

    return profile
