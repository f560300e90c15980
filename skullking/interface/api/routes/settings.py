"""Account settings routes."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel

from skullking.application.usecase.auth.get_current_user import UserInfo
from skullking.application.usecase.settings import (
    GetLinkedAccountsUseCase,
    UnlinkAccountUseCase,
    UpdateUserProfileUseCase,
    UpdateUserThemeUseCase,
)
from skullking.application.usecase.settings.get_linked_accounts import (
    GetLinkedAccountsRequest,
    GetLinkedAccountsResponse,
)
from skullking.application.usecase.settings.unlink_account import (
    UnlinkAccountRequest,
    UnlinkAccountResponse,
)
from skullking.application.usecase.settings.update_user_profile import (
    UpdateUserProfileRequest,
    UpdateUserProfileResponse,
)
from skullking.application.usecase.settings.update_user_theme import (
    UpdateUserThemeRequest,
)
from skullking.config import Settings
from skullking.domain.error import (
    DeleteLastProviderIdentityError,
    NotFoundError,
    ValidationError,
)
from skullking.domain.service import SessionService
from skullking.domain.value import AuthProvider, StatsPrivacy, UserId
from skullking.interface.api.session import load_session, require_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"], route_class=DishkaRoute)


class UpdateProfileBody(BaseModel):
    """Profile fields to change; omitted fields are kept."""

    display_name: str | None = None
    avatar_url: str | None = None
    stats_privacy: StatsPrivacy | None = None


class UpdateThemeBody(BaseModel):
    """Theme preferences; both are required."""

    ui_theme: str | None = None
    color_theme: str | None = None


def _current_user_id(
    request: Request, settings: Settings, session_service: SessionService
) -> UserId:
    session = load_session(request, settings, session_service)
    return require_user_id(session, session_service)


@router.put("/profile", response_model=UpdateUserProfileResponse)
async def update_profile(
    body: UpdateProfileBody,
    request: Request,
    use_case: FromDishka[UpdateUserProfileUseCase],
    session_service: FromDishka[SessionService],
    settings: FromDishka[Settings],
) -> UpdateUserProfileResponse:
    """Update the logged-in user's profile.

    Example:
        PUT /api/settings/profile
        {"display_name": "Captain Flint", "stats_privacy": "friends_only"}
    """
    user_id = _current_user_id(request, settings, session_service)

    try:
        return await use_case.execute(
            UpdateUserProfileRequest(
                user_id=user_id,
                display_name=body.display_name,
                avatar_url=body.avatar_url,
                stats_privacy=body.stats_privacy,
            )
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )


@router.put("/theme", response_model=UserInfo)
async def update_theme(
    body: UpdateThemeBody,
    request: Request,
    use_case: FromDishka[UpdateUserThemeUseCase],
    session_service: FromDishka[SessionService],
    settings: FromDishka[Settings],
) -> UserInfo:
    """Store the logged-in user's theme preferences."""
    user_id = _current_user_id(request, settings, session_service)

    if not body.ui_theme or not body.color_theme:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="ui_theme and color_theme are required",
        )

    try:
        return await use_case.execute(
            UpdateUserThemeRequest(
                user_id=user_id, ui_theme=body.ui_theme, color_theme=body.color_theme
            )
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found, cannot update theme",
        )


@router.get("/linked-accounts", response_model=GetLinkedAccountsResponse)
async def get_linked_accounts(
    request: Request,
    use_case: FromDishka[GetLinkedAccountsUseCase],
    session_service: FromDishka[SessionService],
    settings: FromDishka[Settings],
) -> GetLinkedAccountsResponse:
    """List the provider accounts linked to the logged-in user."""
    user_id = _current_user_id(request, settings, session_service)
    return await use_case.execute(GetLinkedAccountsRequest(user_id=user_id))


@router.delete("/linked-accounts/{provider}", response_model=UnlinkAccountResponse)
async def unlink_account(
    provider: AuthProvider,
    request: Request,
    use_case: FromDishka[UnlinkAccountUseCase],
    session_service: FromDishka[SessionService],
    settings: FromDishka[Settings],
) -> UnlinkAccountResponse:
    """Remove a linked provider account.

    The last remaining account cannot be removed.
    """
    user_id = _current_user_id(request, settings, session_service)

    try:
        return await use_case.execute(
            UnlinkAccountRequest(user_id=user_id, provider=provider)
        )
    except DeleteLastProviderIdentityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                "Cannot unlink the last authentication method. Please link another "
                "account first or ensure you have an alternative login method."
            ),
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="The specified account to unlink was not found for your user.",
        )
