"""Authentication routes."""

import logging

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from skullking.adapter.error import (
    OAuthProviderError,
    OAuthStateError,
    ProviderMismatchError,
)
from skullking.application.usecase.auth import GetCurrentUserUseCase, LoginUseCase
from skullking.application.usecase.auth.get_current_user import (
    GetCurrentUserRequest,
    GetCurrentUserResponse,
)
from skullking.application.usecase.auth.login import LoginRequest
from skullking.config import Settings
from skullking.domain.error import (
    EmailTakenError,
    NotFoundError,
    ProviderIdentityConflictError,
    UsernameTakenError,
)
from skullking.domain.model import Session
from skullking.domain.service import AuthService, SessionService
from skullking.domain.value import AuthProvider
from skullking.interface.api.session import (
    delete_session,
    load_session,
    require_user_id,
    save_session,
)
from skullking.util.session import SessionPersistenceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"], route_class=DishkaRoute)

INTERNAL_ERROR_MESSAGE = "An internal server error occurred"


class LogoutResponse(BaseModel):
    """Logout response."""

    success: bool
    message: str


@router.get("/{provider}/login")
async def initiate_login(
    provider: AuthProvider,
    request: Request,
    auth_service: FromDishka[AuthService],
    session_service: FromDishka[SessionService],
    settings: FromDishka[Settings],
):
    """Start an OAuth login with the provider.

    Stores a single-use state nonce in the session cookie and redirects the
    browser to the provider's consent screen.

    Example:
        GET /api/auth/github/login

        Redirects to: https://github.com/login/oauth/authorize?...
    """
    logger.info(f"Initiating {provider.value} login")

    session = load_session(request, settings, session_service)
    state = session_service.issue_oauth_state(session)
    auth_url = await auth_service.initiate_login(provider, state)

    response = RedirectResponse(url=auth_url, status_code=status.HTTP_302_FOUND)
    save_session(response, session, settings, session_service)
    return response


@router.get("/initiate-link/{provider}")
async def initiate_link(
    provider: AuthProvider,
    request: Request,
    auth_service: FromDishka[AuthService],
    session_service: FromDishka[SessionService],
    settings: FromDishka[Settings],
):
    """Start linking another provider to the logged-in account.

    Records the linking intent in the session; the provider callback then
    attaches the new identity to this user instead of logging in.

    Raises:
        HTTPException: 401 if not logged in
    """
    session = load_session(request, settings, session_service)
    user_id = require_user_id(session, session_service)

    logger.info(f"Initiating {provider.value} link for user {user_id}")

    session_service.set_linking_intent(session, user_id, provider)
    state = session_service.issue_oauth_state(session)
    auth_url = await auth_service.initiate_login(provider, state)

    response = RedirectResponse(url=auth_url, status_code=status.HTTP_302_FOUND)
    save_session(response, session, settings, session_service)
    return response


@router.get("/{provider}/callback")
async def oauth_callback(
    provider: AuthProvider,
    request: Request,
    login_use_case: FromDishka[LoginUseCase],
    session_service: FromDishka[SessionService],
    settings: FromDishka[Settings],
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
):
    """Handle the provider's OAuth callback.

    On success the session is authenticated and the browser is redirected
    to the frontend (the settings page after linking an account). On
    failure a JSON error is returned. The session cookie is written back in
    both cases, so a linking intent never outlives its callback.

    Example:
        GET /api/auth/google/callback?code=abc123&state=xyz789

        Redirects to: http://localhost:5173/
    """
    logger.info(f"OAuth callback received: provider={provider.value}")

    session = load_session(request, settings, session_service)
    intent = session_service.get_linking_intent(session)
    is_linking = intent is not None and intent.provider == provider

    if error or not code or not state:
        logger.warning(f"OAuth callback without code: provider={provider.value}, error={error}")
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "Authentication was cancelled or failed at the provider",
            session,
            session_service,
            settings,
        )

    try:
        login_response = await login_use_case.execute(
            LoginRequest(provider=provider, code=code, state=state, session=session)
        )
    except ProviderIdentityConflictError as e:
        if e.owned_by_other:
            message = f"This {provider.value} account is already associated with a different account"
        elif is_linking:
            message = "Failed to link account due to a conflict"
        else:
            message = "Failed to link authentication method due to a conflict"
        logger.warning(f"Provider identity conflict during callback: provider={provider.value}")
        return _error_response(
            status.HTTP_409_CONFLICT, message, session, session_service, settings
        )
    except (UsernameTakenError, EmailTakenError):
        logger.warning("Registration conflict during callback")
        return _error_response(
            status.HTTP_409_CONFLICT,
            "This username or email is already in use",
            session,
            session_service,
            settings,
        )
    except OAuthStateError:
        logger.warning(f"OAuth state mismatch: provider={provider.value}")
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "Invalid OAuth state",
            session,
            session_service,
            settings,
        )
    except ProviderMismatchError:
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "Provider mismatch during authentication callback",
            session,
            session_service,
            settings,
        )
    except OAuthProviderError as e:
        logger.error(f"OAuth provider error during callback: {e}")
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            f"Authentication with {provider.value} failed",
            session,
            session_service,
            settings,
        )
    except Exception as e:
        logger.exception(f"Unexpected error during OAuth callback: {e}")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            INTERNAL_ERROR_MESSAGE,
            session,
            session_service,
            settings,
        )

    redirect_url = f"{settings.api.frontend_url}{login_response.redirect_path}"
    response = RedirectResponse(url=redirect_url, status_code=status.HTTP_302_FOUND)
    try:
        save_session(response, session, settings, session_service)
    except SessionPersistenceError:
        logger.exception("Failed to save session after login")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": INTERNAL_ERROR_MESSAGE},
        )

    logger.info(
        f"Login successful for user {login_response.user_id}, redirecting to: {redirect_url}"
    )
    return response


def _error_response(
    status_code: int,
    message: str,
    session: Session,
    session_service: SessionService,
    settings: Settings,
) -> JSONResponse:
    session_service.clear_linking_intent(session)
    response = JSONResponse(status_code=status_code, content={"detail": message})
    try:
        save_session(response, session, settings, session_service)
    except SessionPersistenceError:
        logger.exception("Failed to save session on error response")
    return response


@router.api_route("/logout", methods=["GET", "POST"], response_model=LogoutResponse)
async def logout(response: Response, settings: FromDishka[Settings]) -> LogoutResponse:
    """Log out by removing the session cookie."""
    delete_session(response, settings)
    return LogoutResponse(success=True, message="Successfully logged out")


@router.get("/me", response_model=GetCurrentUserResponse)
async def get_current_user(
    request: Request,
    get_current_user_use_case: FromDishka[GetCurrentUserUseCase],
    session_service: FromDishka[SessionService],
    settings: FromDishka[Settings],
) -> GetCurrentUserResponse:
    """Get the logged-in user and their linked providers.

    Raises:
        HTTPException: 401 if not logged in or the user no longer exists
    """
    session = load_session(request, settings, session_service)
    user_id = require_user_id(session, session_service)

    try:
        return await get_current_user_use_case.execute(
            GetCurrentUserRequest(user_id=user_id)
        )
    except NotFoundError:
        # Session outlived its user
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
