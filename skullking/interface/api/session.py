"""Session cookie handling for HTTP routes."""

from fastapi import HTTPException, Request, Response, status

from skullking.config import Settings
from skullking.domain.model import Session
from skullking.domain.service import SessionService
from skullking.domain.value import UserId


def load_session(
    request: Request, settings: Settings, session_service: SessionService
) -> Session:
    """Read the session state carried by the request cookie."""
    return session_service.load(request.cookies.get(settings.auth.session_cookie_name))


def save_session(
    response: Response,
    session: Session,
    settings: Settings,
    session_service: SessionService,
) -> None:
    """Write the session state to the response cookie.

    Raises:
        SessionPersistenceError: If the session cannot be serialised
    """
    # OAuth callbacks are top-level navigations from the provider, so
    # SameSite=Lax still sends the cookie back to the callback.
    response.set_cookie(
        key=settings.auth.session_cookie_name,
        value=session_service.dump(session),
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
        max_age=settings.auth.session_max_age_seconds,
    )


def delete_session(response: Response, settings: Settings) -> None:
    """Remove the session cookie."""
    response.delete_cookie(key=settings.auth.session_cookie_name, path="/")


def require_user_id(session: Session, session_service: SessionService) -> UserId:
    """Return the logged-in user's ID.

    Raises:
        HTTPException: 401 if the session is not authenticated
    """
    user_id = session_service.get_authenticated_user_id(session)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user_id
