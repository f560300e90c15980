"""Session cookie codec.

The session is carried in a single cookie as an HS256-signed JWT. Claim
names are fixed so that sessions survive deployments:

    user_id                        authenticated user ID
    user_name                      label shown for the session
    linking_user_id_for_provider   user that started a linking flow
    linking_provider_name          provider being linked
    oauth_state                    CSRF nonce of the in-flight OAuth redirect
"""

from datetime import datetime, timedelta, timezone

import jwt

from skullking.config import AuthSettings
from skullking.domain.model.session import Session

# Session field -> cookie claim
SESSION_CLAIMS: dict[str, str] = {
    "user_id": "user_id",
    "user_name": "user_name",
    "linking_user_id": "linking_user_id_for_provider",
    "linking_provider": "linking_provider_name",
    "oauth_state": "oauth_state",
}


class SessionError(Exception):
    """Session cookie could not be decoded."""

    pass


class SessionPersistenceError(SessionError):
    """Session state could not be serialised for the response."""

    pass


def encode_session(session: Session, settings: AuthSettings) -> str:
    """Serialise session state into a signed cookie value.

    Args:
        session: Session state to store
        settings: Authentication settings

    Returns:
        Encoded cookie value

    Raises:
        SessionPersistenceError: If the session cannot be signed
    """
    expiry = datetime.now(timezone.utc) + timedelta(days=settings.session_max_age_days)

    payload: dict[str, object] = {
        claim: getattr(session, field)
        for field, claim in SESSION_CLAIMS.items()
        if getattr(session, field) is not None
    }
    payload["exp"] = expiry

    try:
        return jwt.encode(
            payload, settings.session_secret, algorithm=settings.session_algorithm
        )
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        raise SessionPersistenceError(f"Failed to encode session: {e}") from e


def decode_session(value: str, settings: AuthSettings) -> Session:
    """Decode and verify a session cookie value.

    Args:
        value: Cookie value
        settings: Authentication settings

    Returns:
        Session state carried by the cookie

    Raises:
        SessionError: If the cookie is invalid, tampered with or expired
    """
    try:
        payload = jwt.decode(
            value, settings.session_secret, algorithms=[settings.session_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise SessionError("Session has expired")
    except jwt.InvalidTokenError:
        raise SessionError("Invalid session")

    values = {}
    for field, claim in SESSION_CLAIMS.items():
        raw = payload.get(claim)
        if raw is not None:
            values[field] = str(raw)
    return Session(**values)
