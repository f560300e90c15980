"""Session state domain service."""

import secrets
from uuid import UUID

import logfire

from skullking.config import AuthSettings
from skullking.domain.model.session import Session
from skullking.domain.value import AuthProvider, LinkingIntent, UserId
from skullking.util.session import (
    SessionError,
    SessionPersistenceError,
    decode_session,
    encode_session,
)

from .base import Service


class SessionService(Service):
    """Reads and writes the typed session state.

    The service never touches HTTP; routes load the session from the cookie
    with ``load`` and write it back with ``dump``.
    """

    def __init__(self, auth_settings: AuthSettings) -> None:
        """Initialize session service.

        Args:
            auth_settings: Authentication settings
        """
        self.auth_settings = auth_settings

    def load(self, cookie_value: str | None) -> Session:
        """Load session state from a cookie value.

        A missing, invalid or expired cookie yields an empty session.

        Args:
            cookie_value: Raw cookie value, if any

        Returns:
            Session state
        """
        if not cookie_value:
            return Session()

        try:
            return decode_session(cookie_value, self.auth_settings)
        except SessionError as e:
            logfire.info("Discarding unreadable session cookie", error=str(e))
            return Session()

    def dump(self, session: Session) -> str:
        """Serialise session state to a cookie value.

        Args:
            session: Session state

        Returns:
            Cookie value

        Raises:
            SessionPersistenceError: If the session cannot be serialised
        """
        with logfire.span("session_service.dump"):
            try:
                return encode_session(session, self.auth_settings)
            except SessionPersistenceError as e:
                logfire.error("Failed to persist session", error=str(e))
                raise

    def has_linking_keys(self, session: Session) -> bool:
        """Whether any linking key is present, valid or not."""
        return session.linking_user_id is not None or session.linking_provider is not None

    def get_linking_intent(self, session: Session) -> LinkingIntent | None:
        """Read the pending linking intent.

        The intent is valid only when both keys are present, the user ID is a
        UUID and the provider is a known provider.

        Args:
            session: Session state

        Returns:
            Linking intent, or None if absent or malformed
        """
        if not session.linking_user_id or not session.linking_provider:
            return None

        try:
            user_id = UserId(UUID(session.linking_user_id))
            provider = AuthProvider(session.linking_provider)
        except ValueError:
            logfire.warn(
                "Malformed linking intent in session",
                linking_user_id=session.linking_user_id,
                linking_provider=session.linking_provider,
            )
            return None

        return LinkingIntent(user_id=user_id, provider=provider)

    def set_linking_intent(
        self, session: Session, user_id: UserId, provider: AuthProvider
    ) -> None:
        """Record that the user wants to link another provider."""
        session.linking_user_id = str(user_id)
        session.linking_provider = provider.value
        logfire.info(
            "Linking intent set", user_id=str(user_id), provider=provider.value
        )

    def clear_linking_intent(self, session: Session) -> None:
        """Remove both linking keys. Safe to call when none are set."""
        session.linking_user_id = None
        session.linking_provider = None

    def set_authenticated_session(
        self, session: Session, user_id: UserId, label: str
    ) -> None:
        """Mark the session as logged in."""
        session.user_id = str(user_id)
        session.user_name = label

    def get_authenticated_user_id(self, session: Session) -> UserId | None:
        """Return the logged-in user's ID, or None when not logged in."""
        if not session.user_id:
            return None
        try:
            return UserId(UUID(session.user_id))
        except ValueError:
            logfire.warn("Malformed user ID in session", user_id=session.user_id)
            return None

    def issue_oauth_state(self, session: Session) -> str:
        """Generate and store a single-use OAuth state nonce."""
        state = secrets.token_urlsafe(32)
        session.oauth_state = state
        return state

    def consume_oauth_state(self, session: Session, state: str) -> bool:
        """Check the OAuth state returned by the provider.

        The stored nonce is removed whether or not it matches.

        Returns:
            True if the state matches the stored nonce
        """
        expected = session.oauth_state
        session.oauth_state = None
        if not expected:
            return False
        return secrets.compare_digest(expected, state)

    def clear(self, session: Session) -> None:
        """Remove all session state (logout)."""
        session.user_id = None
        session.user_name = None
        session.oauth_state = None
        self.clear_linking_intent(session)
