"""Unit tests for SessionService and the session cookie codec."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from skullking.config import AuthSettings
from skullking.domain.model import Session
from skullking.domain.service import SessionService
from skullking.domain.value import AuthProvider, LinkingIntent, UserId
from skullking.util.session import SessionError, decode_session, encode_session


class TestSessionCodec:
    """Tests for encode_session() / decode_session()."""

    def test_uses_fixed_claim_names(self, auth_settings: AuthSettings):
        """Linking keys are stored under their established claim names."""
        session = Session(
            user_id="u1",
            user_name="Alice",
            linking_user_id="u1",
            linking_provider="github",
        )

        payload = jwt.decode(
            encode_session(session, auth_settings),
            auth_settings.session_secret,
            algorithms=["HS256"],
        )

        assert payload["user_id"] == "u1"
        assert payload["user_name"] == "Alice"
        assert payload["linking_user_id_for_provider"] == "u1"
        assert payload["linking_provider_name"] == "github"
        assert "oauth_state" not in payload

    def test_decode_restores_session(self, auth_settings: AuthSettings):
        session = Session(user_id="u1", oauth_state="nonce")

        decoded = decode_session(encode_session(session, auth_settings), auth_settings)

        assert decoded == session

    def test_rejects_tampered_cookie(self, auth_settings: AuthSettings):
        """A cookie signed with another secret is rejected."""
        other = AuthSettings(session_secret="someone-else")
        value = encode_session(Session(user_id="u1"), other)

        with pytest.raises(SessionError, match="Invalid session"):
            decode_session(value, auth_settings)

    def test_rejects_expired_cookie(self, auth_settings: AuthSettings):
        value = jwt.encode(
            {"user_id": "u1", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            auth_settings.session_secret,
            algorithm="HS256",
        )

        with pytest.raises(SessionError, match="expired"):
            decode_session(value, auth_settings)


class TestSessionService:
    """Tests for SessionService."""

    def test_load_missing_cookie_gives_empty_session(
        self, session_service: SessionService
    ):
        assert session_service.load(None) == Session()

    def test_load_garbage_cookie_gives_empty_session(
        self, session_service: SessionService
    ):
        """An unreadable cookie is discarded, not an error."""
        assert session_service.load("not-a-jwt") == Session()

    def test_dump_then_load(self, session_service: SessionService):
        session = Session(user_id="u1", user_name="Alice")

        assert session_service.load(session_service.dump(session)) == session

    def test_linking_intent_round_trip(self, session_service: SessionService):
        session = Session()
        user_id = UserId(uuid4())

        session_service.set_linking_intent(session, user_id, AuthProvider.GITHUB)

        assert session_service.get_linking_intent(session) == LinkingIntent(
            user_id=user_id, provider=AuthProvider.GITHUB
        )

    def test_partial_intent_is_not_an_intent(self, session_service: SessionService):
        """Both keys are required."""
        session = Session(linking_provider="github")

        assert session_service.get_linking_intent(session) is None
        assert session_service.has_linking_keys(session)

    def test_malformed_intent_is_not_an_intent(self, session_service: SessionService):
        """Unparseable user IDs and unknown providers are ignored."""
        bad_user = Session(linking_user_id="not-a-uuid", linking_provider="github")
        bad_provider = Session(
            linking_user_id=str(uuid4()), linking_provider="myspace"
        )

        assert session_service.get_linking_intent(bad_user) is None
        assert session_service.get_linking_intent(bad_provider) is None

    def test_clear_linking_intent_is_idempotent(
        self, session_service: SessionService
    ):
        session = Session(linking_user_id=str(uuid4()), linking_provider="google")

        session_service.clear_linking_intent(session)
        session_service.clear_linking_intent(session)

        assert not session_service.has_linking_keys(session)

    def test_oauth_state_is_single_use(self, session_service: SessionService):
        session = Session()
        state = session_service.issue_oauth_state(session)

        assert session_service.consume_oauth_state(session, state)
        assert not session_service.consume_oauth_state(session, state)

    def test_wrong_oauth_state_is_rejected_and_consumed(
        self, session_service: SessionService
    ):
        session = Session()
        state = session_service.issue_oauth_state(session)

        assert not session_service.consume_oauth_state(session, "forged")
        assert not session_service.consume_oauth_state(session, state)

    def test_authenticated_user_id(self, session_service: SessionService):
        session = Session()
        user_id = UserId(uuid4())

        session_service.set_authenticated_session(session, user_id, "Alice")

        assert session.is_authenticated
        assert session.user_name == "Alice"
        assert session_service.get_authenticated_user_id(session) == user_id

    def test_clear_logs_out(self, session_service: SessionService):
        session = Session(
            user_id=str(uuid4()),
            user_name="Alice",
            linking_user_id=str(uuid4()),
            linking_provider="github",
            oauth_state="nonce",
        )

        session_service.clear(session)

        assert session == Session()
