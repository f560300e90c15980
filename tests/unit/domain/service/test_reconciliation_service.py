"""Unit tests for ReconciliationService."""

from uuid import uuid4

import pytest

from skullking.domain.error import (
    EmailTakenError,
    NotFoundError,
    ProviderIdentityConflictError,
    RepositoryError,
    TransactionError,
    UsernameTakenError,
)
from skullking.domain.model import Session, User
from skullking.domain.service import (
    ProviderIdentityService,
    ReconciliationService,
    SessionService,
    UserService,
)
from skullking.domain.value import AuthProvider, UserId
from skullking.persistence.repository.inmemory import (
    InMemoryDatabase,
    InMemoryProviderIdentityRepository,
    InMemoryUnitOfWork,
    InMemoryUserRepository,
)
from tests.factories import make_external


class FailingCommitUnitOfWork(InMemoryUnitOfWork):
    """Unit of work whose commit always fails."""

    async def commit(self) -> None:
        await self.rollback()
        raise TransactionError("Commit failed: connection lost")


class FailingLinkRepository(InMemoryProviderIdentityRepository):
    """Identity repository whose inserts fail after the user was written."""

    async def create(self, identity):
        raise RepositoryError("provider_identities.create", RuntimeError("disk full"))


class FailingLastLoginRepository(InMemoryUserRepository):
    """User repository whose last-login update fails."""

    async def update_last_login(self, user_id, at):
        raise RepositoryError("users.update_last_login", RuntimeError("timeout"))


class FailingRefreshRepository(InMemoryProviderIdentityRepository):
    """Identity repository whose snapshot refresh fails."""

    async def update_details(self, identity_id, email, display_name, avatar_url):
        raise RepositoryError(
            "provider_identities.update_details", RuntimeError("timeout")
        )


def build_service(
    uow: InMemoryUnitOfWork, session_service: SessionService
) -> ReconciliationService:
    return ReconciliationService(
        uow=uow,
        user_service=UserService(uow=uow),
        provider_identity_service=ProviderIdentityService(uow=uow),
        session_service=session_service,
    )


async def seed_user(
    uow: InMemoryUnitOfWork,
    provider: AuthProvider = AuthProvider.GOOGLE,
    provider_user_id: str = "g-123",
    username: str = "alice",
    email: str | None = "alice@example.com",
) -> User:
    """Register a user with one linked identity, committed."""
    async with uow:
        user = await UserService(uow=uow).register(
            username=username,
            email=email,
            display_name="Alice Smith",
            avatar_url=None,
        )
        await ProviderIdentityService(uow=uow).link(
            user.id,
            make_external(
                provider=provider, provider_user_id=provider_user_id, email=email
            ),
        )
    return user


class TestNewUser:
    """First login with an unknown identity and unknown email."""

    @pytest.mark.asyncio
    async def test_registers_user_and_links_identity(
        self,
        reconciliation_service: ReconciliationService,
        db: InMemoryDatabase,
    ):
        """Should create one user and one identity owned by it."""
        # Arrange
        session = Session()
        external = make_external(nickname="AliceS")

        # Act
        result = await reconciliation_service.reconcile(external, session)

        # Assert
        assert not result.linked
        assert len(db.users) == 1
        assert len(db.identities) == 1

        user = db.users[result.user.id]
        assert user.username == "alices"
        assert user.email == "alice@example.com"
        assert user.display_name == "Alice Smith"
        assert user.avatar_url == "https://example.com/alice.png"
        assert user.last_login_at is not None

        identity = next(iter(db.identities.values()))
        assert identity.user_id == user.id
        assert identity.provider == AuthProvider.GOOGLE
        assert identity.provider_user_id == "g-123"
        assert identity.provider_email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_authenticates_session(
        self, reconciliation_service: ReconciliationService
    ):
        """Should mark the session as logged in with the display name."""
        session = Session()

        result = await reconciliation_service.reconcile(make_external(), session)

        assert session.user_id == str(result.user.id)
        assert session.user_name == "Alice Smith"

    @pytest.mark.asyncio
    async def test_session_label_falls_back_to_username(
        self, reconciliation_service: ReconciliationService
    ):
        session = Session()
        external = make_external(display_name=None, nickname="flint")

        await reconciliation_service.reconcile(external, session)

        assert session.user_name == "flint"

    @pytest.mark.asyncio
    async def test_registers_without_email(
        self,
        reconciliation_service: ReconciliationService,
        db: InMemoryDatabase,
    ):
        """A provider that withholds the email still yields an account."""
        session = Session()
        external = make_external(email=None, nickname="nomail")

        result = await reconciliation_service.reconcile(external, session)

        assert result.user.email is None
        assert result.user.username == "nomail"
        assert len(db.identities) == 1

    @pytest.mark.asyncio
    async def test_blank_email_is_stored_as_null(
        self,
        reconciliation_service: ReconciliationService,
        db: InMemoryDatabase,
    ):
        session = Session()

        result = await reconciliation_service.reconcile(
            make_external(email="   "), session
        )

        assert db.users[result.user.id].email is None

    @pytest.mark.asyncio
    async def test_retry_attempt_suffixes_username(
        self, reconciliation_service: ReconciliationService
    ):
        """Retries register under a suffixed username."""
        session = Session()
        external = make_external(nickname="blackbeard")

        result = await reconciliation_service.reconcile(external, session, attempt=1)

        assert result.user.username.startswith("blackbeard_")
        assert len(result.user.username) == len("blackbeard_") + 4

    @pytest.mark.asyncio
    async def test_username_collision_rolls_back(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
        db: InMemoryDatabase,
    ):
        """A taken username aborts the callback without partial writes."""
        # Arrange
        await seed_user(uow, username="alices", email="other@example.com")
        session = Session()
        external = make_external(provider_user_id="g-999", nickname="AliceS")

        # Act / Assert
        with pytest.raises(UsernameTakenError):
            await reconciliation_service.reconcile(external, session)

        assert len(db.users) == 1
        assert len(db.identities) == 1
        assert not session.is_authenticated


class TestExistingIdentityLogin:
    """Returning user logging in with an already linked identity."""

    @pytest.mark.asyncio
    async def test_logs_in_owner(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
        db: InMemoryDatabase,
    ):
        """Should resolve to the owner without creating anything."""
        # Arrange
        user = await seed_user(uow)
        session = Session()

        # Act
        result = await reconciliation_service.reconcile(make_external(), session)

        # Assert
        assert result.user.id == user.id
        assert not result.linked
        assert len(db.users) == 1
        assert len(db.identities) == 1
        assert session.user_id == str(user.id)
        assert db.users[user.id].last_login_at is not None

    @pytest.mark.asyncio
    async def test_refreshes_provider_snapshot(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
        db: InMemoryDatabase,
    ):
        """Provider details are overwritten with the latest values."""
        await seed_user(uow)
        external = make_external(
            email="alice@new.example.com",
            display_name="Alice S.",
            avatar_url="https://example.com/new.png",
        )

        await reconciliation_service.reconcile(external, Session())

        identity = next(iter(db.identities.values()))
        assert identity.provider_email == "alice@new.example.com"
        assert identity.provider_display_name == "Alice S."
        assert identity.provider_avatar_url == "https://example.com/new.png"

    @pytest.mark.asyncio
    async def test_does_not_touch_user_profile(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
        db: InMemoryDatabase,
    ):
        """The local profile is owned by the user, not the provider."""
        user = await seed_user(uow)

        await reconciliation_service.reconcile(
            make_external(email="changed@example.com", display_name="Changed"),
            Session(),
        )

        stored = db.users[user.id]
        assert stored.email == "alice@example.com"
        assert stored.display_name == "Alice Smith"

    @pytest.mark.asyncio
    async def test_identity_wins_over_email_match(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
    ):
        """The identity owner is chosen even if another user has the email."""
        owner = await seed_user(uow, email="alice@example.com")
        other = await seed_user(
            uow,
            provider=AuthProvider.GITHUB,
            provider_user_id="gh-1",
            username="bob",
            email="bob@example.com",
        )

        result = await reconciliation_service.reconcile(
            make_external(email="bob@example.com"), Session()
        )

        assert result.user.id == owner.id
        assert result.user.id != other.id

    @pytest.mark.asyncio
    async def test_refresh_failure_does_not_block_login(
        self, session_service: SessionService
    ):
        """A failed snapshot refresh is logged and the login proceeds."""
        # Arrange
        uow = InMemoryUnitOfWork()
        await seed_user(uow)
        uow.provider_identities = FailingRefreshRepository(uow.db)
        service = build_service(uow, session_service)
        session = Session()

        # Act
        result = await service.reconcile(make_external(), session)

        # Assert
        assert session.user_id == str(result.user.id)


class TestEmailMerge:
    """New provider account whose email matches an existing user."""

    @pytest.mark.asyncio
    async def test_links_to_existing_user(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
        db: InMemoryDatabase,
    ):
        """Should attach the new identity to the user with that email."""
        # Arrange
        user = await seed_user(uow)
        external = make_external(
            provider=AuthProvider.GITHUB,
            provider_user_id="gh-42",
            nickname="alice-gh",
        )
        session = Session()

        # Act
        result = await reconciliation_service.reconcile(external, session)

        # Assert
        assert result.user.id == user.id
        assert not result.linked
        assert len(db.users) == 1
        identities = await uow.provider_identities.find_all_by_user_id(user.id)
        assert [i.provider for i in identities] == [
            AuthProvider.GITHUB,
            AuthProvider.GOOGLE,
        ]

    @pytest.mark.asyncio
    async def test_same_provider_different_account_conflicts(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
        db: InMemoryDatabase,
    ):
        """A user holds at most one identity per provider."""
        await seed_user(uow)
        session = Session()
        external = make_external(provider_user_id="g-other")

        with pytest.raises(ProviderIdentityConflictError):
            await reconciliation_service.reconcile(external, session)

        assert len(db.identities) == 1
        assert not session.is_authenticated


class TestLinking:
    """Authenticated user attaching another provider."""

    @pytest.mark.asyncio
    async def test_links_new_provider_to_intent_user(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
        session_service: SessionService,
        db: InMemoryDatabase,
    ):
        """Should attach the identity to the linking user, not by email."""
        # Arrange
        user = await seed_user(uow)
        session = Session()
        session_service.set_linking_intent(session, user.id, AuthProvider.GITHUB)
        external = make_external(
            provider=AuthProvider.GITHUB,
            provider_user_id="gh-7",
            email="someone.else@example.com",
        )

        # Act
        result = await reconciliation_service.reconcile(external, session)

        # Assert
        assert result.linked
        assert result.user.id == user.id
        assert len(db.users) == 1
        identity = await uow.provider_identities.find_by_provider(
            AuthProvider.GITHUB, "gh-7"
        )
        assert identity is not None
        assert identity.user_id == user.id
        assert session.user_id == str(user.id)
        assert not session_service.has_linking_keys(session)

    @pytest.mark.asyncio
    async def test_relinking_same_account_is_idempotent(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
        session_service: SessionService,
        db: InMemoryDatabase,
    ):
        """Linking an account the user already owns refreshes it."""
        user = await seed_user(uow)
        session = Session()
        session_service.set_linking_intent(session, user.id, AuthProvider.GOOGLE)

        result = await reconciliation_service.reconcile(
            make_external(display_name="Alice Renamed"), session
        )

        assert result.linked
        assert result.user.id == user.id
        assert len(db.identities) == 1
        identity = next(iter(db.identities.values()))
        assert identity.provider_display_name == "Alice Renamed"

    @pytest.mark.asyncio
    async def test_account_owned_by_other_user_conflicts(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
        session_service: SessionService,
        db: InMemoryDatabase,
    ):
        """Should refuse to move an identity between users."""
        # Arrange
        owner = await seed_user(
            uow, provider=AuthProvider.GITHUB, provider_user_id="gh-7"
        )
        linker = await seed_user(
            uow, provider_user_id="g-bob", username="bob", email="bob@example.com"
        )
        session = Session(user_id=str(linker.id), user_name="bob")
        session_service.set_linking_intent(session, linker.id, AuthProvider.GITHUB)
        external = make_external(provider=AuthProvider.GITHUB, provider_user_id="gh-7")

        # Act / Assert
        with pytest.raises(ProviderIdentityConflictError) as exc_info:
            await reconciliation_service.reconcile(external, session)

        assert exc_info.value.owned_by_other
        identity = await uow.provider_identities.find_by_provider(
            AuthProvider.GITHUB, "gh-7"
        )
        assert identity.user_id == owner.id
        assert len(db.identities) == 2
        assert not session_service.has_linking_keys(session)
        assert session.user_id == str(linker.id)

    @pytest.mark.asyncio
    async def test_missing_intent_user_fails(
        self,
        reconciliation_service: ReconciliationService,
        session_service: SessionService,
        db: InMemoryDatabase,
    ):
        """An intent for a deleted user aborts without registering anyone."""
        session = Session()
        session_service.set_linking_intent(
            session, UserId(uuid4()), AuthProvider.GOOGLE
        )

        with pytest.raises(NotFoundError):
            await reconciliation_service.reconcile(make_external(), session)

        assert db.users == {}
        assert not session_service.has_linking_keys(session)
        assert not session.is_authenticated

    @pytest.mark.asyncio
    async def test_ownership_conflict_wins_over_missing_intent_user(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
        session_service: SessionService,
    ):
        """An account owned by someone else is reported before the target lookup."""
        await seed_user(uow)
        session = Session()
        session_service.set_linking_intent(
            session, UserId(uuid4()), AuthProvider.GOOGLE
        )

        with pytest.raises(ProviderIdentityConflictError) as exc_info:
            await reconciliation_service.reconcile(make_external(), session)

        assert exc_info.value.owned_by_other
        assert not session.is_authenticated

    @pytest.mark.asyncio
    async def test_second_account_of_linked_provider_conflicts(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
        session_service: SessionService,
        db: InMemoryDatabase,
    ):
        """An unowned account is still refused when the user has that provider."""
        user = await seed_user(uow)
        session = Session(user_id=str(user.id), user_name="alice")
        session_service.set_linking_intent(session, user.id, AuthProvider.GOOGLE)

        with pytest.raises(ProviderIdentityConflictError) as exc_info:
            await reconciliation_service.reconcile(
                make_external(provider_user_id="g3"), session
            )

        assert not exc_info.value.owned_by_other
        assert len(db.identities) == 1

    @pytest.mark.asyncio
    async def test_intent_for_other_provider_falls_back_to_login(
        self,
        uow: InMemoryUnitOfWork,
        reconciliation_service: ReconciliationService,
        session_service: SessionService,
        db: InMemoryDatabase,
    ):
        """Should ignore an intent that names a different provider."""
        # Arrange
        linker = await seed_user(
            uow, provider_user_id="g-bob", username="bob", email="bob@example.com"
        )
        session = Session()
        session_service.set_linking_intent(session, linker.id, AuthProvider.GITHUB)
        external = make_external(provider_user_id="g-new", email="new@example.com")

        # Act
        result = await reconciliation_service.reconcile(external, session)

        # Assert
        assert not result.linked
        assert result.user.id != linker.id
        assert len(db.users) == 2
        assert not session_service.has_linking_keys(session)

    @pytest.mark.asyncio
    async def test_partial_intent_falls_back_to_login(
        self,
        reconciliation_service: ReconciliationService,
        session_service: SessionService,
    ):
        """Only one linking key present is treated as no intent and cleared."""
        session = Session(linking_provider="google")

        result = await reconciliation_service.reconcile(make_external(), session)

        assert not result.linked
        assert session.linking_provider is None
        assert session.linking_user_id is None


class TestAtomicity:
    """Failure handling across the callback transaction."""

    @pytest.mark.asyncio
    async def test_identity_insert_failure_discards_new_user(
        self, session_service: SessionService
    ):
        """A user without an identity is never left behind."""
        # Arrange
        uow = InMemoryUnitOfWork()
        uow.provider_identities = FailingLinkRepository(uow.db)
        service = build_service(uow, session_service)
        session = Session()

        # Act / Assert
        with pytest.raises(RepositoryError):
            await service.reconcile(make_external(), session)

        assert uow.db.users == {}
        assert uow.rollback_count == 1
        assert not session.is_authenticated

    @pytest.mark.asyncio
    async def test_commit_failure_leaves_session_unauthenticated(
        self, session_service: SessionService
    ):
        """The session is only authenticated after a successful commit."""
        # Arrange
        uow = FailingCommitUnitOfWork()
        service = build_service(uow, session_service)
        session = Session()
        session_service.set_linking_intent(
            session, UserId(uuid4()), AuthProvider.GITHUB
        )

        # Act / Assert
        with pytest.raises(TransactionError):
            await service.reconcile(make_external(), session)

        assert uow.db.users == {}
        assert uow.db.identities == {}
        assert not session.is_authenticated
        assert not session_service.has_linking_keys(session)

    @pytest.mark.asyncio
    async def test_last_login_failure_is_not_fatal(
        self, session_service: SessionService
    ):
        """Failing to record the login time still completes the login."""
        # Arrange
        uow = InMemoryUnitOfWork()
        uow.users = FailingLastLoginRepository(uow.db)
        service = build_service(uow, session_service)
        session = Session()

        # Act
        result = await service.reconcile(make_external(), session)

        # Assert
        assert uow.commit_count == 1
        assert uow.db.users[result.user.id].last_login_at is None
        assert len(uow.db.identities) == 1
        assert session.user_id == str(result.user.id)

    @pytest.mark.asyncio
    async def test_email_collision_rolls_back(
        self, session_service: SessionService
    ):
        """EmailTakenError propagates after rollback."""

        class EmailLookupMissesRepository(InMemoryUserRepository):
            # Simulates a concurrent registration with the same email
            async def find_by_email(self, email):
                return None

        uow = InMemoryUnitOfWork()
        await seed_user(uow, provider=AuthProvider.GITHUB, provider_user_id="gh-1")
        uow.users = EmailLookupMissesRepository(uow.db)
        service = build_service(uow, session_service)

        with pytest.raises(EmailTakenError):
            await service.reconcile(make_external(nickname="alice2"), Session())

        assert len(uow.db.users) == 1
        assert len(uow.db.identities) == 1
