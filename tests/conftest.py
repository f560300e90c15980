"""Test configuration and fixtures."""

import logfire
import pytest

from skullking.config import AuthSettings
from skullking.domain.service import (
    ProviderIdentityService,
    ReconciliationService,
    SessionService,
    UserService,
)
from skullking.persistence.repository.inmemory import (
    InMemoryDatabase,
    InMemoryUnitOfWork,
)

# Local only; nothing is sent anywhere during tests
logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def auth_settings() -> AuthSettings:
    return AuthSettings(session_secret="test-session-secret")


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def uow(db: InMemoryDatabase) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(db)


@pytest.fixture
def session_service(auth_settings: AuthSettings) -> SessionService:
    return SessionService(auth_settings=auth_settings)


@pytest.fixture
def user_service(uow: InMemoryUnitOfWork) -> UserService:
    return UserService(uow=uow)


@pytest.fixture
def provider_identity_service(uow: InMemoryUnitOfWork) -> ProviderIdentityService:
    return ProviderIdentityService(uow=uow)


@pytest.fixture
def reconciliation_service(
    uow: InMemoryUnitOfWork,
    user_service: UserService,
    provider_identity_service: ProviderIdentityService,
    session_service: SessionService,
) -> ReconciliationService:
    return ReconciliationService(
        uow=uow,
        user_service=user_service,
        provider_identity_service=provider_identity_service,
        session_service=session_service,
    )
