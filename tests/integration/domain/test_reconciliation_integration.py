"""Integration tests for ReconciliationService against PostgreSQL."""

from uuid import uuid4

import pytest

from skullking.domain.error import ProviderIdentityConflictError
from skullking.domain.model import Session
from skullking.domain.repository import UnitOfWork
from skullking.domain.service import ReconciliationService, SessionService
from skullking.domain.value import AuthProvider
from tests.factories import make_external
from tests.harness import create_env_fixture

pytestmark = pytest.mark.integration

integration_env = create_env_fixture(unmock={"persistence"})


class TestReconciliationIntegration:
    """End-to-end reconciliation scenarios on the real schema."""

    @pytest.mark.asyncio
    async def test_register_merge_and_link(self, integration_env):
        """New user, then email merge, then a conflicting link."""
        # Arrange
        service = await integration_env.get(ReconciliationService)
        session_service = await integration_env.get(SessionService)
        uow = await integration_env.get(UnitOfWork)
        tag = uuid4().hex[:10]
        email = f"it_{tag}@example.com"

        # Act: new user via Google
        first = await service.reconcile(
            make_external(
                provider_user_id=f"g-{tag}", email=email, nickname=f"it_{tag}"
            ),
            Session(),
        )

        # Act: GitHub with the same email merges
        merged = await service.reconcile(
            make_external(
                provider=AuthProvider.GITHUB,
                provider_user_id=f"gh-{tag}",
                email=email,
            ),
            Session(),
        )

        # Assert
        assert merged.user.id == first.user.id
        async with uow:
            identities = await uow.provider_identities.find_all_by_user_id(
                first.user.id
            )
        assert [i.provider for i in identities] == [
            AuthProvider.GITHUB,
            AuthProvider.GOOGLE,
        ]

        # Act: another user tries to link the same GitHub account
        other = await service.reconcile(
            make_external(
                provider_user_id=f"g2-{tag}",
                email=f"other_{tag}@example.com",
                nickname=f"other_{tag}",
            ),
            Session(),
        )
        session = Session()
        session_service.set_linking_intent(
            session, other.user.id, AuthProvider.GITHUB
        )

        with pytest.raises(ProviderIdentityConflictError):
            await service.reconcile(
                make_external(
                    provider=AuthProvider.GITHUB, provider_user_id=f"gh-{tag}"
                ),
                session,
            )

        async with uow:
            owner = await uow.provider_identities.find_by_provider(
                AuthProvider.GITHUB, f"gh-{tag}"
            )
        assert owner.user_id == first.user.id
