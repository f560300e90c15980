"""In-memory provider identity repository for testing."""

from datetime import datetime, timezone
from typing import Optional

from skullking.domain.error import (
    DeleteLastProviderIdentityError,
    NotFoundError,
    ProviderIdentityConflictError,
)
from skullking.domain.model.provider_identity import ProviderIdentity
from skullking.domain.repository.provider_identity import ProviderIdentityRepository
from skullking.domain.value import AuthProvider, ProviderIdentityId, UserId

from .database import InMemoryDatabase


class InMemoryProviderIdentityRepository(ProviderIdentityRepository):
    """In-memory implementation of ProviderIdentityRepository for testing.

    Enforces the schema's unique and foreign key constraints.
    """

    def __init__(self, database: InMemoryDatabase | None = None) -> None:
        self.db = database or InMemoryDatabase()

    async def find_by_provider(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[ProviderIdentity]:
        """Find identity by provider and provider user ID."""
        for identity in self.db.identities.values():
            if (
                identity.provider == provider
                and identity.provider_user_id == provider_user_id
            ):
                return identity
        return None

    async def find_all_by_user_id(self, user_id: UserId) -> list[ProviderIdentity]:
        """Find all identities for a user, ordered by provider."""
        matches = [i for i in self.db.identities.values() if i.user_id == user_id]
        matches.sort(key=lambda i: i.provider.value)
        return matches

    async def create(self, identity: ProviderIdentity) -> ProviderIdentityId:
        """Insert an identity, rejecting duplicates."""
        if identity.user_id not in self.db.users:
            raise NotFoundError("User", str(identity.user_id))

        for existing in self.db.identities.values():
            same_account = (
                existing.provider == identity.provider
                and existing.provider_user_id == identity.provider_user_id
            )
            same_user_provider = (
                existing.user_id == identity.user_id
                and existing.provider == identity.provider
            )
            if same_account or same_user_provider:
                raise ProviderIdentityConflictError(
                    identity.provider.value, identity.provider_user_id
                )

        self.db.identities[identity.id] = identity
        return identity.id

    async def update_details(
        self,
        identity_id: ProviderIdentityId,
        email: str | None,
        display_name: str | None,
        avatar_url: str | None,
    ) -> None:
        """Refresh the provider snapshot of an identity."""
        identity = self.db.identities.get(identity_id)
        if identity is None:
            raise NotFoundError("ProviderIdentity", str(identity_id))
        self.db.identities[identity_id] = identity.model_copy(
            update={
                "provider_email": email,
                "provider_display_name": display_name,
                "provider_avatar_url": avatar_url,
                "updated_at": datetime.now(timezone.utc),
            }
        )

    async def delete_for_user(self, user_id: UserId, provider: AuthProvider) -> None:
        """Delete the user's identity for a provider."""
        owned = [i for i in self.db.identities.values() if i.user_id == user_id]
        if len(owned) <= 1:
            raise DeleteLastProviderIdentityError(str(user_id))

        for identity in owned:
            if identity.provider == provider:
                del self.db.identities[identity.id]
                return

        raise NotFoundError("ProviderIdentity", f"{user_id}:{provider.value}")
