"""Provider identity repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from skullking.domain.model.provider_identity import ProviderIdentity
from skullking.domain.value import AuthProvider, ProviderIdentityId, UserId


class ProviderIdentityRepository(ABC):
    """Repository for ProviderIdentity entity.

    Manages the bindings between users and their external authentication
    provider accounts.
    """

    @abstractmethod
    async def find_by_provider(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[ProviderIdentity]:
        """Find an identity by provider and provider user ID.

        Args:
            provider: The authentication provider
            provider_user_id: The user's ID on that provider

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_all_by_user_id(self, user_id: UserId) -> list[ProviderIdentity]:
        """Get all identities linked to a user, ordered by provider.

        Args:
            user_id: The user's unique identifier

        Returns:
            List of identities (may be empty)
        """
        pass

    @abstractmethod
    async def create(self, identity: ProviderIdentity) -> ProviderIdentityId:
        """Insert a new provider identity.

        Args:
            identity: The identity to insert

        Returns:
            ID of the created identity

        Raises:
            ProviderIdentityConflictError: If the provider account is already
                linked, or the user already has an identity for this provider
        """
        pass

    @abstractmethod
    async def update_details(
        self,
        identity_id: ProviderIdentityId,
        email: str | None,
        display_name: str | None,
        avatar_url: str | None,
    ) -> None:
        """Refresh the provider-reported snapshot of an identity.

        Args:
            identity_id: The identity to update
            email: Email reported by the provider
            display_name: Display name reported by the provider
            avatar_url: Avatar URL reported by the provider

        Raises:
            NotFoundError: If no identity has this ID
        """
        pass

    @abstractmethod
    async def delete_for_user(self, user_id: UserId, provider: AuthProvider) -> None:
        """Unlink a provider from a user.

        The count of the user's identities is checked in the same
        transaction as the delete.

        Args:
            user_id: The owning user
            provider: Provider to unlink

        Raises:
            DeleteLastProviderIdentityError: If this is the user's only identity
            NotFoundError: If the user has no identity for this provider
        """
        pass
