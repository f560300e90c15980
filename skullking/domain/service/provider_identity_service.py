"""Provider identity domain service."""

from datetime import datetime, timezone
from uuid import uuid4

import logfire

from skullking.domain.model import ProviderIdentity
from skullking.domain.repository import UnitOfWork
from skullking.domain.value import (
    AuthProvider,
    ExternalIdentity,
    ProviderIdentityId,
    UserId,
)


class ProviderIdentityService:
    """Domain service for provider identity operations.

    Methods run on the caller's open unit of work.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        """Initialize provider identity service.

        Args:
            uow: Unit of work providing the provider identity repository
        """
        self.uow = uow

    async def get_identity_by_provider(
        self, provider: AuthProvider, provider_user_id: str
    ) -> ProviderIdentity | None:
        """Get identity by provider and provider user ID.

        Args:
            provider: Authentication provider
            provider_user_id: Provider-specific user ID

        Returns:
            Identity if found, None otherwise
        """
        with logfire.span(
            "provider_identity_service.get_identity_by_provider",
            provider=provider.value,
            provider_user_id=provider_user_id,
        ):
            identity = await self.uow.provider_identities.find_by_provider(
                provider, provider_user_id
            )
            if identity:
                logfire.info(
                    "Identity found",
                    provider=provider.value,
                    provider_user_id=provider_user_id,
                    user_id=str(identity.user_id),
                )
            else:
                logfire.info(
                    "Identity not found",
                    provider=provider.value,
                    provider_user_id=provider_user_id,
                )
            return identity

    async def get_all_identities_for_user(
        self, user_id: UserId
    ) -> list[ProviderIdentity]:
        """Get all identities linked to a user.

        Args:
            user_id: User ID

        Returns:
            List of identities (may be empty)
        """
        with logfire.span(
            "provider_identity_service.get_all_identities_for_user",
            user_id=str(user_id),
        ):
            identities = await self.uow.provider_identities.find_all_by_user_id(
                user_id
            )
            logfire.info(
                "Identities retrieved for user",
                user_id=str(user_id),
                count=len(identities),
            )
            return identities

    async def link(
        self, user_id: UserId, external: ExternalIdentity
    ) -> ProviderIdentityId:
        """Create a provider identity owned by the given user.

        Args:
            user_id: Owning user
            external: Identity reported by the provider

        Returns:
            ID of the new identity

        Raises:
            ProviderIdentityConflictError: If the provider account is already linked
        """
        with logfire.span(
            "provider_identity_service.link",
            user_id=str(user_id),
            provider=external.provider.value,
            provider_user_id=external.provider_user_id,
        ):
            now = datetime.now(timezone.utc)
            identity = ProviderIdentity(
                id=ProviderIdentityId(uuid4()),
                user_id=user_id,
                provider=external.provider,
                provider_user_id=external.provider_user_id,
                provider_email=external.email,
                provider_display_name=external.display_name,
                provider_avatar_url=external.avatar_url,
                created_at=now,
                updated_at=now,
            )
            identity_id = await self.uow.provider_identities.create(identity)
            logfire.info(
                "Provider identity linked",
                identity_id=str(identity_id),
                user_id=str(user_id),
                provider=external.provider.value,
            )
            return identity_id

    async def refresh_snapshot(
        self, identity: ProviderIdentity, external: ExternalIdentity
    ) -> None:
        """Overwrite the stored provider details with the latest ones.

        Raises:
            NotFoundError: If the identity no longer exists
        """
        with logfire.span(
            "provider_identity_service.refresh_snapshot",
            identity_id=str(identity.id),
            provider=identity.provider.value,
        ):
            await self.uow.provider_identities.update_details(
                identity.id,
                email=external.email,
                display_name=external.display_name,
                avatar_url=external.avatar_url,
            )

    async def unlink(self, user_id: UserId, provider: AuthProvider) -> None:
        """Remove the user's identity for a provider.

        Raises:
            DeleteLastProviderIdentityError: If it is the user's only identity
            NotFoundError: If the user has no identity for this provider
        """
        with logfire.span(
            "provider_identity_service.unlink",
            user_id=str(user_id),
            provider=provider.value,
        ):
            await self.uow.provider_identities.delete_for_user(user_id, provider)
            logfire.info(
                "Provider identity unlinked",
                user_id=str(user_id),
                provider=provider.value,
            )
