"""ProviderIdentity repository implementation using PostgreSQL."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skullking.domain.error import DeleteLastProviderIdentityError, NotFoundError
from skullking.domain.model import ProviderIdentity
from skullking.domain.repository import ProviderIdentityRepository
from skullking.domain.value import AuthProvider, ProviderIdentityId, UserId
from skullking.persistence.errors import translate_errors
from skullking.persistence.mappers import (
    provider_identity_to_dict,
    row_to_provider_identity,
)
from skullking.persistence.tables import user_provider_identities_table

identities = user_provider_identities_table


class PostgresProviderIdentityRepository(ProviderIdentityRepository):
    """PostgreSQL implementation of ProviderIdentityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session bound to the current transaction
        """
        self.session = session

    async def find_by_provider(
        self, provider: AuthProvider, provider_user_id: str
    ) -> Optional[ProviderIdentity]:
        """Get identity by provider and provider user ID.

        Args:
            provider: Authentication provider
            provider_user_id: Provider-specific user ID

        Returns:
            ProviderIdentity if found, None otherwise
        """
        stmt = select(identities).where(
            identities.c.provider == provider.value,
            identities.c.provider_user_id == provider_user_id,
        )
        with translate_errors("provider_identities.find_by_provider"):
            result = await self.session.execute(stmt)
        row = result.mappings().first()

        if not row:
            return None

        return row_to_provider_identity(dict(row))

    async def find_all_by_user_id(self, user_id: UserId) -> list[ProviderIdentity]:
        """Find all identities for a user, ordered by provider.

        Args:
            user_id: User ID to find identities for

        Returns:
            List of ProviderIdentity objects (may be empty)
        """
        stmt = (
            select(identities)
            .where(identities.c.user_id == user_id)
            .order_by(identities.c.provider)
        )
        with translate_errors("provider_identities.find_all_by_user_id"):
            result = await self.session.execute(stmt)
        rows = result.mappings().all()

        return [row_to_provider_identity(dict(row)) for row in rows]

    async def create(self, identity: ProviderIdentity) -> ProviderIdentityId:
        """Insert a provider identity.

        Args:
            identity: Identity to insert

        Returns:
            ID of the inserted identity
        """
        stmt = (
            identities.insert()
            .values(**provider_identity_to_dict(identity))
            .returning(identities.c.id)
        )
        with translate_errors(
            "provider_identities.create",
            provider=identity.provider.value,
            provider_user_id=identity.provider_user_id,
            user_id=str(identity.user_id),
        ):
            result = await self.session.execute(stmt)
            await self.session.flush()
        return ProviderIdentityId(result.scalar_one())

    async def update_details(
        self,
        identity_id: ProviderIdentityId,
        email: str | None,
        display_name: str | None,
        avatar_url: str | None,
    ) -> None:
        """Refresh the provider snapshot of an identity.

        Args:
            identity_id: Identity to update
            email: Provider email
            display_name: Provider display name
            avatar_url: Provider avatar URL
        """
        stmt = (
            identities.update()
            .where(identities.c.id == identity_id)
            .values(
                provider_email=email,
                provider_display_name=display_name,
                provider_avatar_url=avatar_url,
                updated_at=datetime.now(timezone.utc),
            )
        )
        with translate_errors("provider_identities.update_details"):
            result = await self.session.execute(stmt)
            await self.session.flush()
        if result.rowcount == 0:
            raise NotFoundError("ProviderIdentity", str(identity_id))

    async def delete_for_user(self, user_id: UserId, provider: AuthProvider) -> None:
        """Delete the user's identity for a provider.

        The user's identity rows are locked before counting so that two
        concurrent unlinks cannot both pass the count check.

        Args:
            user_id: Owning user
            provider: Provider to unlink
        """
        lock_stmt = (
            select(identities.c.id)
            .where(identities.c.user_id == user_id)
            .with_for_update()
        )
        delete_stmt = identities.delete().where(
            identities.c.user_id == user_id,
            identities.c.provider == provider.value,
        )

        with translate_errors("provider_identities.delete_for_user"):
            locked = await self.session.execute(lock_stmt)
            count = len(locked.all())
            if count <= 1:
                raise DeleteLastProviderIdentityError(str(user_id))

            result = await self.session.execute(delete_stmt)
            await self.session.flush()

        if result.rowcount == 0:
            raise NotFoundError("ProviderIdentity", f"{user_id}:{provider.value}")
