"""Get linked accounts use case."""

from pydantic import BaseModel

from skullking.application.usecase.base import BaseUseCase
from skullking.domain.repository import UnitOfWork
from skullking.domain.service import ProviderIdentityService
from skullking.domain.value import AuthProvider, UserId


class GetLinkedAccountsRequest(BaseModel):
    """Get linked accounts request."""

    user_id: UserId


class LinkedAccount(BaseModel):
    """Provider account linked to a user, as last reported by the provider."""

    provider_name: AuthProvider
    provider_display_name: str | None
    provider_avatar_url: str | None
    provider_email: str | None


class GetLinkedAccountsResponse(BaseModel):
    """Get linked accounts response."""

    accounts: list[LinkedAccount]


class GetLinkedAccountsUseCase(BaseUseCase):
    """Use case for listing the provider accounts linked to a user."""

    def __init__(
        self, uow: UnitOfWork, provider_identity_service: ProviderIdentityService
    ) -> None:
        self.uow = uow
        self.provider_identity_service = provider_identity_service

    async def execute(
        self, request: GetLinkedAccountsRequest
    ) -> GetLinkedAccountsResponse:
        """List linked accounts ordered by provider name."""
        async with self.uow:
            identities = await self.provider_identity_service.get_all_identities_for_user(
                request.user_id
            )

        return GetLinkedAccountsResponse(
            accounts=[
                LinkedAccount(
                    provider_name=identity.provider,
                    provider_display_name=identity.provider_display_name,
                    provider_avatar_url=identity.provider_avatar_url,
                    provider_email=identity.provider_email,
                )
                for identity in identities
            ]
        )
