"""Unlink account use case."""

import logfire
from pydantic import BaseModel

from skullking.application.usecase.base import BaseUseCase
from skullking.domain.repository import UnitOfWork
from skullking.domain.service import ProviderIdentityService
from skullking.domain.value import AuthProvider, UserId


class UnlinkAccountRequest(BaseModel):
    """Unlink account request."""

    user_id: UserId
    provider: AuthProvider


class UnlinkAccountResponse(BaseModel):
    """Unlink account response."""

    message: str


class UnlinkAccountUseCase(BaseUseCase):
    """Use case for removing a linked provider account.

    A user always keeps at least one provider identity.
    """

    def __init__(
        self, uow: UnitOfWork, provider_identity_service: ProviderIdentityService
    ) -> None:
        """Initialize unlink account use case.

        Args:
            uow: Unit of work for the request
            provider_identity_service: Provider identity domain service
        """
        self.uow = uow
        self.provider_identity_service = provider_identity_service

    async def execute(self, request: UnlinkAccountRequest) -> UnlinkAccountResponse:
        """Delete the user's identity for the provider.

        The identity count check and the delete share one transaction.

        Raises:
            DeleteLastProviderIdentityError: If it is the user's only identity
            NotFoundError: If the user has no identity for the provider
        """
        async with self.uow:
            await self.provider_identity_service.unlink(
                request.user_id, request.provider
            )

        logfire.info(
            "Account unlinked",
            user_id=str(request.user_id),
            provider=request.provider.value,
        )
        return UnlinkAccountResponse(
            message=f"Successfully unlinked {request.provider.value} account"
        )
