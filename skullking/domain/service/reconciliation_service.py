"""Identity reconciliation domain service.

Decides, for every OAuth callback, which local user an external identity
belongs to. Precedence, highest first:

1. an existing provider identity for (provider, provider_user_id)
2. the target user of a pending linking intent for the same provider
3. an existing user with the same email (implicit merge)
4. a newly registered user

All reads and writes for one callback happen in a single transaction; the
session is only marked as authenticated after that transaction commits.
"""

from dataclasses import dataclass

import logfire

from skullking.domain.error import (
    DomainError,
    InvariantViolationError,
    ProviderIdentityConflictError,
)
from skullking.domain.model import Session, User
from skullking.domain.repository import UnitOfWork
from skullking.domain.value import ExternalIdentity, LinkingIntent

from .base import Service
from .provider_identity_service import ProviderIdentityService
from .session_service import SessionService
from .user_service import UserService
from .username import generate_username_candidate, with_random_suffix


@dataclass
class ReconciliationResult:
    """Outcome of a successful reconciliation."""

    user: User
    linked: bool  # True when the callback completed a linking flow


class ReconciliationService(Service):
    """Maps an external identity onto exactly one local user."""

    def __init__(
        self,
        uow: UnitOfWork,
        user_service: UserService,
        provider_identity_service: ProviderIdentityService,
        session_service: SessionService,
    ) -> None:
        """Initialize reconciliation service.

        Args:
            uow: Unit of work shared with the user and identity services
            user_service: User domain service
            provider_identity_service: Provider identity domain service
            session_service: Session state domain service
        """
        self.uow = uow
        self.user_service = user_service
        self.provider_identity_service = provider_identity_service
        self.session_service = session_service

    async def reconcile(
        self, external: ExternalIdentity, session: Session, attempt: int = 0
    ) -> ReconciliationResult:
        """Resolve the external identity and authenticate the session.

        The linking intent is removed from the session before any store
        access, so it never outlives the callback that consumed it, even when
        reconciliation fails.

        Args:
            external: Identity asserted by the provider
            session: Session state of the current request (mutated)
            attempt: Retry count of the caller; retries register under a
                suffixed username

        Returns:
            The resolved user and whether a linking flow ran

        Raises:
            ProviderIdentityConflictError: If the provider account belongs to
                a different user than the one linking it
            UsernameTakenError: If the generated username collided
            EmailTakenError: If the provider email collided
            NotFoundError: If the linking target user does not exist
            TransactionError: If the transaction could not be committed
            InvariantViolationError: If no user could be resolved
        """
        with logfire.span(
            "reconciliation_service.reconcile",
            provider=external.provider.value,
            provider_user_id=external.provider_user_id,
        ):
            intent = self._take_linking_intent(external, session)

            async with self.uow:
                if intent is not None:
                    user = await self._link_to_intent_user(intent, external)
                else:
                    user = await self._login_or_register(external, attempt)

                if user is None:
                    logfire.error(
                        "No user resolved for external identity",
                        provider=external.provider.value,
                        provider_user_id=external.provider_user_id,
                    )
                    raise InvariantViolationError(
                        "Reconciliation finished without a user"
                    )

                await self._record_login(user)

            # Only reached after a successful commit
            self.session_service.set_authenticated_session(
                session, user.id, user.session_label
            )
            self.session_service.clear_linking_intent(session)

            logfire.info(
                "Identity reconciled",
                user_id=str(user.id),
                provider=external.provider.value,
                linked=intent is not None,
            )
            return ReconciliationResult(user=user, linked=intent is not None)

    def _take_linking_intent(
        self, external: ExternalIdentity, session: Session
    ) -> LinkingIntent | None:
        """Read and clear the linking intent.

        Returns the intent only when it targets the provider of this callback.
        """
        had_keys = self.session_service.has_linking_keys(session)
        intent = self.session_service.get_linking_intent(session)
        self.session_service.clear_linking_intent(session)

        if intent is None:
            if had_keys:
                logfire.warn(
                    "Incomplete linking intent discarded, continuing as login",
                    provider=external.provider.value,
                )
            return None

        if intent.provider != external.provider:
            logfire.warn(
                "Linking intent is for a different provider, continuing as login",
                intent_provider=intent.provider.value,
                provider=external.provider.value,
                user_id=str(intent.user_id),
            )
            return None

        return intent

    async def _link_to_intent_user(
        self, intent: LinkingIntent, external: ExternalIdentity
    ) -> User:
        with logfire.span(
            "reconciliation_service.link",
            user_id=str(intent.user_id),
            provider=external.provider.value,
        ):
            # Ownership is checked before the target user is loaded, so a
            # conflict wins over a missing target
            existing = await self.provider_identity_service.get_identity_by_provider(
                external.provider, external.provider_user_id
            )

            if existing is not None and existing.user_id != intent.user_id:
                logfire.warn(
                    "Provider account already linked to another user",
                    provider=external.provider.value,
                    provider_user_id=external.provider_user_id,
                    owner_id=str(existing.user_id),
                    user_id=str(intent.user_id),
                )
                raise ProviderIdentityConflictError(
                    external.provider.value,
                    external.provider_user_id,
                    owned_by_other=True,
                )

            user = await self.user_service.get_by_id(intent.user_id)

            if existing is None:
                await self.provider_identity_service.link(user.id, external)
                return user

            logfire.info(
                "Provider account already linked to this user",
                identity_id=str(existing.id),
                user_id=str(user.id),
            )
            await self.provider_identity_service.refresh_snapshot(existing, external)
            return user

    async def _login_or_register(
        self, external: ExternalIdentity, attempt: int
    ) -> User:
        with logfire.span(
            "reconciliation_service.login", provider=external.provider.value
        ):
            existing = await self.provider_identity_service.get_identity_by_provider(
                external.provider, external.provider_user_id
            )

            if existing is not None:
                user = await self.user_service.get_by_id(existing.user_id)
                try:
                    async with self.uow.savepoint():
                        await self.provider_identity_service.refresh_snapshot(
                            existing, external
                        )
                except DomainError as e:
                    logfire.warn(
                        "Could not refresh provider details, proceeding with login",
                        identity_id=str(existing.id),
                        error=str(e),
                    )
                return user

            user = None
            email = (external.email or "").strip()
            if email:
                user = await self.user_service.get_user_by_email(email)
                if user is not None:
                    logfire.info(
                        "Linking new provider identity to user with same email",
                        user_id=str(user.id),
                        provider=external.provider.value,
                    )

            if user is None:
                username = generate_username_candidate(
                    external.username_base, external.email
                )
                if attempt:
                    username = with_random_suffix(username)
                user = await self.user_service.register(
                    username=username,
                    email=email or None,
                    display_name=external.display_name,
                    avatar_url=external.avatar_url,
                )

            try:
                await self.provider_identity_service.link(user.id, external)
            except ProviderIdentityConflictError:
                # Another request linked this provider account after our lookup
                logfire.error(
                    "Provider identity appeared concurrently",
                    provider=external.provider.value,
                    provider_user_id=external.provider_user_id,
                    user_id=str(user.id),
                )
                raise

            return user

    async def _record_login(self, user: User) -> None:
        try:
            async with self.uow.savepoint():
                await self.user_service.record_login(user.id)
        except DomainError as e:
            logfire.error(
                "Failed to update last login time, proceeding",
                user_id=str(user.id),
                error=str(e),
            )
