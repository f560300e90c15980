"""Unit of work interface.

A unit of work scopes one database transaction. Repositories obtained from
it share that transaction:

    async with uow:
        user = await uow.users.find_by_id(user_id)
        await uow.provider_identities.create(identity)
    # committed here; rolled back if the block raised

Leaving the block normally commits. Leaving it with any exception, including
asyncio.CancelledError, rolls back and re-raises. A unit of work may be
entered again once the previous block has exited; each entry is a new
transaction.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from types import TracebackType
from typing import Optional, Type

import logfire

from skullking.domain.error import TransactionError
from skullking.domain.repository.provider_identity import ProviderIdentityRepository
from skullking.domain.repository.user import UserRepository


class UnitOfWork(ABC):
    """Scoped transaction guard over the identity store."""

    users: UserRepository
    provider_identities: ProviderIdentityRepository

    @abstractmethod
    async def begin(self) -> None:
        """Start a transaction.

        Raises:
            TransactionError: If the transaction cannot be started
        """
        pass

    @abstractmethod
    async def commit(self) -> None:
        """Commit the current transaction.

        Raises:
            TransactionError: If the commit fails
        """
        pass

    @abstractmethod
    async def rollback(self) -> None:
        """Roll back the current transaction."""
        pass

    @abstractmethod
    def savepoint(self) -> AbstractAsyncContextManager[None]:
        """Open a nested transaction.

        Changes made inside the block are discarded if it raises; the
        exception still propagates to the caller, and the outer transaction
        stays usable.
        """
        pass

    async def __aenter__(self) -> "UnitOfWork":
        await self.begin()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if exc_type is not None:
            try:
                await self.rollback()
                logfire.warn(
                    "Transaction rolled back",
                    error_type=exc_type.__name__,
                    error=str(exc),
                )
            except Exception as rollback_error:
                # The original exception is the one the caller needs
                logfire.error(
                    "Transaction rollback failed",
                    error=str(rollback_error),
                    original_error=str(exc),
                )
            return

        try:
            await self.commit()
        except TransactionError:
            raise
        except Exception as e:
            logfire.error("Transaction commit failed", error=str(e))
            raise TransactionError(f"Commit failed: {e}") from e
