"""In-memory unit of work for testing."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from skullking.domain.error import TransactionError
from skullking.domain.repository import UnitOfWork

from .database import InMemoryDatabase, InMemorySnapshot
from .provider_identity import InMemoryProviderIdentityRepository
from .user import InMemoryUserRepository


class InMemoryUnitOfWork(UnitOfWork):
    """Unit of work over an InMemoryDatabase.

    Rollback restores the snapshot taken when the transaction began, so
    partial writes are undone just as they would be by the database.
    """

    def __init__(self, database: InMemoryDatabase | None = None) -> None:
        self.db = database or InMemoryDatabase()
        self.users = InMemoryUserRepository(self.db)
        self.provider_identities = InMemoryProviderIdentityRepository(self.db)
        self._snapshot: Optional[InMemorySnapshot] = None
        self.commit_count = 0
        self.rollback_count = 0

    async def begin(self) -> None:
        """Start a transaction."""
        if self._snapshot is not None:
            raise TransactionError("Transaction already in progress")
        self._snapshot = self.db.snapshot()

    async def commit(self) -> None:
        """Keep all changes made since begin."""
        if self._snapshot is None:
            raise TransactionError("No active transaction")
        self._snapshot = None
        self.commit_count += 1

    async def rollback(self) -> None:
        """Discard all changes made since begin."""
        if self._snapshot is None:
            raise TransactionError("No active transaction")
        self.db.restore(self._snapshot)
        self._snapshot = None
        self.rollback_count += 1

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """Undo the block's changes if it raises."""
        if self._snapshot is None:
            raise TransactionError("No active transaction")
        inner = self.db.snapshot()
        try:
            yield
        except BaseException:
            self.db.restore(inner)
            raise
