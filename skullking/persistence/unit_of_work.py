"""PostgreSQL unit of work."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

import logfire
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from skullking.domain.error import TransactionError
from skullking.domain.repository import (
    ProviderIdentityRepository,
    UnitOfWork,
    UserRepository,
)
from skullking.persistence.repository import (
    PostgresProviderIdentityRepository,
    PostgresUserRepository,
)


class PostgresUnitOfWork(UnitOfWork):
    """Unit of work backed by one AsyncSession per transaction."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize unit of work.

        Args:
            session_factory: Factory for creating database sessions
        """
        self.session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._users: Optional[UserRepository] = None
        self._provider_identities: Optional[ProviderIdentityRepository] = None

    @property
    def users(self) -> UserRepository:  # type: ignore[override]
        """User repository bound to the open transaction."""
        if self._users is None:
            raise TransactionError("No active transaction")
        return self._users

    @property
    def provider_identities(self) -> ProviderIdentityRepository:  # type: ignore[override]
        """Provider identity repository bound to the open transaction."""
        if self._provider_identities is None:
            raise TransactionError("No active transaction")
        return self._provider_identities

    async def begin(self) -> None:
        """Open a session and start a transaction."""
        if self._session is not None:
            raise TransactionError("Transaction already in progress")

        session = self.session_factory()
        try:
            await session.begin()
        except SQLAlchemyError as e:
            await session.close()
            logfire.error("Failed to begin transaction", error=str(e))
            raise TransactionError(f"Failed to begin transaction: {e}") from e

        self._session = session
        self._users = PostgresUserRepository(session)
        self._provider_identities = PostgresProviderIdentityRepository(session)

    async def commit(self) -> None:
        """Commit and close the session."""
        session = self._require_session()
        try:
            await session.commit()
            logfire.info("Transaction committed")
        except SQLAlchemyError as e:
            logfire.error("Transaction commit failed", error=str(e))
            await session.rollback()
            raise TransactionError(f"Commit failed: {e}") from e
        finally:
            await self._close()

    async def rollback(self) -> None:
        """Roll back and close the session."""
        session = self._require_session()
        try:
            await session.rollback()
        finally:
            await self._close()

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """Run the block in a SAVEPOINT."""
        session = self._require_session()
        try:
            async with session.begin_nested():
                yield
        except SQLAlchemyError as e:
            # Repositories already translate statement errors, so this is
            # SAVEPOINT / RELEASE itself failing
            raise TransactionError(f"Savepoint failed: {e}") from e

    def _require_session(self) -> AsyncSession:
        if self._session is None:
            raise TransactionError("No active transaction")
        return self._session

    async def _close(self) -> None:
        session = self._session
        self._session = None
        self._users = None
        self._provider_identities = None
        if session is not None:
            await session.close()
