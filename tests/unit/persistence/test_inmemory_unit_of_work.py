"""Unit tests for the in-memory unit of work."""

import asyncio
from uuid import uuid4

import pytest

from skullking.domain.error import TransactionError, ValidationError
from skullking.domain.model import User
from skullking.domain.value import UserId
from skullking.persistence.repository.inmemory import (
    InMemoryDatabase,
    InMemoryUnitOfWork,
)


def make_user(username: str = "flint", email: str | None = None) -> User:
    return User(id=UserId(uuid4()), username=username, email=email)


class TestTransaction:
    """Tests for commit and rollback through async with."""

    @pytest.mark.asyncio
    async def test_clean_exit_commits(
        self, uow: InMemoryUnitOfWork, db: InMemoryDatabase
    ):
        user = make_user()

        async with uow:
            await uow.users.create(user)

        assert user.id in db.users
        assert uow.commit_count == 1
        assert uow.rollback_count == 0

    @pytest.mark.asyncio
    async def test_exception_rolls_back_and_propagates(
        self, uow: InMemoryUnitOfWork, db: InMemoryDatabase
    ):
        """Should undo writes and re-raise the original error."""
        with pytest.raises(ValidationError, match="boom"):
            async with uow:
                await uow.users.create(make_user())
                raise ValidationError("boom")

        assert db.users == {}
        assert uow.rollback_count == 1
        assert uow.commit_count == 0

    @pytest.mark.asyncio
    async def test_cancellation_rolls_back(
        self, uow: InMemoryUnitOfWork, db: InMemoryDatabase
    ):
        with pytest.raises(asyncio.CancelledError):
            async with uow:
                await uow.users.create(make_user())
                raise asyncio.CancelledError()

        assert db.users == {}

    @pytest.mark.asyncio
    async def test_can_be_reentered_after_exit(self, uow: InMemoryUnitOfWork):
        async with uow:
            await uow.users.create(make_user("flint"))
        async with uow:
            await uow.users.create(make_user("silver"))

        assert uow.commit_count == 2

    @pytest.mark.asyncio
    async def test_nested_begin_rejected(self, uow: InMemoryUnitOfWork):
        async with uow:
            with pytest.raises(TransactionError):
                await uow.begin()

    @pytest.mark.asyncio
    async def test_commit_without_transaction_rejected(
        self, uow: InMemoryUnitOfWork
    ):
        with pytest.raises(TransactionError):
            await uow.commit()


class TestSavepoint:
    """Tests for InMemoryUnitOfWork.savepoint()."""

    @pytest.mark.asyncio
    async def test_failed_savepoint_keeps_outer_writes(
        self, uow: InMemoryUnitOfWork, db: InMemoryDatabase
    ):
        """Only the savepoint's own writes are undone."""
        # Arrange
        outer = make_user("flint")
        inner = make_user("silver")

        # Act
        async with uow:
            await uow.users.create(outer)
            with pytest.raises(ValidationError):
                async with uow.savepoint():
                    await uow.users.create(inner)
                    raise ValidationError("inner failure")

        # Assert
        assert outer.id in db.users
        assert inner.id not in db.users
        assert uow.commit_count == 1

    @pytest.mark.asyncio
    async def test_successful_savepoint_is_kept(
        self, uow: InMemoryUnitOfWork, db: InMemoryDatabase
    ):
        user = make_user()

        async with uow:
            async with uow.savepoint():
                await uow.users.create(user)

        assert user.id in db.users

    @pytest.mark.asyncio
    async def test_savepoint_requires_transaction(self, uow: InMemoryUnitOfWork):
        with pytest.raises(TransactionError):
            async with uow.savepoint():
                pass

    @pytest.mark.asyncio
    async def test_outer_rollback_discards_savepoint_writes(
        self, uow: InMemoryUnitOfWork, db: InMemoryDatabase
    ):
        with pytest.raises(ValidationError):
            async with uow:
                async with uow.savepoint():
                    await uow.users.create(make_user())
                raise ValidationError("outer failure")

        assert db.users == {}
