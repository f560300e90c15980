"""User domain service."""

from datetime import datetime, timezone
from uuid import uuid4

import logfire

from skullking.domain.error import NotFoundError
from skullking.domain.model import User
from skullking.domain.repository import UnitOfWork
from skullking.domain.value import UserId, UserProfilePatch


class UserService:
    """Domain service for user operations.

    Methods run on the caller's open unit of work.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        """Initialize user service.

        Args:
            uow: Unit of work providing the user repository
        """
        self.uow = uow

    async def get_by_id(self, user_id: UserId) -> User:
        """Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User entity

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("user_service.get_by_id", user_id=str(user_id)):
            user = await self.uow.users.find_by_id(user_id)
            if not user:
                logfire.warn("User not found", user_id=str(user_id))
                raise NotFoundError("User", str(user_id))
            logfire.info("User found", user_id=str(user_id), username=user.username)
            return user

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email.

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        with logfire.span("user_service.get_user_by_email", email=email):
            user = await self.uow.users.find_by_email(email)
            if user:
                logfire.info("User found", email=email, user_id=str(user.id))
            else:
                logfire.info("No user with email", email=email)
            return user

    async def register(
        self,
        username: str,
        email: str | None,
        display_name: str | None,
        avatar_url: str | None,
    ) -> User:
        """Create a new user and read it back.

        Makes exactly one insert attempt; uniqueness conflicts propagate.

        Args:
            username: Generated username
            email: Provider email (blank values are stored as NULL)
            display_name: Provider display name
            avatar_url: Provider avatar URL

        Returns:
            The stored user

        Raises:
            ValidationError: If the username is blank
            UsernameTakenError: If the username is already in use
            EmailTakenError: If the email is already in use
        """
        with logfire.span("user_service.register", username=username):
            now = datetime.now(timezone.utc)
            user = User(
                id=UserId(uuid4()),
                username=username,
                email=email.strip() if email and email.strip() else None,
                display_name=display_name or None,
                avatar_url=avatar_url or None,
                created_at=now,
                updated_at=now,
            )
            user_id = await self.uow.users.create(user)
            logfire.info("User created", user_id=str(user_id), username=username)
            return await self.get_by_id(user_id)

    async def record_login(self, user_id: UserId) -> None:
        """Update the user's last login timestamp.

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("user_service.record_login", user_id=str(user_id)):
            await self.uow.users.update_last_login(user_id, datetime.now(timezone.utc))

    async def update_profile(self, user_id: UserId, patch: UserProfilePatch) -> User:
        """Apply a profile patch and return the updated user.

        An empty patch leaves the user untouched.

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span("user_service.update_profile", user_id=str(user_id)):
            if patch.is_empty():
                logfire.info("Empty profile patch", user_id=str(user_id))
                return await self.get_by_id(user_id)

            await self.uow.users.update_profile(user_id, patch)
            logfire.info(
                "Profile updated",
                user_id=str(user_id),
                fields=sorted(patch.model_dump(exclude_none=True)),
            )
            return await self.get_by_id(user_id)

    async def update_theme(
        self, user_id: UserId, ui_theme: str, color_theme: str
    ) -> User:
        """Store theme preferences and return the updated user.

        Raises:
            NotFoundError: If user not found
        """
        with logfire.span(
            "user_service.update_theme",
            user_id=str(user_id),
            ui_theme=ui_theme,
            color_theme=color_theme,
        ):
            await self.uow.users.update_theme(user_id, ui_theme, color_theme)
            return await self.get_by_id(user_id)

    async def search(self, query: str, limit: int) -> list[User]:
        """Search users by username or display name."""
        with logfire.span("user_service.search", query=query, limit=limit):
            users = await self.uow.users.search(query, limit)
            logfire.info("User search completed", query=query, results=len(users))
            return users
