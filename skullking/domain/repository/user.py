"""User repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from skullking.domain.model.user import User
from skullking.domain.value import UserId, UserProfilePatch


class UserRepository(ABC):
    """Repository for User aggregate.

    All operations run on the transaction of the unit of work that owns
    the repository instance.
    """

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: The user's unique identifier

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by email address.

        Args:
            email: Email address to look up

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, user: User) -> UserId:
        """Insert a new user.

        Args:
            user: The user to insert

        Returns:
            ID of the created user

        Raises:
            ValidationError: If the username is blank
            UsernameTakenError: If the username is already in use
            EmailTakenError: If the email is already in use
        """
        pass

    @abstractmethod
    async def update_last_login(self, user_id: UserId, at: datetime) -> None:
        """Record a successful login.

        Args:
            user_id: The user that logged in
            at: Login timestamp

        Raises:
            NotFoundError: If no user has this ID
        """
        pass

    @abstractmethod
    async def update_profile(self, user_id: UserId, patch: UserProfilePatch) -> None:
        """Apply a partial profile update.

        Args:
            user_id: The user to update
            patch: Fields to change; unset fields are left untouched

        Raises:
            NotFoundError: If no user has this ID
        """
        pass

    @abstractmethod
    async def update_theme(
        self, user_id: UserId, ui_theme: str, color_theme: str
    ) -> None:
        """Store the user's theme preferences.

        Args:
            user_id: The user to update
            ui_theme: UI theme name (e.g. "dark")
            color_theme: Color scheme name

        Raises:
            NotFoundError: If no user has this ID
        """
        pass

    @abstractmethod
    async def search(self, query: str, limit: int) -> list[User]:
        """Find users whose username or display name contains the query.

        Matching is case-insensitive. Results are ranked exact username,
        exact display name, username prefix, display name prefix, then any
        other match, ties broken by username.

        Args:
            query: Text to look for; must not be blank
            limit: Maximum number of users to return

        Returns:
            Matching users, best match first
        """
        pass
