"""In-memory user repository for testing."""

from datetime import datetime, timezone
from typing import Optional

from skullking.domain.error import (
    EmailTakenError,
    NotFoundError,
    UsernameTakenError,
    ValidationError,
)
from skullking.domain.model.user import User
from skullking.domain.repository.user import UserRepository
from skullking.domain.value import UserId, UserProfilePatch

from .database import InMemoryDatabase


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing.

    Enforces the same uniqueness rules as the database schema.
    """

    def __init__(self, database: InMemoryDatabase | None = None) -> None:
        self.db = database or InMemoryDatabase()

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID."""
        return self.db.users.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by their email."""
        for user in self.db.users.values():
            if user.email == email:
                return user
        return None

    async def create(self, user: User) -> UserId:
        """Insert a user, rejecting duplicate usernames and emails."""
        if not user.username.strip():
            raise ValidationError("Username must not be empty")

        for existing in self.db.users.values():
            if existing.username == user.username:
                raise UsernameTakenError(user.username)
            if user.email is not None and existing.email == user.email:
                raise EmailTakenError(user.email)

        self.db.users[user.id] = user
        return user.id

    async def update_last_login(self, user_id: UserId, at: datetime) -> None:
        """Set last_login_at for a user."""
        self._update(user_id, last_login_at=at, updated_at=at)

    async def update_profile(self, user_id: UserId, patch: UserProfilePatch) -> None:
        """Write the fields set on the patch."""
        self._update(
            user_id,
            **patch.model_dump(exclude_none=True),
            updated_at=datetime.now(timezone.utc),
        )

    async def update_theme(
        self, user_id: UserId, ui_theme: str, color_theme: str
    ) -> None:
        """Store theme preferences."""
        self._update(
            user_id,
            ui_theme=ui_theme,
            color_theme=color_theme,
            updated_at=datetime.now(timezone.utc),
        )

    async def search(self, query: str, limit: int) -> list[User]:
        """Search users by username or display name, ranked like Postgres."""
        needle = query.strip().lower()
        if not needle:
            return []

        ranked = []
        for user in self.db.users.values():
            rank = _search_rank(user, needle)
            if rank is not None:
                ranked.append((rank, user.username, user))
        ranked.sort(key=lambda item: (item[0], item[1]))
        return [user for _, _, user in ranked[:limit]]

    def _update(self, user_id: UserId, **changes) -> None:
        user = self.db.users.get(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        self.db.users[user_id] = user.model_copy(update=changes)


def _search_rank(user: User, needle: str) -> int | None:
    username = user.username.lower()
    display_name = (user.display_name or "").lower()
    if username == needle:
        return 1
    if display_name == needle:
        return 2
    if username.startswith(needle):
        return 3
    if display_name.startswith(needle):
        return 4
    if needle in username or needle in display_name:
        return 5
    return None
