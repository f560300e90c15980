"""PostgreSQL implementation of User repository."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from skullking.domain.error import NotFoundError, ValidationError
from skullking.domain.model import User
from skullking.domain.repository import UserRepository
from skullking.domain.value import UserId, UserProfilePatch
from skullking.persistence.errors import translate_errors
from skullking.persistence.mappers import row_to_user, user_to_dict
from skullking.persistence.tables import users_table


class PostgresUserRepository(UserRepository):
    """PostgreSQL implementation of UserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session bound to the current transaction
        """
        self.session = session

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: User ID to look up

        Returns:
            User if found, None otherwise
        """
        stmt = select(users_table).where(users_table.c.id == user_id)
        with translate_errors("users.find_by_id"):
            result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by their email.

        Args:
            email: Email to search for

        Returns:
            User if found, None otherwise
        """
        stmt = select(users_table).where(users_table.c.email == email)
        with translate_errors("users.find_by_email"):
            result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_user(dict(row)) if row else None

    async def create(self, user: User) -> UserId:
        """Insert a new user.

        Args:
            user: User to insert

        Returns:
            ID of the inserted user
        """
        if not user.username.strip():
            raise ValidationError("Username must not be empty")

        stmt = (
            users_table.insert()
            .values(**user_to_dict(user))
            .returning(users_table.c.id)
        )
        with translate_errors(
            "users.create", username=user.username, email=user.email
        ):
            result = await self.session.execute(stmt)
            await self.session.flush()
        return UserId(result.scalar_one())

    async def update_last_login(self, user_id: UserId, at: datetime) -> None:
        """Set last_login_at for a user.

        Args:
            user_id: User that logged in
            at: Login timestamp
        """
        stmt = (
            users_table.update()
            .where(users_table.c.id == user_id)
            .values(last_login_at=at, updated_at=at)
        )
        with translate_errors("users.update_last_login"):
            result = await self.session.execute(stmt)
            await self.session.flush()
        if result.rowcount == 0:
            raise NotFoundError("User", str(user_id))

    async def update_profile(self, user_id: UserId, patch: UserProfilePatch) -> None:
        """Write the fields set on the patch.

        Args:
            user_id: User to update
            patch: Fields to change
        """
        values = patch.model_dump(exclude_none=True)
        if patch.stats_privacy is not None:
            values["stats_privacy"] = patch.stats_privacy.value
        values["updated_at"] = datetime.now(timezone.utc)

        stmt = users_table.update().where(users_table.c.id == user_id).values(**values)
        with translate_errors("users.update_profile"):
            result = await self.session.execute(stmt)
            await self.session.flush()
        if result.rowcount == 0:
            raise NotFoundError("User", str(user_id))

    async def update_theme(
        self, user_id: UserId, ui_theme: str, color_theme: str
    ) -> None:
        """Store theme preferences.

        Args:
            user_id: User to update
            ui_theme: UI theme name
            color_theme: Color scheme name
        """
        stmt = (
            users_table.update()
            .where(users_table.c.id == user_id)
            .values(
                ui_theme=ui_theme,
                color_theme=color_theme,
                updated_at=datetime.now(timezone.utc),
            )
        )
        with translate_errors("users.update_theme"):
            result = await self.session.execute(stmt)
            await self.session.flush()
        if result.rowcount == 0:
            raise NotFoundError("User", str(user_id))

    async def search(self, query: str, limit: int) -> list[User]:
        """Search users by username or display name.

        Args:
            query: Text to look for
            limit: Maximum number of users to return

        Returns:
            Matching users, best match first
        """
        needle = query.strip().lower()
        if not needle:
            return []

        pattern = _escape_like(needle)
        username = func.lower(users_table.c.username)
        display_name = func.lower(users_table.c.display_name)
        rank = case(
            (username == needle, 1),
            (display_name == needle, 2),
            (username.like(f"{pattern}%", escape="\\"), 3),
            (display_name.like(f"{pattern}%", escape="\\"), 4),
            else_=5,
        )

        stmt = (
            select(users_table)
            .where(
                or_(
                    username.like(f"%{pattern}%", escape="\\"),
                    display_name.like(f"%{pattern}%", escape="\\"),
                )
            )
            .order_by(rank, users_table.c.username)
            .limit(limit)
        )
        with translate_errors("users.search"):
            result = await self.session.execute(stmt)
        return [row_to_user(dict(row)) for row in result.mappings().all()]


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
