"""Mappers for converting between database rows and domain models.

Domain models are immutable Pydantic models, so rows are mapped by hand
instead of through SQLAlchemy's ORM mapping.
"""

from typing import Any, Dict
from uuid import UUID

from skullking.domain.model import ProviderIdentity, User
from skullking.domain.value import (
    AuthProvider,
    ProviderIdentityId,
    StatsPrivacy,
    UserId,
)


def _as_uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_user(row: Dict[str, Any]) -> User:
    """Convert database row to User domain model.

    Args:
        row: Database row as dict

    Returns:
        User domain model
    """
    return User(
        id=UserId(_as_uuid(row["id"])),
        username=row["username"],
        email=row.get("email"),
        display_name=row.get("display_name"),
        avatar_url=row.get("avatar_url"),
        stats_privacy=StatsPrivacy(row["stats_privacy"]),
        ui_theme=row.get("ui_theme"),
        color_theme=row.get("color_theme"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        last_login_at=row.get("last_login_at"),
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User domain model to database dict.

    Args:
        user: User domain model

    Returns:
        Dict suitable for database insertion
    """
    data = user.model_dump()
    data["stats_privacy"] = user.stats_privacy.value
    return data


def row_to_provider_identity(row: Dict[str, Any]) -> ProviderIdentity:
    """Convert database row to ProviderIdentity domain model.

    Args:
        row: Database row as dict

    Returns:
        ProviderIdentity domain model
    """
    return ProviderIdentity(
        id=ProviderIdentityId(_as_uuid(row["id"])),
        user_id=UserId(_as_uuid(row["user_id"])),
        provider=AuthProvider(row["provider"]),
        provider_user_id=row["provider_user_id"],
        provider_email=row.get("provider_email"),
        provider_display_name=row.get("provider_display_name"),
        provider_avatar_url=row.get("provider_avatar_url"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def provider_identity_to_dict(identity: ProviderIdentity) -> Dict[str, Any]:
    """Convert ProviderIdentity domain model to database dict.

    Args:
        identity: ProviderIdentity domain model

    Returns:
        Dict suitable for database insertion
    """
    data = identity.model_dump()
    data["provider"] = identity.provider.value
    return data
