"""Domain value objects for Skull King.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

from enum import Enum

from pydantic import field_validator

from skullking.domain.value.common import ValueObject
from skullking.domain.value.identifiers import UserId


class AuthProvider(str, Enum):
    """Supported authentication providers."""

    GOOGLE = "google"
    GITHUB = "github"


class StatsPrivacy(str, Enum):
    """Who may see a user's game statistics."""

    PRIVATE = "private"
    FRIENDS_ONLY = "friends_only"
    PUBLIC = "public"


class ExternalIdentity(ValueObject):
    """Identity asserted by an OAuth provider for one login attempt.

    Produced by an OAuth client after the code exchange. Never persisted
    as such; its fields feed the provider identity snapshot and, for new
    users, the initial profile.
    """

    provider: AuthProvider
    provider_user_id: str  # Permanent subject ID from the provider
    email: str | None = None
    display_name: str | None = None
    nickname: str | None = None  # Login/handle, preferred as username base
    avatar_url: str | None = None

    @field_validator("provider_user_id")
    @classmethod
    def validate_provider_user_id(cls, v: str) -> str:
        """Provider subject IDs must be non-empty."""
        if not v.strip():
            raise ValueError("Provider user ID must not be empty")
        return v

    @property
    def username_base(self) -> str:
        """Name used to derive a username for a new account."""
        return (self.nickname or "").strip() or (self.display_name or "").strip()


class LinkingIntent(ValueObject):
    """Pending request to attach a provider to an authenticated user."""

    user_id: UserId
    provider: AuthProvider


class UserProfilePatch(ValueObject):
    """Partial update of a user's profile.

    Only fields that are set are written. A blank display name is rejected.
    """

    display_name: str | None = None
    avatar_url: str | None = None
    stats_privacy: StatsPrivacy | None = None

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, v: str | None) -> str | None:
        """Trim the display name and reject whitespace-only values."""
        if v is None:
            return v
        trimmed = v.strip()
        if not trimmed:
            raise ValueError("Display name cannot be empty or only whitespace")
        return trimmed

    def is_empty(self) -> bool:
        """Whether the patch carries no changes."""
        return not self.model_dump(exclude_none=True)
