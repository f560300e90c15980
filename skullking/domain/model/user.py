"""User aggregate root.

Users sign in through one or more OAuth providers; the provider bindings
live in ProviderIdentity.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from skullking.domain.model.common import DomainModel
from skullking.domain.value import StatsPrivacy, UserId


class User(DomainModel):
    """User aggregate root - provider-agnostic."""

    id: UserId
    username: str  # Unique, generated at registration
    email: Optional[str] = None  # Unique when present
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    stats_privacy: StatsPrivacy = StatsPrivacy.PUBLIC
    ui_theme: Optional[str] = None
    color_theme: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    last_login_at: Optional[datetime] = None

    @property
    def session_label(self) -> str:
        """Name shown for the authenticated session."""
        if self.display_name and self.display_name.strip():
            return self.display_name
        return self.username

    def stats_visible_to(self, viewer_id: Optional[UserId]) -> bool:
        """Whether a viewer may see this user's statistics.

        Friendships are not tracked here, so ``friends_only`` stats are
        visible to the owner alone, like ``private`` ones.
        """
        if self.stats_privacy == StatsPrivacy.PUBLIC:
            return True
        return viewer_id is not None and viewer_id == self.id
