"""Provider identity entity.

Binds one external (provider, provider_user_id) pair to exactly one user.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from skullking.domain.model.common import DomainModel
from skullking.domain.value import AuthProvider, ProviderIdentityId, UserId


class ProviderIdentity(DomainModel):
    """External authentication identity linked to a user account.

    The email, display name and avatar are a snapshot of what the provider
    reported on the most recent login and are refreshed on every login.
    """

    id: ProviderIdentityId
    user_id: UserId
    provider: AuthProvider
    provider_user_id: str
    provider_email: Optional[str] = None
    provider_display_name: Optional[str] = None
    provider_avatar_url: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
