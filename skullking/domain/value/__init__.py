"""Domain value objects for Skull King."""

from skullking.domain.value.identifiers import ProviderIdentityId, UserId
from skullking.domain.value.types import (
    AuthProvider,
    ExternalIdentity,
    LinkingIntent,
    StatsPrivacy,
    UserProfilePatch,
)

__all__ = [
    # Identifiers
    "UserId",
    "ProviderIdentityId",
    # Types
    "AuthProvider",
    "StatsPrivacy",
    "ExternalIdentity",
    "LinkingIntent",
    "UserProfilePatch",
]
