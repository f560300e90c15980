"""Domain model entities for Skull King."""

from skullking.domain.model.provider_identity import ProviderIdentity
from skullking.domain.model.session import Session
from skullking.domain.model.user import User

__all__ = [
    "User",
    "ProviderIdentity",
    "Session",
]
