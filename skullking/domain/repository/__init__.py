"""Repository interfaces for the Skull King domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from skullking.domain.repository.provider_identity import ProviderIdentityRepository
from skullking.domain.repository.unit_of_work import UnitOfWork
from skullking.domain.repository.user import UserRepository

__all__ = [
    "UserRepository",
    "ProviderIdentityRepository",
    "UnitOfWork",
]
