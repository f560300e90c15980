"""PostgreSQL repository implementations."""

from skullking.persistence.repository.provider_identity import (
    PostgresProviderIdentityRepository,
)
from skullking.persistence.repository.user import PostgresUserRepository

__all__ = [
    "PostgresUserRepository",
    "PostgresProviderIdentityRepository",
]
