"""In-memory repository implementations for testing."""

from .database import InMemoryDatabase
from .provider_identity import InMemoryProviderIdentityRepository
from .unit_of_work import InMemoryUnitOfWork
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryDatabase",
    "InMemoryProviderIdentityRepository",
    "InMemoryUnitOfWork",
    "InMemoryUserRepository",
]
