"""Shared in-memory store for testing."""

from dataclasses import dataclass, field

from skullking.domain.model import ProviderIdentity, User
from skullking.domain.value import ProviderIdentityId, UserId


@dataclass
class InMemorySnapshot:
    """Copy of the store contents, used for rollback."""

    users: dict[UserId, User]
    identities: dict[ProviderIdentityId, ProviderIdentity]


@dataclass
class InMemoryDatabase:
    """Tables of the in-memory store.

    Entities are immutable, so copying the dicts is enough to snapshot.
    """

    users: dict[UserId, User] = field(default_factory=dict)
    identities: dict[ProviderIdentityId, ProviderIdentity] = field(
        default_factory=dict
    )

    def snapshot(self) -> InMemorySnapshot:
        """Capture the current contents."""
        return InMemorySnapshot(users=dict(self.users), identities=dict(self.identities))

    def restore(self, snapshot: InMemorySnapshot) -> None:
        """Replace the contents with a snapshot."""
        self.users = dict(snapshot.users)
        self.identities = dict(snapshot.identities)
