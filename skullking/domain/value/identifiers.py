"""Strongly typed identifiers for Skull King domain entities."""

from typing import NewType
from uuid import UUID

UserId = NewType("UserId", UUID)
ProviderIdentityId = NewType("ProviderIdentityId", UUID)
