"""Domain services."""

from .auth_service import AuthService, OAuthClient
from .base import Service
from .provider_identity_service import ProviderIdentityService
from .reconciliation_service import ReconciliationResult, ReconciliationService
from .session_service import SessionService
from .user_service import UserService
from .username import (
    generate_username_candidate,
    sanitize_username,
    with_random_suffix,
)

__all__ = [
    "AuthService",
    "OAuthClient",
    "ProviderIdentityService",
    "ReconciliationResult",
    "ReconciliationService",
    "Service",
    "SessionService",
    "UserService",
    "generate_username_candidate",
    "sanitize_username",
    "with_random_suffix",
]
