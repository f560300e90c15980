"""Account settings use cases."""

from .get_linked_accounts import GetLinkedAccountsUseCase
from .unlink_account import UnlinkAccountUseCase
from .update_user_profile import UpdateUserProfileUseCase
from .update_user_theme import UpdateUserThemeUseCase

__all__ = [
    "GetLinkedAccountsUseCase",
    "UnlinkAccountUseCase",
    "UpdateUserProfileUseCase",
    "UpdateUserThemeUseCase",
]
