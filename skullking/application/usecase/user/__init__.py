"""Public user use cases."""

from .get_user_profile import GetUserProfileUseCase
from .search_users import SearchUsersUseCase

__all__ = ["GetUserProfileUseCase", "SearchUsersUseCase"]
