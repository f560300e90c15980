"""Per-browser session state.

Carries the authenticated identity, a pending linking intent and the OAuth
state nonce between requests. Unlike the entities, the session is mutable:
request handlers load it, change it, and write it back to the cookie.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Session(BaseModel):
    """Typed session state.

    The linking fields are stored as raw strings because they arrive from
    the client cookie; SessionService validates them before use.
    """

    model_config = ConfigDict(validate_assignment=True)

    user_id: Optional[str] = None
    user_name: Optional[str] = None
    linking_user_id: Optional[str] = None
    linking_provider: Optional[str] = None
    oauth_state: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        """Whether a user is logged in on this session."""
        return bool(self.user_id)
