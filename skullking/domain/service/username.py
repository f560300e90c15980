"""Username derivation for new accounts.

Candidates are sanitized but not checked for uniqueness; the unique
constraint on users.username is authoritative and callers retry with a
fresh candidate on collision.
"""

import re
from uuid import uuid4

MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 30

_SEPARATORS = re.compile(r"[ .\-]")
_DISALLOWED = re.compile(r"[^a-z0-9_]+")
_UNDERSCORE_RUNS = re.compile(r"_+")


def _random_hex(length: int) -> str:
    return uuid4().hex[:length]


def sanitize_username(raw: str) -> str:
    """Normalize a string into a valid username.

    Lower-cases, maps spaces, dots and hyphens to underscores, drops all
    other characters outside [a-z0-9_], collapses underscore runs and
    trims underscores at both ends. Results longer than 30 characters are
    truncated; results shorter than 3 are replaced by a random
    ``user_<8 hex>`` name.

    Args:
        raw: Arbitrary input, e.g. a provider nickname

    Returns:
        Sanitized username
    """
    name = _SEPARATORS.sub("_", raw.lower())
    name = _DISALLOWED.sub("", name)
    name = name.strip("_")
    name = _UNDERSCORE_RUNS.sub("_", name)

    if len(name) > MAX_USERNAME_LENGTH:
        name = name[:MAX_USERNAME_LENGTH].strip("_")

    if len(name) < MIN_USERNAME_LENGTH:
        return f"user_{_random_hex(8)}"

    return name


def generate_username_candidate(base_name: str | None, email: str | None) -> str:
    """Derive a username candidate for a new user.

    Uses the base name, or the local part of the email when the base name
    is blank. Generic or very short results get a random suffix.

    Args:
        base_name: Preferred name (provider nickname, else display name)
        email: Provider email, if any

    Returns:
        Sanitized candidate, not guaranteed to be unique
    """
    candidate = (base_name or "").strip()
    if not candidate and email and email.strip():
        candidate = email.strip().split("@", 1)[0]

    if not candidate.strip():
        return sanitize_username(f"user_{_random_hex(8)}")

    sanitized = sanitize_username(candidate)
    if sanitized == "user" or len(sanitized) < 4:
        return sanitize_username(f"{sanitized}_{_random_hex(4)}")

    return sanitized


def with_random_suffix(username: str) -> str:
    """Append ``_<4 hex>`` to a username, keeping it within the length limit.

    Used when a previous candidate collided with an existing username.
    """
    head = username[: MAX_USERNAME_LENGTH - 5]
    return sanitize_username(f"{head}_{_random_hex(4)}")
