"""Translation of database errors into domain errors."""

from collections.abc import Iterator
from contextlib import contextmanager

import logfire
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from skullking.domain.error import (
    DomainError,
    EmailTakenError,
    NotFoundError,
    ProviderIdentityConflictError,
    RepositoryError,
    UsernameTakenError,
)

USERNAME_CONSTRAINT = "uq_users_username"
EMAIL_CONSTRAINT = "uq_users_email"
PROVIDER_IDENTITY_CONSTRAINT = "uq_user_provider_identities_provider"
USER_PROVIDER_CONSTRAINT = "uq_user_provider_identities_user_provider"
IDENTITY_USER_FK = "user_provider_identities_user_id_fkey"

KNOWN_CONSTRAINTS = (
    USERNAME_CONSTRAINT,
    EMAIL_CONSTRAINT,
    # Longer name first so substring matching picks the right one
    USER_PROVIDER_CONSTRAINT,
    PROVIDER_IDENTITY_CONSTRAINT,
    IDENTITY_USER_FK,
)


def violated_constraint(error: IntegrityError) -> str | None:
    """Name of the constraint behind an integrity error, if it can be found.

    asyncpg exposes ``constraint_name`` on the driver exception, which the
    SQLAlchemy adapter keeps as the cause of ``error.orig``.
    """
    orig = error.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return name

    message = str(orig)
    for name in KNOWN_CONSTRAINTS:
        if name in message:
            return name
    return None


def integrity_error_to_domain(
    error: IntegrityError,
    operation: str,
    username: str | None = None,
    email: str | None = None,
    provider: str | None = None,
    provider_user_id: str | None = None,
    user_id: str | None = None,
) -> DomainError:
    """Map an integrity error to the matching domain error.

    Args:
        error: Error raised by the driver
        operation: Repository operation, for logging
        username: Username being written, if any
        email: Email being written, if any
        provider: Provider being written, if any
        provider_user_id: Provider user ID being written, if any
        user_id: Owning user ID being written, if any

    Returns:
        Domain error to raise
    """
    constraint = violated_constraint(error)
    logfire.info(
        "Integrity violation", operation=operation, constraint=constraint
    )

    if constraint == USERNAME_CONSTRAINT:
        return UsernameTakenError(username or "")
    if constraint == EMAIL_CONSTRAINT:
        return EmailTakenError(email)
    if constraint in (PROVIDER_IDENTITY_CONSTRAINT, USER_PROVIDER_CONSTRAINT):
        return ProviderIdentityConflictError(provider or "", provider_user_id or "")
    if constraint == IDENTITY_USER_FK:
        return NotFoundError("User", user_id or "")
    return RepositoryError(operation, error)


@contextmanager
def translate_errors(operation: str, **context: str | None) -> Iterator[None]:
    """Re-raise database errors from the block as domain errors.

    Usage:
        with translate_errors("users.create", username=user.username):
            await session.execute(stmt)
            await session.flush()
    """
    try:
        yield
    except IntegrityError as e:
        raise integrity_error_to_domain(e, operation, **context) from e
    except SQLAlchemyError as e:
        logfire.error("Database error", operation=operation, error=str(e))
        raise RepositoryError(operation, e) from e
