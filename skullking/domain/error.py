"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class ConflictError(DomainError):
    """Base class for uniqueness and ownership conflicts.

    Conflicts are expected outcomes of concurrent or duplicate requests and
    are reported to the client as 4xx responses.
    """

    pass


class ProviderIdentityConflictError(ConflictError):
    """Raised when a provider identity cannot be bound to a user.

    ``owned_by_other`` is set when the provider account is known to belong
    to a different user. It is False for constraint violations on insert,
    which also cover a user that already has an account with the provider.
    """

    def __init__(
        self, provider: str, provider_user_id: str, owned_by_other: bool = False
    ):
        self.provider = provider
        self.provider_user_id = provider_user_id
        self.owned_by_other = owned_by_other
        super().__init__(
            f"Provider identity {provider}:{provider_user_id} is already linked"
        )


class UsernameTakenError(ConflictError):
    """Raised when a username is already in use."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username already taken: {username}")


class EmailTakenError(ConflictError):
    """Raised when an email address is already in use."""

    def __init__(self, email: str | None):
        self.email = email
        super().__init__(f"Email already in use: {email}")


class DeleteLastProviderIdentityError(ConflictError):
    """Raised when unlinking would leave a user with no way to log in."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Cannot delete the last provider identity of user {user_id}")


class TransactionError(DomainError):
    """Raised when a transaction cannot be started, committed or rolled back."""

    pass


class InvariantViolationError(DomainError):
    """Raised when a flow reaches a state that its own logic rules out."""

    pass


class RepositoryError(DomainError):
    """Wraps an unexpected storage failure with operation context."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")
