"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold business logic that spans entities, such as
    reconciling an external identity with local accounts.
    """

    pass
