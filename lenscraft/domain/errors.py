class DomainError(Exception):
    """Base class for business rule violations raised by the use cases."""


class ConflictError(DomainError):
    """Duplicate cart entry, duplicate purchase or reused transaction."""


class SeatsUnavailableError(ConflictError):
    pass


class InvalidTransitionError(DomainError):
    """Moderation status change not allowed from the current status."""


class NotFoundError(DomainError):
    pass


class PersistenceError(DomainError):
    """The underlying store rejected or failed an operation."""
