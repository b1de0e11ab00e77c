"""Custom exceptions for the PlanHaus application."""


class PlanHausError(Exception):
    """Base class for domain errors raised by the core services."""
    pass


class NotFoundError(PlanHausError):
    """Raised when a project, table, guest or intake record does not exist."""

    def __init__(self, entity: str, entity_id=None):
        self.entity = entity
        self.entity_id = entity_id
        message = f"{entity} not found" if entity_id is None else f"{entity} {entity_id} not found"
        super().__init__(message)


class StorageError(PlanHausError):
    """Raised when a storage call returns an error envelope."""
    pass


class AccessDeniedError(PlanHausError):
    """Raised when a user is not a member of the project they are touching."""
    pass


class ConflictError(PlanHausError):
    """Raised when a write collides with a uniqueness constraint."""
    pass


class SeatingCapacityError(ConflictError):
    """Raised when an assignment would overfill a table or reuse a taken seat."""
    pass


class AIServiceUnavailableError(PlanHausError):
    """Raised when no text-generation backend is configured."""
    pass


class RateLimitExceededError(PlanHausError):
    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(f"Rate limit exceeded, retry after {retry_after}s")


class AIServiceError(PlanHausError):
    """Raised when the text-generation backend fails to answer."""
    pass
