class DomainError(Exception):
    """Base class for booking domain failures."""


class NotFoundError(DomainError):
    pass


class ValidationError(DomainError):
    """Business rule violation; ``reason`` is safe to show to the caller."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidTransitionError(ValidationError):
    pass


class ConflictError(DomainError):
    """A concurrent booking took the table between check and write."""
