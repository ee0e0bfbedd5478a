"""Exception types raised by the work tracker core."""

from __future__ import annotations


class WorkTrackerError(Exception):
    """Base class for all work tracker errors."""


class ValidationError(WorkTrackerError):
    """Raised when user input is rejected at the entity store boundary."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Invalid {field}: {message}")


class NotFoundError(WorkTrackerError):
    """Raised when a mutation references an id that does not exist."""

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id!r} not found")


class RemoteUnavailableError(WorkTrackerError):
    """Raised when the identity or document-store collaborator fails."""

    def __init__(self, operation: str, reason: str | None = None):
        self.operation = operation
        self.reason = reason
        msg = f"Remote call '{operation}' failed"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class StoreLockedError(WorkTrackerError):
    """Raised when a mutation is attempted while no session is authenticated."""

    def __init__(self) -> None:
        super().__init__("Entity store is locked until a session is authenticated")
