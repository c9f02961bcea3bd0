"""Scheduling errors.

Conflicts are not errors: the availability check reports them as values.
"""


class SchedulingError(Exception):
    """Base class for scheduling core errors."""

    pass


class NotFound(SchedulingError):
    """Raised when a referenced client or session does not exist."""

    def __init__(self, kind: str, id: str):
        super().__init__(f"{kind} not found: {id}")
        self.kind = kind
        self.id = id


class InvalidInput(SchedulingError):
    """Raised when a request is rejected before any mutation."""

    pass


class DeliveryError(SchedulingError):
    """Raised by notifiers when a reminder could not be delivered."""

    pass
