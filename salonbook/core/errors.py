class StoreUnavailableError(Exception):
    """The backing store could not be read or written.

    Callers should treat this as retryable. It is never converted into an
    empty result.
    """

    def __init__(self, operation: str, cause: Exception = None):
        self.operation = operation
        self.cause = cause
        message = f"Store unavailable during {operation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class SlotConflictError(Exception):
    """A booking cannot be placed in the requested time span."""


class InvalidTransitionError(Exception):
    """An appointment status change that is not allowed from its current status."""
