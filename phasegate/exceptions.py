"""
Custom exceptions for the Phasegate CLI application.
"""


class PhasegateError(Exception):
    """Base exception for all Phasegate-related errors."""
    pass


class ValidationError(PhasegateError):
    """Raised when a precondition for an operation is not met.

    Always recoverable: the project state is left untouched.
    """
    pass


class NotFoundError(PhasegateError):
    """Raised when a requested item is not found."""
    pass


class InvalidOperationError(PhasegateError):
    """Raised when an operation is not allowed in the current state."""
    pass


class TransitionError(InvalidOperationError):
    """Raised when no transition exists for the current state and event."""

    def __init__(self, state: str, event: str) -> None:
        self.state = state
        self.event = event
        super().__init__(
            f"Invalid transition: event '{event}' is not permitted in state '{state}'."
        )


class DuplicateError(PhasegateError):
    """Raised when attempting to create a duplicate item."""
    pass


class ConfigurationError(PhasegateError):
    """Raised when there's a configuration or setup issue."""
    pass


class StorageError(PhasegateError):
    """Raised when reading or writing the state file fails."""
    pass


class NoProjectError(StorageError):
    """Raised when no state file exists for the working tree."""

    def __init__(self, path=None) -> None:
        self.path = path
        message = "No active project found."
        if path is not None:
            message = f"No active project found (missing {path})."
        super().__init__(message)


class CorruptStateError(StorageError):
    """Raised when the state file exists but cannot be parsed.

    The file is never repaired automatically; an operator has to fix it.
    """
    pass


class ProjectExistsError(StorageError):
    """Raised when creating a project where one already exists."""
    pass
