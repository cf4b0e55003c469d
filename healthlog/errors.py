"""
Error taxonomy for user-initiated actions.

Each error is terminal for the action that raised it: nothing is retried,
the user repeats the action instead.
"""


class HealthLogError(Exception):
    """Base class for all health log errors."""


class ValidationError(HealthLogError):
    """Form input is missing required vitals or holds unparsable values."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields: list[str] = fields or []


class FormatError(HealthLogError):
    """A serialized log payload could not be understood."""


class StorageUnavailable(HealthLogError):
    """The storage collaborator could not be read or written."""
