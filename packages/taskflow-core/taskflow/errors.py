"""
Exceptions raised by Taskflow.

Missing tasks and no-op timer transitions are reported through return
values; only the conditions below are raised.
"""


class TaskflowError(Exception):
    """Base class for Taskflow errors."""


class PersistenceError(TaskflowError, RuntimeError):
    """A storage backend could not read or write a collection."""


class DuplicateUserError(TaskflowError, ValueError):
    """A user with the same email is already on the roster."""


class PermissionDeniedError(TaskflowError, PermissionError):
    """The acting user lacks the role required for the operation."""
