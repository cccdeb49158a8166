"""
Exception hierarchy shared by the entity and repository layers.
"""


class RepokitError(Exception):
    """Base class for all errors raised by repokit."""


class InvalidInputError(RepokitError, ValueError):
    """Raised when caller-supplied data cannot be used as given."""


class RepositoryError(RepokitError, RuntimeError):
    """Raised when a persistence operation fails.

    Wraps the lower-level ORM exception (available as ``__cause__``).
    """


class UnsupportedOperationError(RepositoryError):
    """Raised when the backing model does not support the requested operation."""


class ConfigurationError(RepokitError):
    """Raised when an environment setting holds an unusable value."""


__all__ = [
    "RepokitError",
    "InvalidInputError",
    "RepositoryError",
    "UnsupportedOperationError",
    "ConfigurationError",
]
