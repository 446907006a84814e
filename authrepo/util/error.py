"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """Configuration error.

    Raised when the repository cannot start, e.g. its collections are
    missing and automatic creation is disabled.
    """

    pass
