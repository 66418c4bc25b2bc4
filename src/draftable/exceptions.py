"""Custom exceptions for the draftable package."""


class DraftableError(Exception):
    """Base exception for all draftable errors."""

    pass


class TimestampParseError(DraftableError, ValueError):
    """Exception raised when a publish timestamp cannot be parsed."""

    def __init__(self, message: str, value=None):
        """
        Initialize timestamp parse error.

        Args:
            message: Error message
            value: The rejected input
        """
        super().__init__(message)
        self.value = value


class UnboundRecordError(DraftableError):
    """Exception raised when a record is saved without a session to save it in."""

    pass


class ConfigurationError(DraftableError):
    """Exception raised when a record type's publication settings are invalid."""

    pass
