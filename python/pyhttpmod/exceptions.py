"""Exception classes."""

from collections.abc import Mapping
from typing import Any


class PyHttpModError(Exception):
    """Base class for all pyhttpmod errors."""

    def __init__(self, message: str, details: Mapping[str, Any] | None = None) -> None:
        """Create the error with an optional mapping of structured details."""
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details) if details else {}


class InvalidArgumentError(PyHttpModError, ValueError):
    """An argument or an input value was rejected (bad cookie version, malformed header, bad URL...)."""


class MalformedEscapeSequenceError(InvalidArgumentError):
    """A percent escape sequence could not be decoded."""


class BodyDecodeError(PyHttpModError, ValueError):
    """Response body could not be decoded."""


class StatusError(PyHttpModError):
    """Response had an error status and the connection was configured to fail on it."""

    def __init__(self, message: str, status: int, details: Mapping[str, Any] | None = None) -> None:
        """Create the error for the given HTTP status."""
        super().__init__(message, details)
        self.status = status
