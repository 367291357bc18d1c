"""
Error types raised by rotatail.

DiscoveryError and ReadError end the sequence that raised them.
WatchError is recoverable: tailing falls back to polling.
"""


class RotatailError(Exception):
    """Base class for all rotatail errors."""

    def __init__(self, message: str, path: str | None = None, cause: BaseException | None = None):
        super().__init__(message)
        self.path = path
        self.cause = cause


class DiscoveryError(RotatailError):
    """The directory holding the log files could not be listed."""


class ReadError(RotatailError):
    """A log file could not be read or decoded."""


class WatchError(RotatailError):
    """Native filesystem notification failed or is unavailable."""
