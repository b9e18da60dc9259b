"""Exception hierarchy for streamcopy.

Stream read/write failures are not part of this hierarchy: they propagate
from the underlying stream unchanged.
"""


class StreamCopyError(Exception):
    """Base exception for all streamcopy errors."""


class InvalidCopyArgumentError(StreamCopyError, ValueError):
    """Raised when a copy operation is constructed with invalid arguments."""


class CopyOperationStateError(StreamCopyError):
    """Raised when an operation is executed outside the not-started state."""


class CopyDestinationExistsError(StreamCopyError, FileExistsError):
    """Raised when a file copy would overwrite an existing destination."""


class ConfigError(StreamCopyError):
    """Raised when configuration cannot be loaded or validated."""


class CopySameFileError(StreamCopyError):
    """Raised when the source and destination of a file copy are the same file."""
