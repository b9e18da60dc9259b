"""streamcopy - buffered stream copying with progress reporting."""

from importlib.metadata import distribution

from .core.errors import (
    ConfigError,
    CopyDestinationExistsError,
    CopyOperationStateError,
    CopySameFileError,
    InvalidCopyArgumentError,
    StreamCopyError,
)
from .core.file_operations import (
    CopyProgress,
    CopyResult,
    CopyState,
    StreamCopyOperation,
    StreamCopyService,
    create_copy_service,
)


__version__ = distribution(__package__ or "streamcopy").version

__all__ = [
    "ConfigError",
    "CopyDestinationExistsError",
    "CopyOperationStateError",
    "CopySameFileError",
    "CopyProgress",
    "CopyResult",
    "CopyState",
    "InvalidCopyArgumentError",
    "StreamCopyError",
    "StreamCopyOperation",
    "StreamCopyService",
    "__version__",
    "create_copy_service",
]
