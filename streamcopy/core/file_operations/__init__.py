"""File operations module with buffered stream copying and progress reporting."""

from .enums import CopyState
from .models import CopyProgress, CopyResult, ProgressCallback
from .protocols import ReadableStream, WritableStream
from .service import StreamCopyService, create_copy_service
from .stream_copy import (
    DEFAULT_UPDATE_INTERVAL,
    StreamCopyOperation,
    compute_dynamic_update_interval,
    measure_stream_length,
    validate_copy_parameters,
)


__all__ = [
    "DEFAULT_UPDATE_INTERVAL",
    "CopyProgress",
    "CopyResult",
    "CopyState",
    "ProgressCallback",
    "ReadableStream",
    "StreamCopyOperation",
    "StreamCopyService",
    "WritableStream",
    "compute_dynamic_update_interval",
    "create_copy_service",
    "measure_stream_length",
    "validate_copy_parameters",
]
