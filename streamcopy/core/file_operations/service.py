"""Stream and file copy service built on StreamCopyOperation."""

import contextlib
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from streamcopy.core.errors import CopyDestinationExistsError, CopySameFileError
from streamcopy.core.structlog_logger import get_struct_logger

from .models import CopyResult, ProgressCallback
from .protocols import ReadableStream, WritableStream
from .stream_copy import StreamCopyOperation, validate_copy_parameters


if TYPE_CHECKING:
    from streamcopy.config.settings import CopySettings


DEFAULT_BUFFER_SIZE = 64 * 1024


class StreamCopyService:
    """Service for copying streams and files with progress reporting."""

    def __init__(
        self,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        update_interval: int | None = None,
        dynamic_update_interval: bool = False,
    ):
        """Initialize the copy service.

        Args:
            buffer_size: Chunk size in bytes for each read/write cycle
            update_interval: Copied bytes between progress notifications
            dynamic_update_interval: Derive the interval from each source's length

        Raises:
            InvalidCopyArgumentError: If any parameter is invalid
        """
        validate_copy_parameters(buffer_size, update_interval, dynamic_update_interval)

        self.buffer_size = buffer_size
        self.update_interval = update_interval
        self.dynamic_update_interval = dynamic_update_interval
        self.logger = get_struct_logger(__name__)

    def create_operation(
        self,
        source: ReadableStream,
        target: WritableStream,
        progress_callback: ProgressCallback | None = None,
        source_length: int | None = None,
    ) -> StreamCopyOperation:
        """Create a copy operation configured with this service's settings."""
        return StreamCopyOperation(
            source,
            target,
            self.buffer_size,
            self.update_interval,
            dynamic_update_interval=self.dynamic_update_interval,
            progress_callback=progress_callback,
            source_length=source_length,
        )

    def copy_stream(
        self,
        source: ReadableStream,
        target: WritableStream,
        progress_callback: ProgressCallback | None = None,
        source_length: int | None = None,
    ) -> CopyResult:
        """Copy one stream to another.

        Stream errors propagate to the caller unchanged.

        Args:
            source: Readable binary stream
            target: Writable binary stream
            progress_callback: Optional progress callback
            source_length: Bytes to expect when the source cannot seek

        Returns:
            CopyResult describing the finished or cancelled copy
        """
        operation = self.create_operation(
            source, target, progress_callback, source_length
        )
        final_progress = operation.execute()
        return CopyResult.from_progress(final_progress, operation.cancelled)

    def copy_file(
        self,
        src: Path,
        dst: Path,
        progress_callback: ProgressCallback | None = None,
        preserve_metadata: bool = True,
        overwrite: bool = False,
    ) -> CopyResult:
        """Copy a single file with buffered I/O.

        A cancelled copy removes the partially written destination.

        Args:
            src: Source file path
            dst: Destination file path
            progress_callback: Optional progress callback
            preserve_metadata: Copy timestamps and permission bits on success
            overwrite: Replace an existing destination

        Returns:
            CopyResult describing the finished or cancelled copy

        Raises:
            CopySameFileError: If src and dst refer to the same file
            CopyDestinationExistsError: If dst exists and overwrite is False
        """
        src = Path(src)
        dst = Path(dst)

        # Opening dst for writing would truncate src before the first read
        if dst.exists() and os.path.samefile(src, dst):
            raise CopySameFileError(f"{src} and {dst} are the same file")

        dst.parent.mkdir(parents=True, exist_ok=True)

        with src.open("rb") as fsrc:
            try:
                fdst = dst.open("wb" if overwrite else "xb")
            except FileExistsError as e:
                raise CopyDestinationExistsError(
                    f"Destination already exists: {dst}"
                ) from e
            with fdst:
                result = self.copy_stream(fsrc, fdst, progress_callback)

        if result.cancelled:
            with contextlib.suppress(FileNotFoundError):
                dst.unlink()
            self.logger.info(
                "file_copy_cancelled",
                src=str(src),
                dst=str(dst),
                bytes_copied=result.bytes_copied,
            )
            return result

        if preserve_metadata:
            shutil.copystat(src, dst)

        self.logger.debug(
            "file_copy_completed",
            src=str(src),
            dst=str(dst),
            bytes_copied=result.bytes_copied,
            elapsed_time=result.elapsed_time,
            speed=result.speed_summary,
        )
        return result


def create_copy_service(settings: "CopySettings | None" = None) -> StreamCopyService:
    """Factory function to create a copy service from settings.

    Args:
        settings: Copy settings; defaults are used when omitted

    Returns:
        Configured StreamCopyService instance
    """
    if settings is None:
        return StreamCopyService()

    return StreamCopyService(
        buffer_size=settings.buffer_size,
        update_interval=settings.update_interval,
        dynamic_update_interval=settings.dynamic_update_interval,
    )
