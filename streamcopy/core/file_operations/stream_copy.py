"""Buffered stream-to-stream copy with progress reporting and cancellation."""

import io
import os
import time
from collections.abc import Callable
from datetime import datetime, timedelta

from streamcopy.core.errors import CopyOperationStateError, InvalidCopyArgumentError
from streamcopy.core.structlog_logger import get_struct_logger

from .enums import CopyState
from .models import CopyProgress, ProgressCallback, compute_average_speed
from .protocols import ReadableStream, WritableStream


logger = get_struct_logger(__name__)

DEFAULT_UPDATE_INTERVAL = 256 * 1024
DYNAMIC_INTERVAL_EXPONENT = 1.0 / 1.5


def compute_dynamic_update_interval(source_length: int) -> int:
    """Derive an update interval from the total source length.

    Larger sources get proportionally fewer notifications. The result is at
    least 1 so that empty sources still produce a valid interval.
    """
    return max(1, round(source_length**DYNAMIC_INTERVAL_EXPONENT))


def validate_copy_parameters(
    buffer_size: int,
    update_interval: int | None = None,
    dynamic_update_interval: bool = False,
) -> None:
    """Check chunking and notification parameters before any I/O happens.

    Raises:
        InvalidCopyArgumentError: If any parameter is invalid
    """
    if buffer_size < 1:
        raise InvalidCopyArgumentError(
            f"buffer_size must be at least 1, got {buffer_size}"
        )
    if isinstance(update_interval, bool):
        raise InvalidCopyArgumentError(
            "update_interval must be an integer; "
            "use dynamic_update_interval to select the dynamic interval"
        )
    if update_interval is not None and dynamic_update_interval:
        raise InvalidCopyArgumentError(
            "update_interval and dynamic_update_interval are mutually exclusive"
        )
    if update_interval is not None and update_interval < 1:
        raise InvalidCopyArgumentError(
            f"update_interval must be at least 1, got {update_interval}"
        )


def measure_stream_length(stream: ReadableStream) -> int:
    """Return the number of bytes between the current position and the end.

    The stream position is restored before returning.

    Raises:
        InvalidCopyArgumentError: If the stream cannot seek
    """
    seekable = getattr(stream, "seekable", None)
    if seekable is not None and not seekable():
        raise InvalidCopyArgumentError(
            "source stream is not seekable; pass source_length explicitly"
        )

    try:
        position = stream.tell()  # type: ignore[attr-defined]
        stream.seek(0, os.SEEK_END)  # type: ignore[attr-defined]
        end = stream.tell()  # type: ignore[attr-defined]
        stream.seek(position, os.SEEK_SET)  # type: ignore[attr-defined]
    except (AttributeError, OSError) as e:
        raise InvalidCopyArgumentError(
            f"cannot determine source stream length: {e}"
        ) from e

    return max(0, end - position)


class StreamCopyOperation:
    """Copies one stream to another in fixed-size chunks.

    Progress callbacks are invoked every ``update_interval`` copied bytes and
    once more, unconditionally, after the copy ends. A callback returning
    ``False`` requests cancellation; the copy then stops after the chunk that
    triggered the notification has been fully written.

    An instance performs exactly one copy.

    Example:
        with open("a.bin", "rb") as src, open("b.bin", "wb") as dst:
            operation = StreamCopyOperation(src, dst, buffer_size=64 * 1024)
            operation.add_progress_callback(lambda p: print(p.progress_percent))
            operation.execute()
    """

    def __init__(
        self,
        source_stream: ReadableStream,
        target_stream: WritableStream,
        buffer_size: int,
        update_interval: int | None = None,
        *,
        dynamic_update_interval: bool = False,
        progress_callback: ProgressCallback | None = None,
        source_length: int | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        """Initialize the copy operation.

        Args:
            source_stream: Readable binary stream to copy from
            target_stream: Writable binary stream to copy to
            buffer_size: Chunk size in bytes for each read/write cycle
            update_interval: Copied bytes between progress notifications
            dynamic_update_interval: Derive the interval from the source length
            progress_callback: First progress callback to register
            source_length: Bytes to expect; measured from the stream if omitted
            clock: Monotonic clock in seconds used for elapsed time

        Raises:
            InvalidCopyArgumentError: If any argument is invalid
        """
        if source_stream is None:
            raise InvalidCopyArgumentError("source_stream must not be None")
        if target_stream is None:
            raise InvalidCopyArgumentError("target_stream must not be None")
        validate_copy_parameters(buffer_size, update_interval, dynamic_update_interval)
        if source_length is not None and source_length < 0:
            raise InvalidCopyArgumentError(
                f"source_length must not be negative, got {source_length}"
            )

        self.source_stream = source_stream
        self.target_stream = target_stream
        self.buffer_size = buffer_size
        self.source_length = (
            source_length
            if source_length is not None
            else measure_stream_length(source_stream)
        )

        if update_interval is not None:
            self.update_interval = update_interval
        elif dynamic_update_interval:
            self.update_interval = compute_dynamic_update_interval(
                self.source_length
            )
        else:
            self.update_interval = DEFAULT_UPDATE_INTERVAL

        self.copied_bytes = 0
        self.start_time: datetime | None = None
        self.end_time: datetime | None = None
        self.elapsed_time = timedelta(0)
        self.state = CopyState.NOT_STARTED
        self.cancelled = False

        self._clock = clock
        self._clock_start = 0.0
        self._callbacks: list[ProgressCallback] = []
        if progress_callback is not None:
            self._callbacks.append(progress_callback)

    @property
    def average_speed(self) -> float:
        """Lifetime average speed in bytes per second, 0.0 before any time elapsed."""
        return compute_average_speed(self.copied_bytes, self.elapsed_time)

    def add_progress_callback(self, callback: ProgressCallback) -> None:
        """Register a callback; callbacks run in registration order."""
        self._callbacks.append(callback)

    def remove_progress_callback(self, callback: ProgressCallback) -> None:
        """Unregister a previously registered callback.

        Raises:
            ValueError: If the callback is not registered
        """
        self._callbacks.remove(callback)

    def execute(self) -> CopyProgress:
        """Run the copy until the source is exhausted or a callback cancels it.

        Returns:
            The final progress snapshot

        Raises:
            CopyOperationStateError: If the operation was already executed
        """
        if self.state is not CopyState.NOT_STARTED:
            raise CopyOperationStateError(
                f"copy operation cannot be executed in state '{self.state.value}'"
            )

        self.state = CopyState.COPYING
        self._clock_start = self._clock()
        self.start_time = datetime.now()

        logger.debug(
            "stream_copy_started",
            total_bytes=self.source_length,
            buffer_size=self.buffer_size,
            update_interval=self.update_interval,
        )

        try:
            self._copy_loop()
        except Exception as e:
            logger.error(
                "stream_copy_failed",
                error=str(e),
                error_type=e.__class__.__name__,
                bytes_copied=self.copied_bytes,
                total_bytes=self.source_length,
            )
            raise

        self.end_time = datetime.now()
        self._refresh_elapsed_time()
        self.state = CopyState.FINISHED

        final_progress = self._create_progress(is_final=True)
        if self.cancelled:
            logger.info(
                "stream_copy_cancelled",
                bytes_copied=self.copied_bytes,
                total_bytes=self.source_length,
            )
        else:
            logger.debug(
                "stream_copy_completed",
                bytes_copied=self.copied_bytes,
                elapsed_seconds=self.elapsed_time.total_seconds(),
                speed=final_progress.speed_summary,
            )

        self._notify(final_progress)
        return final_progress

    def _copy_loop(self) -> None:
        update_counter = 0
        read_chunk = self._chunk_reader()

        while True:
            # source_length caps the copy so copied_bytes never exceeds it
            remaining = self.source_length - self.copied_bytes
            if remaining <= 0:
                break
            chunk = read_chunk(min(self.buffer_size, remaining))
            if not chunk:
                break

            self._write_all(chunk)

            chunk_length = len(chunk)
            self.copied_bytes += chunk_length
            update_counter += chunk_length

            if update_counter >= self.update_interval:
                update_counter = 0
                self._refresh_elapsed_time()
                progress = self._create_progress()
                logger.debug(
                    "stream_copy_progress",
                    bytes_copied=progress.bytes_copied,
                    total_bytes=progress.total_bytes,
                )
                if not self._notify(progress):
                    self.cancelled = True
                    break

    def _chunk_reader(self) -> Callable[[int], bytes | memoryview]:
        """Return a reader for the next chunk, reusing one buffer where possible.

        Views of the shared buffer are only handed to io targets, which copy
        the data before write() returns. Other writers get their own bytes.
        """
        source = self.source_stream
        if not isinstance(source, io.BufferedIOBase | io.RawIOBase):
            return lambda size: source.read(size)

        buffer = bytearray(self.buffer_size)
        view = memoryview(buffer)
        target_copies = isinstance(
            self.target_stream, io.BufferedIOBase | io.RawIOBase
        )

        def read_into(size: int) -> bytes | memoryview:
            count = source.readinto(view[:size]) or 0
            return view[:count] if target_copies else bytes(view[:count])

        return read_into

    def _write_all(self, chunk: bytes | memoryview) -> None:
        """Write a chunk in full, continuing after short writes."""
        while chunk:
            written = self.target_stream.write(chunk)
            if not isinstance(written, int) or written >= len(chunk):
                return
            if written == 0:
                raise OSError("target stream accepted no bytes")
            chunk = chunk[written:]

    def _notify(self, progress: CopyProgress) -> bool:
        """Invoke every callback; return False if any of them asked to stop."""
        keep_going = True
        for callback in list(self._callbacks):
            if callback(progress) is False:
                keep_going = False
        return keep_going

    def _refresh_elapsed_time(self) -> None:
        self.elapsed_time = timedelta(seconds=self._clock() - self._clock_start)

    def _create_progress(self, is_final: bool = False) -> CopyProgress:
        return CopyProgress(
            total_bytes=self.source_length,
            bytes_copied=self.copied_bytes,
            average_speed=self.average_speed,
            elapsed_time=self.elapsed_time,
            source=self.source_stream,
            target=self.target_stream,
            is_final=is_final,
        )
