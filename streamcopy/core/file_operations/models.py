"""Models for stream copy progress and results."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any


def format_speed(bytes_per_second: float) -> str:
    """Human-readable speed in MB/s, switching to GB/s above 1000 MB/s."""
    mbps = bytes_per_second / (1024 * 1024)
    if mbps > 1000:
        return f"{mbps / 1024:.1f} GB/s"
    return f"{mbps:.1f} MB/s"


def compute_average_speed(copied_bytes: int, elapsed: timedelta) -> float:
    """Lifetime average speed in bytes per second.

    Returns 0.0 when no measurable time has elapsed.
    """
    seconds = elapsed.total_seconds()
    if seconds <= 0:
        return 0.0
    return copied_bytes / seconds


@dataclass(frozen=True)
class CopyProgress:
    """Progress snapshot passed to progress callbacks."""

    total_bytes: int
    bytes_copied: int
    average_speed: float
    elapsed_time: timedelta = timedelta(0)
    source: Any = field(default=None, repr=False, compare=False)
    target: Any = field(default=None, repr=False, compare=False)
    is_final: bool = False

    @property
    def bytes_remaining(self) -> int:
        """Bytes still to copy."""
        return max(0, self.total_bytes - self.bytes_copied)

    @property
    def progress_percent(self) -> float:
        """Calculate bytes progress percentage."""
        if self.total_bytes > 0:
            return (self.bytes_copied / self.total_bytes) * 100
        # An empty source is complete once the final snapshot arrives
        return 100.0 if self.is_final else 0.0

    @property
    def speed_mbps(self) -> float:
        """Average copy speed in MB/s."""
        return self.average_speed / (1024 * 1024)

    @property
    def speed_summary(self) -> str:
        """Human-readable speed summary."""
        return format_speed(self.average_speed)


# A callback returns False to request cancellation; None or True continues.
ProgressCallback = Callable[[CopyProgress], bool | None]


@dataclass
class CopyResult:
    """Result of a copy operation with performance metrics."""

    success: bool
    bytes_copied: int
    total_bytes: int
    elapsed_time: float
    cancelled: bool = False
    error: str | None = None

    @property
    def speed_mbps(self) -> float:
        """Calculate copy speed in MB/s."""
        if self.elapsed_time > 0:
            return (self.bytes_copied / (1024 * 1024)) / self.elapsed_time
        return 0.0

    @property
    def speed_summary(self) -> str:
        """Human-readable speed summary."""
        return format_speed(self.speed_mbps * 1024 * 1024)

    @classmethod
    def from_progress(cls, progress: CopyProgress, cancelled: bool) -> "CopyResult":
        """Build a result from the final progress snapshot of an operation."""
        return cls(
            success=not cancelled,
            bytes_copied=progress.bytes_copied,
            total_bytes=progress.total_bytes,
            elapsed_time=progress.elapsed_time.total_seconds(),
            cancelled=cancelled,
        )
