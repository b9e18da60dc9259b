"""Protocols for the byte streams a copy operation works on."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ReadableStream(Protocol):
    """A binary stream supporting bounded reads.

    ``read`` returns at most ``size`` bytes and an empty result once the
    stream is exhausted.
    """

    def read(self, size: int = -1, /) -> bytes: ...


@runtime_checkable
class WritableStream(Protocol):
    """A binary stream supporting writes.

    ``write`` may return the number of bytes accepted; ``None`` means the
    whole chunk was written.
    """

    def write(self, data: bytes, /) -> int | None: ...
