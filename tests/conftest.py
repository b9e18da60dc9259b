"""Core test fixtures for the streamcopy project."""

import io
import itertools
import logging
import os
from collections.abc import Callable, Generator

import pytest
import structlog
from typer.testing import CliRunner


# ---- Base Fixtures ----


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    """Undo handler and structlog changes made by setup_logging."""
    root_logger = logging.getLogger()
    original_level = root_logger.level

    yield

    for handler in root_logger.handlers[:]:
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(original_level)
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path_factory) -> None:
    """Keep STREAMCOPY_* variables and .env files from leaking into tests."""
    for name in list(os.environ):
        if name.upper().startswith("STREAMCOPY_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))


# ---- Stream Fixtures ----


class RecordingWriter:
    """Writable stream that keeps every chunk it receives."""

    def __init__(self, max_chunk: int | None = None) -> None:
        self.chunks: list[bytes] = []
        self.max_chunk = max_chunk

    def write(self, data: bytes) -> int:
        accepted = bytes(data if self.max_chunk is None else data[: self.max_chunk])
        self.chunks.append(accepted)
        return len(accepted)

    def getvalue(self) -> bytes:
        return b"".join(self.chunks)


class CountingReader(io.BytesIO):
    """In-memory source that counts read calls."""

    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self.read_calls = 0

    def readinto(self, buffer) -> int:  # type: ignore[no-untyped-def]
        self.read_calls += 1
        return super().readinto(buffer)


@pytest.fixture
def recording_writer() -> RecordingWriter:
    """Writable stream recording written chunks."""
    return RecordingWriter()


@pytest.fixture
def step_clock() -> Callable[[float], Callable[[], float]]:
    """Factory for a fake monotonic clock advancing by a fixed step per call."""

    def factory(step: float) -> Callable[[], float]:
        counter = itertools.count(start=0.0, step=step)
        return lambda: next(counter)

    return factory


@pytest.fixture
def make_counting_reader() -> Callable[[bytes], CountingReader]:
    """Factory for in-memory sources that count their reads."""
    return CountingReader


@pytest.fixture
def make_short_writer() -> Callable[[int], RecordingWriter]:
    """Factory for writers accepting at most ``max_chunk`` bytes per call."""
    return lambda max_chunk: RecordingWriter(max_chunk=max_chunk)
