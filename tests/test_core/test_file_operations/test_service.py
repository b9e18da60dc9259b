"""Tests for the stream copy service."""

import io
import os

import pytest

from streamcopy.config.settings import CopySettings
from streamcopy.core.errors import (
    CopyDestinationExistsError,
    CopySameFileError,
    InvalidCopyArgumentError,
)
from streamcopy.core.file_operations import (
    DEFAULT_UPDATE_INTERVAL,
    CopyProgress,
    StreamCopyService,
    create_copy_service,
)


class TestStreamCopyService:
    """Test StreamCopyService functionality."""

    def test_service_initialization_with_defaults(self):
        """Test service initialization with default parameters."""
        service = StreamCopyService()

        assert service.buffer_size == 64 * 1024
        assert service.update_interval is None
        assert service.dynamic_update_interval is False

    def test_invalid_parameters_fail_fast(self):
        """Test that invalid parameters are rejected at service creation."""
        with pytest.raises(InvalidCopyArgumentError):
            StreamCopyService(buffer_size=0)
        with pytest.raises(InvalidCopyArgumentError):
            StreamCopyService(update_interval=0)
        with pytest.raises(InvalidCopyArgumentError):
            StreamCopyService(update_interval=10, dynamic_update_interval=True)

    def test_create_operation_uses_service_settings(self):
        """Test that operations inherit buffer size and interval mode."""
        service = StreamCopyService(buffer_size=128, dynamic_update_interval=True)

        operation = service.create_operation(io.BytesIO(bytes(1_000_000)), io.BytesIO())

        assert operation.buffer_size == 128
        assert operation.update_interval == 10_000

    def test_create_operation_default_interval(self):
        """Test the default interval when none is configured."""
        service = StreamCopyService()

        operation = service.create_operation(io.BytesIO(b"abc"), io.BytesIO())

        assert operation.update_interval == DEFAULT_UPDATE_INTERVAL

    def test_copy_stream(self):
        """Test copying between in-memory streams."""
        service = StreamCopyService(buffer_size=7, update_interval=10)
        notifications: list[CopyProgress] = []
        target = io.BytesIO()

        result = service.copy_stream(
            io.BytesIO(b"x" * 100), target, progress_callback=notifications.append
        )

        assert result.success is True
        assert result.cancelled is False
        assert result.bytes_copied == 100
        assert result.total_bytes == 100
        assert target.getvalue() == b"x" * 100
        assert notifications[-1].is_final is True

    def test_copy_stream_cancelled(self):
        """Test that a cancelled copy is reported as unsuccessful."""
        service = StreamCopyService(buffer_size=10, update_interval=10)

        result = service.copy_stream(
            io.BytesIO(bytes(100)), io.BytesIO(), progress_callback=lambda p: False
        )

        assert result.success is False
        assert result.cancelled is True
        assert result.bytes_copied == 10

    def test_copy_stream_propagates_errors(self):
        """Test that stream errors are not wrapped."""

        class BrokenReader:
            def read(self, size: int = -1) -> bytes:
                raise OSError("device gone")

        service = StreamCopyService()

        with pytest.raises(OSError, match="device gone"):
            service.copy_stream(BrokenReader(), io.BytesIO(), source_length=10)


class TestCopyFile:
    """Test single file copies."""

    @pytest.fixture
    def source_file(self, tmp_path):
        """Create a source file with known content."""
        path = tmp_path / "source.bin"
        path.write_bytes(os.urandom(50_000))
        return path

    def test_copy_file(self, source_file, tmp_path):
        """Test a successful file copy."""
        service = StreamCopyService(buffer_size=4096)
        dst = tmp_path / "out" / "copy.bin"

        result = service.copy_file(source_file, dst)

        assert result.success is True
        assert result.bytes_copied == 50_000
        assert dst.read_bytes() == source_file.read_bytes()

    def test_copy_file_preserves_metadata(self, source_file, tmp_path):
        """Test that modification times are copied."""
        os.utime(source_file, (1_000_000_000, 1_000_000_000))
        dst = tmp_path / "copy.bin"

        StreamCopyService().copy_file(source_file, dst)

        assert dst.stat().st_mtime == pytest.approx(1_000_000_000)

    def test_copy_file_without_metadata(self, source_file, tmp_path):
        """Test that metadata copying can be disabled."""
        os.utime(source_file, (1_000_000_000, 1_000_000_000))
        dst = tmp_path / "copy.bin"

        StreamCopyService().copy_file(source_file, dst, preserve_metadata=False)

        assert dst.stat().st_mtime != pytest.approx(1_000_000_000)

    def test_copy_file_refuses_overwrite(self, source_file, tmp_path):
        """Test that an existing destination is kept by default."""
        dst = tmp_path / "copy.bin"
        dst.write_bytes(b"keep me")

        with pytest.raises(CopyDestinationExistsError):
            StreamCopyService().copy_file(source_file, dst)

        assert dst.read_bytes() == b"keep me"

    def test_copy_file_to_new_path_without_overwrite(self, source_file, tmp_path):
        """Test that exclusive creation accepts a destination that does not exist."""
        dst = tmp_path / "fresh.bin"

        result = StreamCopyService().copy_file(source_file, dst, overwrite=False)

        assert result.success is True
        assert dst.read_bytes() == source_file.read_bytes()

    @pytest.mark.parametrize("overwrite", [True, False])
    def test_copy_file_onto_itself(self, source_file, overwrite):
        """Test that copying a file onto itself is refused and keeps the content."""
        content = source_file.read_bytes()

        with pytest.raises(CopySameFileError):
            StreamCopyService().copy_file(
                source_file, source_file, overwrite=overwrite
            )

        assert source_file.read_bytes() == content

    def test_copy_file_onto_itself_via_other_path(self, source_file, tmp_path):
        """Test that a differently spelled path to the source is detected."""
        content = source_file.read_bytes()
        alias = tmp_path / "sub" / ".." / source_file.name
        (tmp_path / "sub").mkdir()

        with pytest.raises(CopySameFileError):
            StreamCopyService().copy_file(source_file, alias, overwrite=True)

        assert source_file.read_bytes() == content

    def test_copy_file_overwrite(self, source_file, tmp_path):
        """Test replacing an existing destination."""
        dst = tmp_path / "copy.bin"
        dst.write_bytes(b"old")

        result = StreamCopyService().copy_file(source_file, dst, overwrite=True)

        assert result.success is True
        assert dst.read_bytes() == source_file.read_bytes()

    def test_cancelled_copy_removes_destination(self, source_file, tmp_path):
        """Test that a cancelled copy leaves no partial file."""
        service = StreamCopyService(buffer_size=1000, update_interval=1000)
        dst = tmp_path / "copy.bin"

        result = service.copy_file(source_file, dst, progress_callback=lambda p: False)

        assert result.cancelled is True
        assert result.bytes_copied == 1000
        assert not dst.exists()

    def test_missing_source(self, tmp_path):
        """Test that a missing source raises without creating the destination."""
        dst = tmp_path / "copy.bin"

        with pytest.raises(FileNotFoundError):
            StreamCopyService().copy_file(tmp_path / "missing.bin", dst)

        assert not dst.exists()

    def test_empty_file(self, tmp_path):
        """Test copying an empty file reports one final notification."""
        src = tmp_path / "empty.bin"
        src.write_bytes(b"")
        dst = tmp_path / "copy.bin"
        notifications: list[CopyProgress] = []

        result = StreamCopyService().copy_file(
            src, dst, progress_callback=notifications.append
        )

        assert result.bytes_copied == 0
        assert len(notifications) == 1
        assert dst.read_bytes() == b""


class TestCreateCopyService:
    """Test the service factory."""

    def test_create_without_settings(self):
        """Test factory defaults."""
        service = create_copy_service()

        assert isinstance(service, StreamCopyService)
        assert service.buffer_size == 64 * 1024

    def test_create_from_settings(self):
        """Test factory with explicit settings."""
        settings = CopySettings(buffer_size=2048, update_interval=4096)

        service = create_copy_service(settings)

        assert service.buffer_size == 2048
        assert service.update_interval == 4096
        assert service.dynamic_update_interval is False

    def test_create_from_dynamic_settings(self):
        """Test factory with the dynamic interval enabled."""
        settings = CopySettings(dynamic_update_interval=True)

        service = create_copy_service(settings)

        assert service.update_interval is None
        assert service.dynamic_update_interval is True
