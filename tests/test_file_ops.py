"""
Tests for local file helpers.
"""

from __future__ import annotations

import pytest

from wiki_access.exceptions import FileAccessError
from wiki_access.local.file_ops import ensure_directory, read_bytes, write_bytes_atomic


class TestFileOps:
    """Tests for read_bytes and write_bytes_atomic."""

    async def test_write_then_read(self, tmp_path):
        """Written bytes are read back unchanged."""
        path = tmp_path / "nested" / "data.bin"

        await write_bytes_atomic(path, b"\x00\xffpayload")

        assert await read_bytes(path) == b"\x00\xffpayload"

    async def test_overwrite(self, tmp_path):
        """An existing file is replaced."""
        path = tmp_path / "data.bin"
        path.write_bytes(b"old")

        await write_bytes_atomic(path, b"new")

        assert path.read_bytes() == b"new"

    async def test_no_temp_files_left(self, tmp_path):
        """The temp file is renamed into place."""
        await write_bytes_atomic(tmp_path / "data.bin", b"x")

        assert [p.name for p in tmp_path.iterdir()] == ["data.bin"]

    async def test_read_missing(self, tmp_path):
        """Missing files raise FileAccessError."""
        with pytest.raises(FileAccessError) as exc_info:
            await read_bytes(tmp_path / "missing.bin")

        assert exc_info.value.operation == "read"

    async def test_ensure_directory_on_file(self, tmp_path):
        """A file in the way of a directory is an error."""
        blocker = tmp_path / "blocker"
        blocker.write_text("x")

        with pytest.raises(FileAccessError):
            await ensure_directory(blocker)
