"""
Local file operations for uploads and downloads.

Provides:
- Whole-file binary reads for uploads
- Atomic binary writes using temp file + rename for downloads
"""

import os
import tempfile
from pathlib import Path

import aiofiles
import aiofiles.os

from ..exceptions import FileAccessError


async def ensure_directory(path: Path) -> None:
    """Ensure directory exists, creating if necessary.

    Args:
        path: Directory path to ensure exists
    """
    try:
        await aiofiles.os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise FileAccessError("create_directory", str(path), e) from e


async def read_bytes(path: str | Path) -> bytes:
    """Read a whole file.

    Args:
        path: Path to the file

    Returns:
        File contents

    Raises:
        FileAccessError: If the file is missing or unreadable
    """
    try:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()
    except OSError as e:
        raise FileAccessError("read", str(path), e) from e


async def write_bytes_atomic(path: str | Path, data: bytes) -> None:
    """Write a file atomically using temp file + rename.

    Args:
        path: Target path
        data: Contents to write

    Raises:
        FileAccessError: If the directory or file cannot be written
    """
    path = Path(path)
    await ensure_directory(path.parent)

    try:
        fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_")
    except OSError as e:
        raise FileAccessError("write", str(path), e) from e

    try:
        os.close(fd)
        async with aiofiles.open(temp_path, "wb") as f:
            await f.write(data)
            await f.flush()
            os.fsync(f.fileno())

        await aiofiles.os.replace(temp_path, path)
    except Exception as e:
        # Clean up temp file on error
        try:
            await aiofiles.os.remove(temp_path)
        except OSError:
            pass
        raise FileAccessError("write", str(path), e) from e
