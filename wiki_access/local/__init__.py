"""Local file helpers used by file uploads and downloads."""

from .file_ops import ensure_directory, read_bytes, write_bytes_atomic

__all__ = [
    "ensure_directory",
    "read_bytes",
    "write_bytes_atomic",
]
