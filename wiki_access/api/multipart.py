"""Raw multipart/form-data bodies for file uploads.

The upload API wants the file contents as a binary part and every other
parameter as an 8bit text part, all in one body with a random boundary.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping

CRLF = b"\r\n"


def make_boundary() -> str:
    """Generate a boundary string that will not occur in the payload."""
    return f"---WikiAccess-{uuid.uuid4().hex}"


def build_multipart_body(
    fields: Mapping[str, str | bytes],
    boundary: str,
    file_field: str = "file",
    filename: str | None = None,
) -> bytes:
    """Encode ``fields`` as a multipart body.

    Args:
        fields: Field name to value, in the order they should appear
        boundary: Boundary from make_boundary()
        file_field: Name of the field holding binary file data
        filename: Filename announced for the binary part

    Returns:
        The complete body, including the closing boundary
    """
    parts: list[bytes] = []
    delimiter = f"--{boundary}".encode()

    for name, value in fields.items():
        parts.append(delimiter + CRLF)
        disposition = f'Content-Disposition: form-data; name="{name}"'
        if name == file_field:
            disposition += f'; filename="{filename or ""}"'
            parts.append(disposition.encode("utf-8") + CRLF)
            parts.append(b"Content-Type: application/octet-stream; charset=UTF-8" + CRLF)
            parts.append(b"Content-Transfer-Encoding: binary" + CRLF)
        else:
            parts.append(disposition.encode("utf-8") + CRLF)
            parts.append(b"Content-Type: text/plain; charset=UTF-8" + CRLF)
            parts.append(b"Content-Transfer-Encoding: 8bit" + CRLF)
        payload = value if isinstance(value, bytes) else str(value).encode("utf-8")
        parts.append(CRLF + payload + CRLF)

    parts.append(delimiter + b"--" + CRLF)
    return b"".join(parts)


def multipart_content_type(boundary: str) -> str:
    return f"multipart/form-data; boundary={boundary}"
