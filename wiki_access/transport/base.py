"""
HTTP transport interface.

The request engine talks to the wiki only through this contract, so tests
can script responses and applications can swap the HTTP stack.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TransportResponse:
    """Raw HTTP response: status, headers, body bytes."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class HttpTransport(ABC):
    """Abstract HTTP transport.

    Implementations must raise ``TransportError`` on connection failures and
    return any HTTP status (including errors) as a ``TransportResponse``.
    """

    @abstractmethod
    async def get(self, url: str, headers: Mapping[str, str] | None = None) -> TransportResponse:
        """Send a GET request."""
        ...

    @abstractmethod
    async def post(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> TransportResponse:
        """Send a POST request with a pre-encoded body."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        return None
