"""
HTTP transports for the request engine.

Example:
    >>> from wiki_access.transport import AiohttpTransport
    >>> transport = AiohttpTransport(user_agent="my-bot/1.0")
    >>> response = await transport.get("https://example.org/w/api.php?action=query")
    >>> await transport.close()
"""

from .aiohttp_transport import AiohttpTransport
from .base import HttpTransport, TransportResponse

__all__ = [
    "AiohttpTransport",
    "HttpTransport",
    "TransportResponse",
]
