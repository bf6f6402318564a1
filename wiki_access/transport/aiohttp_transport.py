"""
aiohttp-backed transport.

Keeps a single ClientSession (and so a single cookie jar) for the lifetime
of the transport; the wiki's login session lives in those cookies.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

import aiohttp

from ..exceptions import TransportError
from .base import HttpTransport, TransportResponse

logger = logging.getLogger(__name__)


class AiohttpTransport(HttpTransport):
    """HTTP transport using ``aiohttp.ClientSession``."""

    def __init__(
        self,
        user_agent: str | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the transport.

        Args:
            user_agent: User-Agent header sent with every request
            headers: Extra default headers
            timeout: Total timeout per HTTP request (seconds)
        """
        self.user_agent = user_agent
        self.default_headers = dict(headers or {})
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            headers = dict(self.default_headers)
            if self.user_agent:
                headers["User-Agent"] = self.user_agent
            self._session = aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def _send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None,
        body: bytes | None,
    ) -> TransportResponse:
        session = self._get_session()
        request_headers = dict(headers or {})
        if self.user_agent:
            # Picks up user agent changes made after the session was opened
            request_headers.setdefault("User-Agent", self.user_agent)
        try:
            async with session.request(
                method, url, headers=request_headers, data=body
            ) as response:
                payload = await response.read()
                return TransportResponse(
                    status=response.status,
                    headers={k: v for k, v in response.headers.items()},
                    body=payload,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"{method} {url} failed: {e}")
            raise TransportError(url, e) from e

    async def get(self, url: str, headers: Mapping[str, str] | None = None) -> TransportResponse:
        return await self._send("GET", url, headers, None)

    async def post(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> TransportResponse:
        return await self._send("POST", url, headers, body)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
