"""
Shared test configuration and fixtures.

Provides a scripted HTTP transport that records every request and replays
canned responses in order, plus a sleep stand-in that records delays
instead of waiting.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, urlsplit

import pytest

from wiki_access.api.engine import RequestEngine, RetryPolicy
from wiki_access.client import WikiClient
from wiki_access.transport.base import HttpTransport, TransportResponse

logger = logging.getLogger(__name__)

API_URL = "https://wiki.test/w/api.php"


@dataclass
class RecordedRequest:
    """One request seen by FakeTransport."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def params(self) -> dict[str, str]:
        """Query string (GET) or urlencoded body (POST) as a flat dict."""
        if self.method == "GET":
            return dict(parse_qsl(urlsplit(self.url).query, keep_blank_values=True))
        if self.headers.get("Content-Type", "").startswith("multipart/"):
            return {}
        return dict(parse_qsl(self.body.decode("utf-8"), keep_blank_values=True))


def json_response(
    payload: Any,
    status: int = 200,
    headers: Mapping[str, str] | None = None,
) -> TransportResponse:
    return TransportResponse(
        status=status,
        headers={"Content-Type": "application/json", **(headers or {})},
        body=json.dumps(payload).encode("utf-8"),
    )


def lagged_response(lag: int = 3, retry_after: int | None = None) -> TransportResponse:
    """A maxlag rejection as the API sends it."""
    headers = {"X-Database-Lag": str(lag)}
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)
    return json_response(
        {"error": {"code": "maxlag", "info": f"Waiting for a database server: {lag} seconds lagged"}},
        headers=headers,
    )


def token_response(token: str = "abc123+\\") -> TransportResponse:
    return json_response({"batchcomplete": "", "query": {"tokens": {"csrftoken": token}}})


def page_response(
    title: str,
    text: str | None,
    timestamp: str = "2024-05-01T10:00:00Z",
    page_id: int = 12,
) -> TransportResponse:
    """A prop=info|revisions answer; ``text=None`` means the page is missing."""
    if text is None:
        page: dict[str, Any] = {"ns": 0, "title": title, "missing": ""}
        key = "-1"
    else:
        page = {
            "pageid": page_id,
            "ns": 0,
            "title": title,
            "revisions": [{"contentformat": "text/x-wiki", "*": text}],
        }
        key = str(page_id)
    return json_response({"curtimestamp": timestamp, "query": {"pages": {key: page}}})


class FakeTransport(HttpTransport):
    """Transport that replays queued responses and records requests."""

    def __init__(self, *responses: TransportResponse):
        self.responses: deque[TransportResponse] = deque(responses)
        self.requests: list[RecordedRequest] = []
        self.closed = False

    def queue(self, *responses: TransportResponse) -> None:
        self.responses.extend(responses)

    def _next(self, request: RecordedRequest) -> TransportResponse:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected {request.method} request: {request.params}")
        return self.responses.popleft()

    async def get(self, url: str, headers: Mapping[str, str] | None = None) -> TransportResponse:
        return self._next(RecordedRequest("GET", url, dict(headers or {})))

    async def post(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> TransportResponse:
        return self._next(RecordedRequest("POST", url, dict(headers or {}), body))

    async def close(self) -> None:
        self.closed = True

    @property
    def actions(self) -> list[str | None]:
        return [r.params.get("action") for r in self.requests]


class RecordingSleep:
    """Sleep stand-in: remembers each requested delay and returns at once."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def transport():
    """Fixture providing an empty scripted transport."""
    return FakeTransport()


@pytest.fixture
def sleep():
    """Fixture providing a recording sleep."""
    return RecordingSleep()


@pytest.fixture
def engine(transport, sleep):
    """Fixture providing a request engine with the default retry policy."""
    return RequestEngine(API_URL, transport, RetryPolicy(), sleep=sleep)


@pytest.fixture
async def client(transport, sleep):
    """Fixture providing a client bound to the scripted transport."""
    wiki = WikiClient(API_URL, transport, sleep=sleep)
    yield wiki
    await wiki.close()
