"""Request engine for the wiki API.

Sends GET/POST requests through an ``HttpTransport``, adds the protocol
parameters every call needs (``format=json`` and ``maxlag``), and handles the
server's replication-lag backoff: when a response carries the
``X-Database-Lag`` header the engine sleeps (per ``Retry-After``, else for
``maxlag`` seconds) and resends the identical request.

The engine is mechanism only. It returns decoded envelopes unmodified and
never interprets ``error`` or result codes; that is the caller's job.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlencode

from ..exceptions import LagRetriesExhaustedError, MalformedResponseError
from ..transport.base import HttpTransport, TransportResponse
from .multipart import build_multipart_body, make_boundary, multipart_content_type
from .tokens import TokenCache
from .types import TokenKind, api_error

logger = logging.getLogger(__name__)

LAG_HEADER = "X-Database-Lag"
RETRY_AFTER_HEADER = "Retry-After"

# Marker of the HTML help page the API serves for requests it cannot parse
API_DOC_MARKER = "This is an auto-generated MediaWiki API documentation page"

MAXLAG_DEFAULT = 5
UNLIMITED_RETRIES = -1

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

SleepFn = Callable[[float], Awaitable[Any]]


class RequestState(Enum):
    IDLE = "idle"
    SENDING = "sending"
    LAGGED_WAITING = "lagged_waiting"  # Sleeping before a resend
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RetryPolicy:
    """Lag handling configuration.

    ``max_retries`` counts resends after the first attempt; a negative value
    means retry for as long as the server reports lag.
    """

    maxlag: int = MAXLAG_DEFAULT
    max_retries: int = UNLIMITED_RETRIES

    @property
    def unlimited(self) -> bool:
        return self.max_retries < 0


@dataclass
class CallStats:
    """What happened during the most recent logical call."""

    action: str
    method: str
    attempts: int = 0
    sleeps: list[float] = field(default_factory=list)
    retries_remaining: int | None = None  # None when the budget is unlimited

    @property
    def retries(self) -> int:
        return len(self.sleeps)


def normalize_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Convert Python values to API parameter strings.

    True becomes "1", False and None drop the parameter (the API treats any
    present boolean parameter as set), lists are pipe-joined, and bytes are
    passed through for multipart file fields.
    """
    result: dict[str, Any] = {}
    for key, value in params.items():
        if value is None or value is False:
            continue
        if value is True:
            result[key] = "1"
        elif isinstance(value, bytes):
            result[key] = value
        elif isinstance(value, (list, tuple)):
            result[key] = "|".join(str(v) for v in value)
        else:
            result[key] = str(value)
    return result


class RequestEngine:
    """Single-flight request/retry state machine.

    Each public call runs to completion before returning: the caller is
    suspended through every sleep-and-resend cycle. The engine is not meant
    to be shared by concurrent callers.

    Example:
        >>> engine = RequestEngine("https://example.org/w/api.php", transport)
        >>> envelope = await engine.get({"action": "query", "titles": "Main Page"})
    """

    def __init__(
        self,
        api_url: str,
        transport: HttpTransport,
        policy: RetryPolicy | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """Initialize the engine.

        Args:
            api_url: Full URL of the api.php endpoint
            transport: HTTP transport used for every request
            policy: Lag/retry configuration (defaults: maxlag 5, unlimited retries)
            sleep: Coroutine used to wait between lagged attempts
        """
        self.api_url = api_url
        self.transport = transport
        self.policy = policy or RetryPolicy()
        self.sleep = sleep
        self.state = RequestState.IDLE
        self.last_call: CallStats | None = None
        self.tokens = TokenCache(self)

    @property
    def maxlag(self) -> int:
        return self.policy.maxlag

    @maxlag.setter
    def maxlag(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"maxlag must be >= 0, got {value}")
        self.policy.maxlag = value

    @property
    def max_retries(self) -> int:
        return self.policy.max_retries

    @max_retries.setter
    def max_retries(self, value: int) -> None:
        self.policy.max_retries = value

    def prepare_params(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Normalize params and append the protocol-mandated ones."""
        prepared = normalize_params(params)
        prepared["format"] = "json"
        prepared["maxlag"] = str(self.maxlag)
        return prepared

    # -------------------------------------------------------------------------
    # Public request methods
    # -------------------------------------------------------------------------

    async def get(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Send a GET request with query-encoded params."""
        prepared = self.prepare_params(params)
        url = f"{self.api_url}?{urlencode(prepared)}"
        return await self._execute(
            lambda: self.transport.get(url, {}),
            action=prepared.get("action", "unknown"),
            method="GET",
        )

    async def post(
        self,
        params: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Send a POST request with a urlencoded body."""
        prepared = self.prepare_params(params)
        body = urlencode(prepared).encode("utf-8")
        request_headers = {"Content-Type": FORM_CONTENT_TYPE, **(headers or {})}
        return await self._execute(
            lambda: self.transport.post(self.api_url, request_headers, body),
            action=prepared.get("action", "unknown"),
            method="POST",
        )

    async def post_multipart(
        self,
        fields: Mapping[str, Any],
        file_field: str = "file",
        filename: str | None = None,
    ) -> dict[str, Any]:
        """Send a POST request with a raw multipart/form-data body."""
        prepared = self.prepare_params(fields)
        boundary = make_boundary()
        body = build_multipart_body(prepared, boundary, file_field=file_field, filename=filename)
        request_headers = {
            "Content-Type": multipart_content_type(boundary),
            "Content-Length": str(len(body)),
        }
        return await self._execute(
            lambda: self.transport.post(self.api_url, request_headers, body),
            action=prepared.get("action", "upload"),
            method="POST",
        )

    async def post_with_token(
        self,
        params: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any] | None:
        """POST a mutating request carrying the session's write token.

        Returns:
            The response envelope, or None if no token could be obtained
            (see ``tokens.last_error``). No write is sent in that case.
        """
        token = await self.tokens.get_or_fetch(TokenKind.CSRF)
        if token is None:
            return None
        envelope = await self.post({**params, "token": token}, headers)
        self._check_token_rejected(envelope)
        return envelope

    async def post_multipart_with_token(
        self,
        fields: Mapping[str, Any],
        file_field: str = "file",
        filename: str | None = None,
    ) -> dict[str, Any] | None:
        """Multipart counterpart of ``post_with_token``."""
        token = await self.tokens.get_or_fetch(TokenKind.CSRF)
        if token is None:
            return None
        envelope = await self.post_multipart(
            {**fields, "token": token}, file_field=file_field, filename=filename
        )
        self._check_token_rejected(envelope)
        return envelope

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    def _check_token_rejected(self, envelope: dict[str, Any]) -> None:
        error = api_error(envelope)
        if error and error.get("code") == "badtoken":
            logger.warning("Write token rejected by the server; discarding cached token")
            self.tokens.invalidate()

    def _retry_delay(self, response: TransportResponse) -> float:
        """Seconds to wait before resending a lagged request."""
        retry_after = response.header(RETRY_AFTER_HEADER)
        if retry_after is not None:
            try:
                return max(float(retry_after), 0.0)
            except ValueError:
                logger.debug(f"Ignoring unparseable Retry-After header: {retry_after!r}")
        return float(self.maxlag)

    async def _execute(
        self,
        send: Callable[[], Awaitable[TransportResponse]],
        action: str,
        method: str,
    ) -> dict[str, Any]:
        """Run one logical call: send, back off while lagged, decode."""
        stats = CallStats(
            action=action,
            method=method,
            retries_remaining=None if self.policy.unlimited else self.policy.max_retries,
        )
        self.last_call = stats
        self.state = RequestState.SENDING

        try:
            while True:
                stats.attempts += 1
                logger.debug("%s %s request (attempt %d)", method, action, stats.attempts)
                response = await send()

                if response.header(LAG_HEADER) is None:
                    break

                if stats.retries_remaining is not None:
                    if stats.retries_remaining <= 0:
                        logger.error(
                            "RETRY_EXHAUSTED: %s %s still lagged after %d retries (lag=%ss)",
                            method,
                            action,
                            stats.retries,
                            response.header(LAG_HEADER),
                        )
                        raise LagRetriesExhaustedError(action, stats.retries)
                    stats.retries_remaining -= 1

                delay = self._retry_delay(response)
                logger.warning(
                    "LAGGED: %s %s attempt=%d lag=%ss, retrying in %.1fs",
                    method,
                    action,
                    stats.attempts,
                    response.header(LAG_HEADER),
                    delay,
                )
                self.state = RequestState.LAGGED_WAITING
                stats.sleeps.append(delay)
                await self.sleep(delay)
                self.state = RequestState.SENDING

            if stats.retries:
                logger.warning(
                    "RETRY_RECOVERED: %s %s succeeded after %d retries",
                    method,
                    action,
                    stats.retries,
                )

            envelope = self._decode(response, action, method)
        except BaseException:
            # CancelledError is a BaseException
            self.state = RequestState.FAILED
            raise

        self.state = RequestState.COMPLETED
        return envelope

    def _decode(self, response: TransportResponse, action: str, method: str) -> dict[str, Any]:
        """Decode a response body into an envelope, or fail permanently."""
        text = response.text
        if API_DOC_MARKER in text:
            logger.error("API returned its documentation page for %s %s", method, action)
            raise MalformedResponseError(action, method, "the API could not understand the request")

        try:
            envelope = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON for %s %s (HTTP %d): %s", method, action, response.status, e)
            raise MalformedResponseError(action, method, f"invalid JSON ({e})") from e

        if not isinstance(envelope, dict):
            raise MalformedResponseError(
                action, method, f"expected a JSON object, got {type(envelope).__name__}"
            )
        return envelope
