"""
Write-token cache.

A CSRF token stays valid for the whole login session, so it is fetched once
and reused by every mutating call until logout. Login tokens are single use
and are always fetched fresh.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..exceptions import UnsupportedTokenError
from .types import TokenKind, TokenResult, api_error

if TYPE_CHECKING:
    from .engine import RequestEngine

logger = logging.getLogger(__name__)


class TokenCache:
    """Holds at most one cached CSRF token for the session."""

    def __init__(self, engine: RequestEngine):
        self._engine = engine
        self._csrf_token: str | None = None
        self.last_error: dict[str, Any] | None = None
        self.fetch_count = 0

    @property
    def cached(self) -> str | None:
        return self._csrf_token

    async def get_or_fetch(self, kind: TokenKind | str = TokenKind.CSRF) -> str | None:
        """Return a token of the given kind.

        Args:
            kind: ``csrf`` (cached) or ``login`` (never cached)

        Returns:
            The token, or None if the server answered with an error; the
            error envelope is then in ``last_error``.

        Raises:
            UnsupportedTokenError: For any other token kind. No request is sent.
        """
        try:
            token_kind = TokenKind(kind)
        except ValueError:
            raise UnsupportedTokenError(str(kind)) from None

        if token_kind is TokenKind.CSRF and self._csrf_token is not None:
            return self._csrf_token

        self.fetch_count += 1
        logger.debug(f"Fetching {token_kind.value} token")
        envelope = await self._engine.post(
            {"action": "query", "meta": "tokens", "type": token_kind.value}
        )

        error = api_error(envelope)
        if error is not None:
            self.last_error = error
            logger.warning(f"Token request failed: {error.get('code', error)}")
            return None
        self.last_error = None

        token = TokenResult.from_response(token_kind, envelope).token
        if token is None:
            self.last_error = {"token": f"No {token_kind.value} token in API response"}
            return None
        if token_kind is TokenKind.CSRF:
            self._csrf_token = token
        return token

    def invalidate(self) -> None:
        """Forget the cached CSRF token."""
        self._csrf_token = None
