"""
Wiki API client.

Owns the HTTP transport, the request engine (maxlag retries) and the
session's write-token cache, and exposes the API actions the page and file
entities are built on.

Business-level failures never raise: the method returns None/False and
the server's error (or a local description) is left in ``client.error``.
Only fatal communication errors (``WikiCommunicationError``) propagate.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from .api.engine import MAXLAG_DEFAULT, UNLIMITED_RETRIES, RequestEngine, RetryPolicy, SleepFn
from .api.tokens import TokenCache
from .api.types import LoginResult, TokenKind, api_error
from .config import DEFAULT_USER_AGENT, ClientConfig
from .entities.file import WikiFile
from .entities.page import WikiPage
from .transport.aiohttp_transport import AiohttpTransport
from .transport.base import HttpTransport

logger = logging.getLogger(__name__)


class WikiClient:
    """Session-scoped access to one wiki's api.php.

    Example:
        >>> async with WikiClient.from_config(ClientConfig.from_env()) as wiki:
        ...     await wiki.login("DocsBot", "bot-password")
        ...     page = await wiki.get_page("Release notes")
        ...     print(page.get_section("2024"))
    """

    def __init__(
        self,
        api_url: str,
        transport: HttpTransport | None = None,
        *,
        maxlag: int = MAXLAG_DEFAULT,
        max_retries: int = UNLIMITED_RETRIES,
        user_agent: str = DEFAULT_USER_AGENT,
        headers: Mapping[str, str] | None = None,
        timeout: float = 30.0,
        sleep: SleepFn = asyncio.sleep,
        config: ClientConfig | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_url: Full URL of the api.php endpoint
            transport: HTTP transport (default: a new AiohttpTransport owned by the client)
            maxlag: Maximum acceptable replication lag (seconds)
            max_retries: Lag retry budget; -1 retries indefinitely
            user_agent: User-Agent sent with every request
            headers: Extra default headers for the default transport
            timeout: HTTP timeout for the default transport
            sleep: Coroutine used to wait between lagged attempts
            config: Source configuration, kept for its login credentials
        """
        self.api_url = api_url
        self.config = config
        self._owns_transport = transport is None
        self.transport: HttpTransport = transport or AiohttpTransport(
            user_agent=user_agent, headers=headers, timeout=timeout
        )
        self.engine = RequestEngine(
            api_url,
            self.transport,
            RetryPolicy(maxlag=maxlag, max_retries=max_retries),
            sleep=sleep,
        )
        self._user_agent = user_agent
        self._logged_in = False
        self.error: dict[str, Any] | None = None

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: HttpTransport | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> WikiClient:
        """Create a client from a ClientConfig."""
        return cls(
            config.api_url,
            transport,
            maxlag=config.maxlag,
            max_retries=config.max_retries,
            user_agent=config.user_agent,
            headers=config.headers,
            timeout=config.timeout,
            sleep=sleep,
            config=config,
        )

    async def __aenter__(self) -> WikiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the transport if the client created it."""
        if self._owns_transport:
            await self.transport.close()

    # -------------------------------------------------------------------------
    # Session settings
    # -------------------------------------------------------------------------

    @property
    def tokens(self) -> TokenCache:
        return self.engine.tokens

    @property
    def logged_in(self) -> bool:
        return self._logged_in

    @property
    def maxlag(self) -> int:
        return self.engine.maxlag

    @maxlag.setter
    def maxlag(self, value: int) -> None:
        self.engine.maxlag = value

    @property
    def max_retries(self) -> int:
        return self.engine.max_retries

    @max_retries.setter
    def max_retries(self, value: int) -> None:
        self.engine.max_retries = value

    @property
    def user_agent(self) -> str:
        return self._user_agent

    @user_agent.setter
    def user_agent(self, value: str) -> None:
        """Change the User-Agent; set it before login() to cover the whole session."""
        self._user_agent = value
        if isinstance(self.transport, AiohttpTransport):
            self.transport.user_agent = value

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    async def token(self, kind: TokenKind | str = TokenKind.CSRF) -> str | None:
        """Obtain a csrf (cached) or login token; None on API error."""
        token = await self.tokens.get_or_fetch(kind)
        self.error = self.tokens.last_error if token is None else None
        return token

    async def login(
        self,
        username: str | None = None,
        password: str | None = None,
        domain: str | None = None,
    ) -> bool:
        """Log in to the wiki.

        Credentials default to those in the client's config.

        Returns:
            True if logged in; otherwise ``error`` says why.
        """
        if username is None and self.config is not None:
            username = self.config.username
            password = self.config.password if password is None else password
            domain = self.config.domain if domain is None else domain
        if not username or password is None:
            self.error = {"auth": "No credentials provided"}
            return False

        login_token = await self.token(TokenKind.LOGIN)
        if login_token is None:
            return False

        envelope = await self.engine.post(
            {
                "action": "login",
                "lgname": username,
                "lgpassword": password,
                "lgtoken": login_token,
                "lgdomain": domain,
            }
        )

        error = api_error(envelope)
        if error is not None:
            self.error = error
            return False
        self.error = None

        result = LoginResult.from_response(envelope)
        if result.result is not None and not result.success:
            if result.result == "Failed":
                self.error = {"auth": "Incorrect username or password"}
            else:
                self.error = {"auth": f"The API result was: {result.result}"}
            logger.warning(f"Login failed for {username}: {result.result}")
            return False

        self._logged_in = True
        logger.info(f"Logged in as {result.username or username}")
        return True

    async def logout(self) -> bool:
        """Log out and discard the cached write token."""
        logout_token = await self.token()
        if logout_token is None:
            return False

        envelope = await self.engine.post({"action": "logout", "token": logout_token})

        error = api_error(envelope)
        if error is not None:
            # The session is still open, so the cached token stays valid
            self.error = error
            return False
        self.error = None

        self.tokens.invalidate()
        self._logged_in = False
        logger.info("Logged out")
        return True

    # -------------------------------------------------------------------------
    # API actions
    # -------------------------------------------------------------------------

    async def query(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Run ``action=query`` and return the envelope."""
        return await self.engine.get({**params, "action": "query"})

    async def parse(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Run ``action=parse`` and return the envelope."""
        return await self.engine.get({**params, "action": "parse"})

    async def _guarded(self, params: Mapping[str, Any]) -> dict[str, Any] | None:
        envelope = await self.engine.post_with_token(params)
        if envelope is None:
            self.error = self.tokens.last_error
        return envelope

    async def edit(self, params: Mapping[str, Any]) -> dict[str, Any] | None:
        """Run ``action=edit``; None if no write token could be obtained."""
        return await self._guarded({**params, "action": "edit"})

    async def delete(self, params: Mapping[str, Any]) -> dict[str, Any] | None:
        """Run ``action=delete``; None if no write token could be obtained."""
        return await self._guarded({**params, "action": "delete"})

    async def filerevert(self, params: Mapping[str, Any]) -> dict[str, Any] | None:
        """Run ``action=filerevert``; None if no write token could be obtained."""
        return await self._guarded({**params, "action": "filerevert"})

    async def upload(self, params: Mapping[str, Any]) -> dict[str, Any] | None:
        """Run ``action=upload`` as a multipart POST.

        ``params["file"]`` (bytes) is sent as the binary part; for uploads by
        URL pass ``params["url"]`` instead.
        """
        envelope = await self.engine.post_multipart_with_token(
            {**params, "action": "upload"},
            file_field="file",
            filename=params.get("filename"),
        )
        if envelope is None:
            self.error = self.tokens.last_error
        return envelope

    async def download(self, url: str) -> bytes | None:
        """Download raw data (e.g. a file's URL) outside the API.

        Returns:
            The body, or None on an HTTP error status (see ``error``).
        """
        response = await self.transport.get(url, {})
        if not response.ok:
            logger.warning(f"Download of {url} failed with HTTP {response.status}")
            self.error = {
                "file": f"Download error (HTTP status: {response.status})",
                "http": response.status,
            }
            return None
        self.error = None
        return response.body

    # -------------------------------------------------------------------------
    # Entities
    # -------------------------------------------------------------------------

    async def get_page(self, title: str) -> WikiPage:
        """Return a WikiPage populated with the page's current text."""
        return await WikiPage.create(title, self)

    async def get_file(self, filename: str) -> WikiFile:
        """Return a WikiFile populated with the file's current info."""
        return await WikiFile.create(filename, self)
