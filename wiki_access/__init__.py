"""
Wiki Access

Async client library for MediaWiki-style wikis.

Provides:
- Section indexing and retrieval of page wikitext
- Request engine with replication-lag (maxlag) backoff
- Cached write tokens for edits, deletes, uploads and reverts
- Page and file entities with error records instead of exceptions

Usage:

    >>> from wiki_access import ClientConfig, WikiClient
    >>> async with WikiClient.from_config(ClientConfig.from_env()) as wiki:
    ...     await wiki.login()
    ...
    ...     page = await wiki.get_page("Release notes")
    ...     print(page.get_section("2024", include_heading=True))
    ...
    ...     if not await page.set_section("Bug fixes only.", "2024", summary="trim"):
    ...         print(page.error)

Sections:

    # Work with a text snapshot directly, without a wiki
    from wiki_access.sections import PageContent, SectionAccessor, build_section_index

Transports:

    # aiohttp (default) or any HttpTransport implementation
    from wiki_access.transport import AiohttpTransport, HttpTransport
"""

from .api import (
    CallStats,
    FileRevision,
    RequestEngine,
    RequestState,
    RetryPolicy,
    TokenKind,
)
from .client import WikiClient
from .config import ClientConfig
from .entities import WikiFile, WikiPage

# Exceptions
from .exceptions import (
    FileAccessError,
    LagRetriesExhaustedError,
    MalformedResponseError,
    TransportError,
    UnsupportedTokenError,
    WikiAccessError,
    WikiCommunicationError,
)
from .sections import (
    PageContent,
    SectionAccessor,
    SectionEntry,
    SectionIndex,
    SectionKeying,
    SectionSelector,
    build_section_index,
)
from .transport import AiohttpTransport, HttpTransport, TransportResponse

__all__ = [
    # Client
    "ClientConfig",
    "WikiClient",
    # Entities
    "WikiFile",
    "WikiPage",
    # Sections
    "PageContent",
    "SectionAccessor",
    "SectionEntry",
    "SectionIndex",
    "SectionKeying",
    "SectionSelector",
    "build_section_index",
    # Engine
    "CallStats",
    "FileRevision",
    "RequestEngine",
    "RequestState",
    "RetryPolicy",
    "TokenKind",
    # Transport
    "AiohttpTransport",
    "HttpTransport",
    "TransportResponse",
    # Exceptions
    "FileAccessError",
    "LagRetriesExhaustedError",
    "MalformedResponseError",
    "TransportError",
    "UnsupportedTokenError",
    "WikiAccessError",
    "WikiCommunicationError",
]

__version__ = "1.0.0"
