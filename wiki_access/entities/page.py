"""
Wiki page entity.

A WikiPage holds the last fetched text of one page together with its
section index, and writes changes back through the client. Failures the
wiki reports (invalid title, denied edit, missing section) are recorded in
``page.error`` rather than raised.
"""

from __future__ import annotations

import hashlib
import logging
from typing import TYPE_CHECKING, Any

from ..api.types import DeleteResult, EditResult, api_error, single_page
from ..logging_utils import EntityLoggerAdapter
from ..sections import (
    PageContent,
    SectionAccessor,
    SectionIndex,
    SectionKeying,
    SectionSelector,
    build_section_index,
)

if TYPE_CHECKING:
    from ..client import WikiClient

logger = logging.getLogger(__name__)


def revision_text(revision: dict[str, Any]) -> str | None:
    """Content of a revision in any of the API's JSON layouts."""
    slots = revision.get("slots")
    if isinstance(slots, dict) and "main" in slots:
        revision = slots["main"]
    if "*" in revision:
        return revision["*"]
    return revision.get("content")


class WikiPage:
    """A wiki page whose text and sections can be read and changed.

    Use ``await WikiPage.create(title, client)`` (or ``client.get_page``) to
    get an instance populated from the wiki.

    Attributes:
        title: Page title, fixed for the lifetime of the object
        exists: True once the page has been seen on (or written to) the wiki
        invalid: True if the wiki rejected the title itself
        error: Error record of the last failing call, None after a success
        start_timestamp: Server time the content was last observed, sent
            with edits so the wiki can reject conflicting writes
    """

    def __init__(self, title: str, client: WikiClient):
        if not title or not title.strip():
            raise ValueError("Page title must not be blank")
        self.title = title
        self.client = client
        self.exists = False
        self.invalid = False
        self.error: dict[str, Any] | None = None
        self.start_timestamp: str | None = None
        self._content = PageContent(None, build_section_index(None))
        self._log = EntityLoggerAdapter(logger, {"title": title})

    @classmethod
    async def create(cls, title: str, client: WikiClient) -> WikiPage:
        """Construct a page and fetch its current text."""
        page = cls(title, client)
        await page.get_text(refresh=True)
        if page.invalid:
            page.error = {"page": "Invalid page title - cannot create WikiPage"}
        return page

    def __str__(self) -> str:
        return self.text or ""

    def __call__(self) -> dict[int | str, str | None]:
        """Section bodies keyed by name, without headings."""
        return self.get_all_sections(False, SectionKeying.BY_NAME)

    # -------------------------------------------------------------------------
    # Content snapshot
    # -------------------------------------------------------------------------

    @property
    def content(self) -> PageContent:
        return self._content

    @property
    def text(self) -> str | None:
        return self._content.text

    @property
    def sections(self) -> SectionIndex:
        return self._content.sections

    @property
    def num_sections(self) -> int:
        return len(self._content.sections)

    def _replace_content(self, text: str | None) -> None:
        # Text and index are swapped together so readers never see a mismatch
        self._content = PageContent(text, build_section_index(text))

    def _accessor(self) -> SectionAccessor:
        return SectionAccessor(self._content)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_text(self, refresh: bool = False) -> str | None:
        """Return the page text, querying the wiki again if ``refresh``.

        Returns:
            The text, or None if the page is missing, invalid, or the
            query failed (see ``error``).
        """
        if not refresh:
            return self.text

        envelope = await self.client.query(
            {
                "titles": self.title,
                "prop": "info|revisions",
                "rvprop": "content",
                "curtimestamp": True,
            }
        )

        error = api_error(envelope)
        if error is not None:
            self.error = error
            return None
        self.error = None

        page = single_page(envelope)
        if "invalid" in page:
            self.invalid = True
            self._log.warning("Invalid page title")
            return None

        self.start_timestamp = envelope.get("curtimestamp")

        if "missing" not in page:
            self.exists = True
            revisions = page.get("revisions") or [{}]
            self._replace_content(revision_text(revisions[0]))
            self._log.debug(f"Fetched {len(self.text or '')} chars, {self.num_sections} sections")

        return self.text

    def get_section(
        self,
        section: int | str | SectionSelector,
        include_heading: bool = False,
        include_subsections: bool = True,
    ) -> str | None:
        """Return a section's text by index or name.

        Args:
            section: Section index (e.g. 3) or name (e.g. "History")
            include_heading: Keep the heading line
            include_subsections: Include deeper sections that follow

        Returns:
            The section text, or None if the section does not exist
        """
        text = self._accessor().get_section_text(section, include_heading, include_subsections)
        if text is None:
            self.error = {"page": f"Section '{section}' was not found on this page"}
        else:
            self.error = None
        return text

    def get_all_sections(
        self,
        include_heading: bool = False,
        keyed_by: SectionKeying = SectionKeying.BY_INDEX,
    ) -> dict[int | str, str | None]:
        """Return every section, keyed by index or by name.

        Raises:
            ValueError: If keyed_by is not a SectionKeying member
        """
        return self._accessor().get_all_sections(include_heading, keyed_by)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _find_section(self, section: int | str | SectionSelector) -> int | str | None:
        resolved = self._accessor().resolve(section)
        if resolved is None:
            self.error = {"page": f"Section '{section}' was not found on this page"}
        return resolved

    async def set_text(
        self,
        text: str,
        section: int | str | SectionSelector | None = None,
        minor: bool = False,
        summary: str | None = None,
    ) -> bool:
        """Write the page, or one section of it.

        Args:
            text: New wikitext
            section: Section index or name, "new" to append a section,
                or None for the whole page
            minor: Mark as a minor edit
            summary: Edit summary; the heading when section is "new"

        Returns:
            True if the wiki accepted the edit
        """
        params: dict[str, Any] = {
            "title": self.title,
            "text": text,
            "md5": hashlib.md5(text.encode("utf-8")).hexdigest(),
            "bot": True,
            "starttimestamp": self.start_timestamp,
            "minor": minor,
            "summary": summary,
        }

        if section is not None:
            resolved = self._find_section(section)
            if resolved is None:
                return False
            params["section"] = resolved

        # Never create a page by accident, never recreate one deleted meanwhile
        if self.exists:
            params["nocreate"] = True
        else:
            params["createonly"] = True

        envelope = await self.client.edit(params)
        if envelope is None:
            self.error = self.client.error
            return False

        result = EditResult.from_response(envelope)
        if not result.success:
            error = api_error(envelope)
            if error is not None:
                self.error = error
            elif result.captcha is not None:
                self.error = {"page": "Edit denied by CAPTCHA"}
            else:
                self.error = {"page": f"Unexpected edit response: {result.result}"}
            self._log.warning(f"Edit failed: {self.error}")
            return False

        self.exists = True
        self._log.info(
            f"Edited section {section}" if section is not None else "Edited page",
            extra={"revid": result.new_revid},
        )

        if section is not None:
            # Only the server knows the merged text; refetch it with a fresh timestamp
            await self.get_text(refresh=True)
            return self.error is None

        self._replace_content(text)
        return await self._refresh_timestamp()

    async def _refresh_timestamp(self) -> bool:
        envelope = await self.client.query(
            {"titles": self.title, "prop": "info", "curtimestamp": True}
        )
        error = api_error(envelope)
        if error is not None:
            self.error = error
            return False
        self.error = None
        self.start_timestamp = envelope.get("curtimestamp")
        return True

    async def set_section(
        self,
        text: str,
        section: int | str | SectionSelector,
        summary: str | None = None,
        minor: bool = False,
    ) -> bool:
        """Write one section; ``set_text`` with summary before minor."""
        return await self.set_text(text, section, minor, summary)

    async def new_section(self, name: str, text: str) -> bool:
        """Append a new section with heading ``name``."""
        return await self.set_section(text, "new", name, False)

    async def delete(self, reason: str | None = None) -> bool:
        """Delete the page.

        Returns:
            True if the wiki deleted the page
        """
        envelope = await self.client.delete({"title": self.title, "reason": reason})
        if envelope is None:
            self.error = self.client.error
            return False

        if DeleteResult.from_response(envelope) is not None:
            self.exists = False
            self._log.info("Deleted page")
            return await self._refresh_timestamp()

        self.error = api_error(envelope) or {"page": "Unexpected delete response"}
        return False
