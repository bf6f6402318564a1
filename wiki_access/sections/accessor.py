"""
Section retrieval over a page content snapshot.

The accessor holds no state of its own beyond the snapshot it was built
for; every answer is derived from ``content.text`` and ``content.sections``.
"""

from __future__ import annotations

from .types import (
    NEW_SECTION,
    PageContent,
    SectionEntry,
    SectionKeying,
    SectionSelector,
    SelectorKind,
)

ResolvedSection = int | str  # section index, or NEW_SECTION


class SectionAccessor:
    """Answers positional and heading queries against one snapshot.

    Example:
        >>> accessor = SectionAccessor(page.content)
        >>> accessor.get_section_text("History", include_heading=True)
        '== History ==\\nFounded in 1901.\\n'
    """

    def __init__(self, content: PageContent):
        self.content = content

    @property
    def num_sections(self) -> int:
        return len(self.content.sections)

    def offsets(self) -> dict[str, dict]:
        """Offsets, lengths and depths keyed both ways."""
        return self.content.sections.to_dict()

    def entry(self, selector: int | str | SectionSelector) -> SectionEntry | None:
        """Look up the table entry for an index or name selector."""
        sel = SectionSelector.parse(selector)
        sections = self.content.sections
        if sel.kind is SelectorKind.INDEX:
            return sections.by_index.get(sel.index)  # type: ignore[arg-type]
        if sel.kind is SelectorKind.NAME:
            return sections.by_name.get(sel.name)  # type: ignore[arg-type]
        return None

    def resolve(self, selector: int | str | SectionSelector) -> ResolvedSection | None:
        """Resolve a selector to the section index used by the edit API.

        Returns:
            The integer index, ``NEW_SECTION`` for a section still to be
            appended, or None if the section does not exist.
        """
        sel = SectionSelector.parse(selector)
        if sel.kind is SelectorKind.NEW:
            return NEW_SECTION
        found = self.entry(sel)
        return found.index if found is not None else None

    def subsection_length(self, entry: SectionEntry) -> int:
        """Length of ``entry`` plus all immediately following deeper entries."""
        length = entry.length
        for following in self.content.sections.entries[entry.index + 1 :]:
            if following.depth <= entry.depth:
                break
            length += following.length
        return length

    def get_section_text(
        self,
        selector: int | str | SectionSelector,
        include_heading: bool = False,
        include_subsections: bool = True,
    ) -> str | None:
        """Return the text of a section.

        Args:
            selector: Section index, section name, or a SectionSelector
            include_heading: Keep the heading line at the top of the section
            include_subsections: Extend the section over its deeper children

        Returns:
            The section text, or None if the section is not in the table.
            The intro never has a heading and never has subsections.
        """
        entry = self.entry(selector)
        if entry is None:
            return None

        length = entry.length
        if include_subsections and not entry.is_intro:
            length = self.subsection_length(entry)

        text = (self.content.text or "")[entry.offset : entry.offset + length]

        if not include_heading and not entry.is_intro:
            newline = text.find("\n")
            text = "" if newline == -1 else text[newline + 1 :]

        return text

    def get_all_sections(
        self,
        include_heading: bool = False,
        keyed_by: SectionKeying = SectionKeying.BY_INDEX,
    ) -> dict[int | str, str | None]:
        """Map every key of the chosen view to its section text.

        Raises:
            ValueError: If keyed_by is not a SectionKeying member
        """
        sections = self.content.sections
        keys: list[int | str]
        if keyed_by is SectionKeying.BY_INDEX:
            keys = list(sections.by_index)
        elif keyed_by is SectionKeying.BY_NAME:
            keys = list(sections.by_name)
        else:
            raise ValueError(f"Unexpected keyed_by value: {keyed_by!r}")

        # Names that look like "new" must still be looked up by name
        return {
            key: self.get_section_text(
                SectionSelector(SelectorKind.INDEX, index=key)
                if isinstance(key, int)
                else SectionSelector(SelectorKind.NAME, name=key),
                include_heading,
            )
            for key in keys
        }
