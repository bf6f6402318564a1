"""
Wikitext section indexing and retrieval.

Example:
    >>> from wiki_access.sections import PageContent, SectionAccessor, build_section_index
    >>> text = "intro\\n== A ==\\nbody A\\n"
    >>> accessor = SectionAccessor(PageContent(text, build_section_index(text)))
    >>> accessor.get_section_text("A")
    'body A\\n'
"""

from .accessor import SectionAccessor
from .index_builder import build_section_index
from .types import (
    INTRO_NAME,
    NEW_SECTION,
    PageContent,
    SectionEntry,
    SectionIndex,
    SectionKeying,
    SectionSelector,
    SelectorKind,
)

__all__ = [
    "INTRO_NAME",
    "NEW_SECTION",
    "PageContent",
    "SectionAccessor",
    "SectionEntry",
    "SectionIndex",
    "SectionKeying",
    "SectionSelector",
    "SelectorKind",
    "build_section_index",
]
