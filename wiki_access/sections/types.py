"""
Section table types.

A document is split into an intro plus one section per heading line. The
table is immutable: whenever the text changes a new ``SectionIndex`` is
built, and text plus index travel together as a ``PageContent`` snapshot.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

INTRO_NAME = "intro"

# Section value understood by the edit API as "append a new section"
NEW_SECTION = "new"


@dataclass(frozen=True, slots=True)
class SectionEntry:
    """One contiguous span of the document text."""

    index: int  # 0 = intro, then document order
    name: str  # Unique within the index
    offset: int  # Character offset in the text
    length: int  # Character count
    depth: int  # 0 for the intro, 1-6 for headings

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def is_intro(self) -> bool:
        return self.index == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "offset": self.offset,
            "length": self.length,
            "depth": self.depth,
        }


@dataclass(frozen=True)
class SectionIndex:
    """Ordered section table with by-index and by-name views.

    Both views are derived from the same ``entries`` tuple, so they always
    describe identical offsets, lengths and depths.
    """

    entries: tuple[SectionEntry, ...]
    by_index: Mapping[int, SectionEntry] = field(init=False, repr=False, compare=False)
    by_name: Mapping[str, SectionEntry] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.entries or self.entries[0].depth != 0:
            raise ValueError("SectionIndex requires an intro entry at index 0")
        object.__setattr__(
            self, "by_index", MappingProxyType({e.index: e for e in self.entries})
        )
        object.__setattr__(
            self, "by_name", MappingProxyType({e.name: e for e in self.entries})
        )
        if len(self.by_name) != len(self.entries):
            raise ValueError("SectionIndex entry names must be unique")

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[SectionEntry]:
        return iter(self.entries)

    @property
    def intro(self) -> SectionEntry:
        return self.entries[0]

    def to_dict(self) -> dict[str, dict[Any, dict[str, Any]]]:
        """Serialize both views, e.g. for debugging or the CLI."""
        return {
            "by_index": {e.index: e.to_dict() for e in self.entries},
            "by_name": {e.name: e.to_dict() for e in self.entries},
        }


class SectionKeying(Enum):
    """Key type for ``get_all_sections`` results."""

    BY_INDEX = 1
    BY_NAME = 2


class SelectorKind(Enum):
    INDEX = "index"
    NAME = "name"
    NEW = "new"


@dataclass(frozen=True, slots=True)
class SectionSelector:
    """Tagged section selector: an index, a name, or a new section."""

    kind: SelectorKind
    index: int | None = None
    name: str | None = None

    @classmethod
    def parse(cls, value: int | str | SectionSelector) -> SectionSelector:
        """Build a selector from an int index, a name, or the literal "new"."""
        if isinstance(value, SectionSelector):
            return value
        # bool is an int subclass; a flag is never a section
        if isinstance(value, bool):
            raise TypeError("Section selector must be an int or str, not bool")
        if isinstance(value, int):
            return cls(SelectorKind.INDEX, index=value)
        if isinstance(value, str):
            if value == NEW_SECTION:
                return cls(SelectorKind.NEW)
            return cls(SelectorKind.NAME, name=value)
        raise TypeError(f"Section selector must be an int or str, got {type(value).__name__}")

    def __str__(self) -> str:
        if self.kind is SelectorKind.INDEX:
            return str(self.index)
        if self.kind is SelectorKind.NAME:
            return str(self.name)
        return NEW_SECTION


@dataclass(frozen=True)
class PageContent:
    """Immutable snapshot of page text and its section index."""

    text: str | None
    sections: SectionIndex
