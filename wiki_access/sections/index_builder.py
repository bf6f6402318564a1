"""Build a section table from raw wikitext.

Heading lines look like ``== Name ==``: a run of one to six ``=``, the
heading content, the same run again, and optional trailing whitespace before
the end of the line. Everything before the first heading is the intro.
"""

from __future__ import annotations

import re

from .types import INTRO_NAME, SectionEntry, SectionIndex

# Balanced delimiter run at the start of a line. Trailing whitespace excludes
# the newline so the match never swallows the next line.
HEADING_RE = re.compile(r"^(={1,6})(.*?)\1[^\S\n]*(?:\n|$)", re.MULTILINE)


def heading_name(line: str) -> str:
    """Strip every delimiter and surrounding whitespace from a heading line."""
    return line.replace("=", "").strip()


def unique_name(name: str, taken: set[str] | dict[str, object]) -> str:
    """Return ``name``, or ``name_2``, ``name_3``... whichever is free first."""
    candidate = name
    seq = 2
    while candidate in taken:
        candidate = f"{name}_{seq}"
        seq += 1
    return candidate


def build_section_index(text: str | None) -> SectionIndex:
    """Scan ``text`` left to right and return its section index.

    The intro entry always exists. Offsets come from the heading match
    positions, so each one is at or after the previous section's offset and
    delimiter text quoted mid-line in a body never starts a section. Lengths
    are finalized as the next heading is found, and the last section runs to
    the end of the text.
    """
    text = text or ""

    # (name, offset, depth) in document order; lengths computed afterwards
    spans: list[tuple[str, int, int]] = [(INTRO_NAME, 0, 0)]
    taken = {INTRO_NAME}

    for match in HEADING_RE.finditer(text):
        name = unique_name(heading_name(match.group(0)), taken)
        taken.add(name)
        spans.append((name, match.start(), len(match.group(1))))

    entries = []
    for i, (name, offset, depth) in enumerate(spans):
        end = spans[i + 1][1] if i + 1 < len(spans) else len(text)
        entries.append(
            SectionEntry(index=i, name=name, offset=offset, length=end - offset, depth=depth)
        )

    return SectionIndex(tuple(entries))
