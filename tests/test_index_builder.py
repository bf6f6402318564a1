"""
Tests for building the section table from wikitext.
"""

from __future__ import annotations

import pytest

from wiki_access.sections import INTRO_NAME, SectionEntry, SectionIndex, build_section_index
from wiki_access.sections.index_builder import heading_name, unique_name

SAMPLE = "intro\n== A ==\nbody A\n=== A1 ===\nbody A1\n== B ==\nbody B\n"


class TestBuildSectionIndex:
    """Tests for build_section_index."""

    def test_sample_document(self):
        """Headings become entries with document-order indexes and depths."""
        index = build_section_index(SAMPLE)

        assert [(e.index, e.name, e.depth) for e in index] == [
            (0, "intro", 0),
            (1, "A", 2),
            (2, "A1", 3),
            (3, "B", 2),
        ]

    def test_sample_offsets(self):
        """Offsets point at the heading line start."""
        index = build_section_index(SAMPLE)

        assert [(e.offset, e.length) for e in index] == [(0, 6), (6, 15), (21, 19), (40, 15)]
        for entry in list(index)[1:]:
            assert SAMPLE[entry.offset : entry.offset + 2] == "=="

    def test_entries_partition_text(self):
        """Spans are contiguous and cover the whole text."""
        index = build_section_index(SAMPLE)

        position = 0
        for entry in index:
            assert entry.offset == position
            position = entry.end
        assert position == len(SAMPLE)

    def test_concatenation_reproduces_text(self):
        """Joining every span gives back the original text."""
        text = "lead\n= Top =\nx\n== Mid ==\ny\n====== Deep ======\nz"
        index = build_section_index(text)

        assert "".join(text[e.offset : e.end] for e in index) == text

    def test_empty_text(self):
        """Empty text has only the intro, with length 0."""
        index = build_section_index("")

        assert len(index) == 1
        assert index.intro == SectionEntry(0, INTRO_NAME, 0, 0, 0)

    def test_none_text(self):
        """None is treated as empty text."""
        assert build_section_index(None).entries == build_section_index("").entries

    def test_no_headings(self):
        """A document without headings is all intro."""
        index = build_section_index("just some text\nover two lines")

        assert len(index) == 1
        assert index.intro.length == len("just some text\nover two lines")

    def test_heading_at_start(self):
        """A heading on the first line leaves an empty intro."""
        index = build_section_index("== A ==\nbody\n")

        assert index.intro.length == 0
        assert index.by_name["A"].offset == 0

    def test_duplicate_names_get_suffixes(self):
        """Repeated headings are disambiguated in order of appearance."""
        text = "== Notes ==\na\n== Notes ==\nb\n== Notes ==\nc\n"
        index = build_section_index(text)

        assert list(index.by_name) == ["intro", "Notes", "Notes_2", "Notes_3"]
        assert index.by_name["Notes_2"].index == 2

    def test_heading_named_intro(self):
        """A heading literally called intro does not clash with the intro."""
        index = build_section_index("lead\n== intro ==\nbody\n")

        assert list(index.by_name) == ["intro", "intro_2"]

    def test_unclosed_line_is_not_heading(self):
        """A line with no closing run stays in the current section."""
        index = build_section_index("lead\n== A\nbody\n")

        assert len(index) == 1

    def test_mid_line_delimiters_ignored(self):
        """Delimiters quoted inside a line never start a section."""
        text = "lead\n== A ==\nuse == B == to mark headings\n"
        index = build_section_index(text)

        assert list(index.by_name) == ["intro", "A"]

    def test_trailing_whitespace_on_heading(self):
        """Spaces after the closing run are allowed."""
        index = build_section_index("lead\n== A ==   \nbody\n")

        entry = index.by_name["A"]
        assert (entry.offset, entry.length, entry.depth) == (5, 16, 2)

    def test_last_heading_without_newline(self):
        """A heading at the very end of the text is still indexed."""
        text = "lead\n== End =="
        index = build_section_index(text)

        assert index.by_name["End"].end == len(text)

    def test_offsets_count_characters(self):
        """Offsets index the decoded string, not its UTF-8 bytes."""
        text = "Grüße\n== Ä ==\nbody\n"
        index = build_section_index(text)

        entry = index.by_name["Ä"]
        assert text[entry.offset :].startswith("== Ä ==")

    def test_views_share_entries(self):
        """by_index and by_name expose the very same entries."""
        index = build_section_index(SAMPLE)

        for entry in index:
            assert index.by_index[entry.index] is index.by_name[entry.name]

    def test_deterministic(self):
        """Building twice gives equal tables."""
        assert build_section_index(SAMPLE) == build_section_index(SAMPLE)


class TestSectionIndex:
    """Tests for SectionIndex validation."""

    def test_requires_intro(self):
        """An index must start with a depth-0 entry."""
        with pytest.raises(ValueError):
            SectionIndex((SectionEntry(0, "A", 0, 5, 2),))

    def test_rejects_duplicate_names(self):
        """Names must be unique."""
        with pytest.raises(ValueError):
            SectionIndex((SectionEntry(0, "intro", 0, 1, 0), SectionEntry(1, "intro", 1, 1, 1)))

    def test_views_are_read_only(self):
        """The views cannot be modified."""
        index = build_section_index(SAMPLE)

        with pytest.raises(TypeError):
            index.by_name["C"] = index.intro  # type: ignore[index]

    def test_to_dict(self):
        """Both views serialize offsets, lengths and depths."""
        data = build_section_index(SAMPLE).to_dict()

        assert data["by_index"][2] == {"offset": 21, "length": 19, "depth": 3}
        assert data["by_name"]["A1"] == data["by_index"][2]


class TestHeadingHelpers:
    """Tests for heading name helpers."""

    def test_heading_name_strips_delimiters(self):
        """Every = and the surrounding whitespace is removed."""
        assert heading_name("=== Early life ===\n") == "Early life"

    def test_unique_name(self):
        """Suffixes count up from 2."""
        assert unique_name("A", {"A", "A_2"}) == "A_3"
        assert unique_name("B", {"A"}) == "B"
