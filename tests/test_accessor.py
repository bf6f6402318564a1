"""
Tests for section retrieval.
"""

from __future__ import annotations

import pytest

from wiki_access.sections import (
    NEW_SECTION,
    PageContent,
    SectionAccessor,
    SectionKeying,
    SectionSelector,
    SelectorKind,
    build_section_index,
)

SAMPLE = "intro\n== A ==\nbody A\n=== A1 ===\nbody A1\n== B ==\nbody B\n"


def accessor_for(text: str | None) -> SectionAccessor:
    return SectionAccessor(PageContent(text, build_section_index(text)))


@pytest.fixture
def sample():
    return accessor_for(SAMPLE)


class TestGetSectionText:
    """Tests for single-section reads."""

    def test_section_with_subsections(self, sample):
        """A section absorbs its deeper children."""
        assert sample.get_section_text("A") == "body A\n=== A1 ===\nbody A1\n"

    def test_section_without_subsections(self, sample):
        """Children can be excluded."""
        assert sample.get_section_text("A", include_subsections=False) == "body A\n"

    def test_section_with_heading(self, sample):
        """The heading line can be kept."""
        text = sample.get_section_text(1, include_heading=True, include_subsections=False)

        assert text == "== A ==\nbody A\n"

    def test_subsection_stops_at_same_depth(self, sample):
        """Aggregation stops at the next section of equal depth."""
        assert sample.get_section_text(2, include_heading=True) == "=== A1 ===\nbody A1\n"

    def test_last_section(self, sample):
        """The last section runs to the end of the text."""
        assert sample.get_section_text("B") == "body B\n"

    def test_intro(self, sample):
        """The intro has no heading to strip and no subsections."""
        assert sample.get_section_text(0) == "intro\n"
        assert sample.get_section_text("intro", include_heading=True) == "intro\n"

    def test_heading_without_newline(self):
        """A heading-only section at the end of the text yields an empty body."""
        accessor = accessor_for("lead\n== End ==")

        assert accessor.get_section_text("End") == ""
        assert accessor.get_section_text("End", include_heading=True) == "== End =="

    def test_unknown_section(self, sample):
        """Unknown names and indexes return None."""
        assert sample.get_section_text("Missing") is None
        assert sample.get_section_text(99) is None

    def test_new_is_not_readable(self, sample):
        """The append marker has no text."""
        assert sample.get_section_text("new") is None

    def test_empty_document(self):
        """An empty document still has an empty intro."""
        accessor = accessor_for(None)

        assert accessor.get_section_text(0) == ""
        assert accessor.num_sections == 1

    def test_heading_sections_reconstruct_text(self, sample):
        """Concatenating sections with headings and no children rebuilds the text."""
        parts = [
            sample.get_section_text(i, include_heading=True, include_subsections=False)
            for i in range(sample.num_sections)
        ]

        assert "".join(parts) == SAMPLE

    def test_nested_aggregation(self):
        """Deeply nested children are all included."""
        text = "== A ==\na\n=== B ===\nb\n==== C ====\nc\n=== D ===\nd\n== E ==\ne\n"
        accessor = accessor_for(text)

        assert accessor.get_section_text("A") == "a\n=== B ===\nb\n==== C ====\nc\n=== D ===\nd\n"
        assert accessor.get_section_text("B") == "b\n==== C ====\nc\n"


class TestResolve:
    """Tests for selector resolution."""

    def test_resolve_name_to_index(self, sample):
        """Names resolve to their index."""
        assert sample.resolve("A1") == 2

    def test_resolve_index(self, sample):
        """Existing indexes resolve to themselves."""
        assert sample.resolve(3) == 3

    def test_resolve_new(self, sample):
        """The append marker resolves without a lookup."""
        assert sample.resolve("new") == NEW_SECTION

    def test_resolve_missing(self, sample):
        """Unknown sections resolve to None."""
        assert sample.resolve("Nope") is None
        assert sample.resolve(4) is None

    def test_bool_is_rejected(self, sample):
        """A boolean is never taken for an index."""
        with pytest.raises(TypeError):
            sample.resolve(True)

    def test_explicit_name_selector(self):
        """A section literally named 'new' is reachable with an explicit selector."""
        accessor = accessor_for("lead\n== new ==\nfresh\n")

        selector = SectionSelector(SelectorKind.NAME, name="new")
        assert accessor.resolve(selector) == 1
        assert accessor.get_section_text(selector) == "fresh\n"


class TestGetAllSections:
    """Tests for whole-table reads."""

    def test_keyed_by_index(self, sample):
        """Keys follow document order."""
        result = sample.get_all_sections()

        assert list(result) == [0, 1, 2, 3]
        assert result[1] == "body A\n=== A1 ===\nbody A1\n"

    def test_keyed_by_name(self, sample):
        """Name keys include the intro."""
        result = sample.get_all_sections(True, SectionKeying.BY_NAME)

        assert list(result) == ["intro", "A", "A1", "B"]
        assert result["B"] == "== B ==\nbody B\n"

    def test_section_named_new(self):
        """A heading named 'new' is still returned by name."""
        accessor = accessor_for("lead\n== new ==\nfresh\n")

        assert accessor.get_all_sections(keyed_by=SectionKeying.BY_NAME)["new"] == "fresh\n"

    def test_invalid_keying(self, sample):
        """Anything but a SectionKeying member is rejected."""
        with pytest.raises(ValueError):
            sample.get_all_sections(False, 3)  # type: ignore[arg-type]


class TestOffsets:
    """Tests for table introspection."""

    def test_offsets(self, sample):
        """Offsets are exposed in both views."""
        offsets = sample.offsets()

        assert offsets["by_name"]["B"] == {"offset": 40, "length": 15, "depth": 2}
        assert sample.num_sections == 4
