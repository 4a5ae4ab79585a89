"""Tests for the markdown section model."""

from cc_brain.memory.document import Document, Section, parse_document


class TestParse:
    def test_preamble_and_sections(self):
        doc = parse_document("# User\n\n## Style\n- terse\n\n## Tools\n- vim\n")
        assert doc.preamble.strip() == "# User"
        assert [s.name for s in doc.sections] == ["Style", "Tools"]
        assert doc.get("Style").body.strip() == "- terse"

    def test_subsections_stay_in_section(self):
        doc = parse_document("## Work\n### Team\n- a\n### Role\n- b\n## Next\n")
        assert [s.name for s in doc.sections] == ["Work", "Next"]
        assert "### Role" in doc.get("Work").body

    def test_no_sections(self):
        doc = parse_document("just text")
        assert doc.sections == []
        assert doc.preamble == "just text"


class TestSetSection:
    def test_replace_in_place(self):
        doc = parse_document("# T\n\n## A\n- old\n\n## B\n- b\n")
        doc.set_section("A", "- new")
        assert doc.render() == "# T\n\n## A\n- new\n\n## B\n- b\n"

    def test_append_when_missing(self):
        doc = parse_document("# T\n\n## A\n- a\n\n\n")
        doc.set_section("C", "- c")
        assert doc.render() == "# T\n\n## A\n- a\n\n## C\n- c\n"

    def test_lookup_is_exact_and_case_sensitive(self):
        doc = parse_document("## Style\n- a\n")
        doc.set_section("style", "- b")
        assert [s.name for s in doc.sections] == ["Style", "style"]

    def test_regex_special_names(self):
        doc = parse_document("## C++ (a.k.a. [cpp])\n- old\n")
        doc.set_section("C++ (a.k.a. [cpp])", "- new")
        assert len(doc.sections) == 1
        assert doc.sections[0].body == "- new"


class TestRender:
    def test_empty(self):
        assert Document().render() == ""

    def test_heading_only_section(self):
        assert Section("Empty").render() == "## Empty"

    def test_round_trip_is_stable(self):
        text = "# User Profile\n\n## Style\n- terse\n"
        assert parse_document(text).render() == text
        assert parse_document(parse_document(text).render()).render() == text
