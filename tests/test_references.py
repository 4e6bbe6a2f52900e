"""Unit and property-based tests for reference handling."""
from hypothesis import given
from hypothesis import strategies as st

from jyotchat.session import (
    Reference,
    content_before_references,
    extract_references,
    format_references_tail,
    join_references,
    split_references,
)


class TestExtractReferences:
    """Tests for extract_references."""

    def test_file_names_in_sentence(self):
        """Test extracting name.extension tokens in order."""
        refs = extract_references("See report.pdf and notes.md for details")

        assert refs == [Reference(name="report.pdf"), Reference(name="notes.md")]

    def test_no_references(self):
        """Test that plain text yields nothing."""
        assert extract_references("No files cited here") == []
        assert extract_references("") == []

    def test_colons_split_names(self):
        """Test that names never contain colons."""
        refs = extract_references("References: Bhavtirth.pdf")

        assert [r.name for r in refs] == ["Bhavtirth.pdf"]

    def test_trailing_punctuation_excluded(self):
        """Test that sentence punctuation is not part of the extension."""
        refs = extract_references("Read dharma.txt.")

        assert [r.name for r in refs] == ["dharma.txt"]

    def test_versions_and_abbreviations_ignored(self):
        """Test that numbers and abbreviations are not taken for file names."""
        assert extract_references("Version 2.0 is out, e.g. today.") == []

    def test_plain_url_yields_file_name_only(self):
        refs = extract_references("Download https://example.com/docs/guide.pdf now")

        assert [r.name for r in refs] == ["guide.pdf"]

    def test_markdown_link_keeps_url(self):
        """Test that a linked file name carries its link target."""
        refs = extract_references("References: [guide.pdf](https://example.com/guide.pdf)")

        assert refs == [Reference(name="guide.pdf", url="https://example.com/guide.pdf")]


class TestSplitReferences:
    """Tests for splitting the References: tail."""

    def test_split_with_marker(self):
        body, tail = split_references("Answer text.\n\nReferences: a.pdf, b.pdf")

        assert body == "Answer text."
        assert tail == " a.pdf, b.pdf"

    def test_split_without_marker(self):
        body, tail = split_references("Answer text.")

        assert body == "Answer text."
        assert tail is None

    def test_content_before_references(self):
        assert content_before_references("  Body \nReferences: x.pdf") == "Body"
        assert content_before_references("Only body") == "Only body"

    def test_format_tail_one_entry_per_line(self):
        assert format_references_tail(" a.pdf, b.pdf\n\n c.md ") == "a.pdf\nb.pdf\nc.md"

    def test_join_references(self):
        assert join_references("Body", " a.pdf, b.pdf") == "Body\n\nReferences:\na.pdf\nb.pdf"
        assert join_references("Body", None) == "Body"
        assert join_references("Body", "  ") == "Body"

    @given(st.text(), st.text())
    def test_body_never_contains_marker_tail(self, body: str, tail: str):
        """Property test: the tail is everything after the first marker."""
        content = f"{body}References:{tail}"
        split_body, split_tail = split_references(content)

        assert split_tail is not None
        assert "References:" not in split_body
        assert content.startswith(split_body)
