"""Tests for the free-text guide renderer."""

import re
from datetime import date

from backend.app.pdf.guide import GuideBlock, parse_guide, render_guide
from backend.app.pdf.theme import DocumentOptions

GUIDE_TEXT = """# Getting There
Fly into LIS.
Take the metro.

## Where to Stay
- Alfama for views
1. Book early
Budget: Hostels from 20 EUR
MONEY MATTERS
Plain text."""


class TestParseGuide:
    """Test splitting guide text into blocks."""

    def test_block_kinds(self) -> None:
        """Test headings, bullets, labels and paragraphs."""
        assert parse_guide(GUIDE_TEXT) == [
            GuideBlock(kind="chapter", text="Getting There"),
            GuideBlock(kind="paragraph", text="Fly into LIS. Take the metro."),
            GuideBlock(kind="section", text="Where to Stay"),
            GuideBlock(kind="bullet", text="Alfama for views"),
            GuideBlock(kind="bullet", text="Book early"),
            GuideBlock(kind="label", text="Budget", value="Hostels from 20 EUR"),
            GuideBlock(kind="section", text="MONEY MATTERS"),
            GuideBlock(kind="paragraph", text="Plain text."),
        ]

    def test_empty_text(self) -> None:
        """Test that blank text has no blocks."""
        assert parse_guide("\n  \n") == []

    def test_short_caps_line_is_not_a_heading(self) -> None:
        """Test that acronyms alone stay in the paragraph."""
        assert parse_guide("EU") == [GuideBlock(kind="paragraph", text="EU")]


class TestRenderGuide:
    """Test guide rendering."""

    def test_renders_pdf(self) -> None:
        """Test that output is a PDF document."""
        content = render_guide("Lisbon", GUIDE_TEXT, DocumentOptions(invariant=True))

        assert content.startswith(b"%PDF")

    def test_invariant_output_is_byte_identical(self) -> None:
        """Test that the same inputs render the same bytes."""
        options = DocumentOptions(invariant=True, created_on=date(2025, 1, 15))

        first = render_guide("Lisbon", GUIDE_TEXT, options, subtitle="SNOWBIRD ESCAPE GUIDE")
        second = render_guide("Lisbon", GUIDE_TEXT, options, subtitle="SNOWBIRD ESCAPE GUIDE")

        assert first == second

    def test_long_guide_spans_pages(self) -> None:
        """Test that long drafted text overflows onto extra pages."""
        text = "\n\n".join(f"# Chapter {i}\n" + "Lots to see and do. " * 80 for i in range(6))

        content = render_guide("Lisbon", text, DocumentOptions(invariant=True))

        assert len(re.findall(rb"/Type /Page\b", content)) >= 8
