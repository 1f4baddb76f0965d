"""Heading-driven renderer for free-text travel guides.

Drafted guide text is split into blocks: ``#`` headings open a new chapter
page, ``##`` headings and short all-caps lines become section headings,
``Label: value`` lines become highlighted subheadings, and ``-`` / ``•`` /
numbered lines become bullets. Everything else is flowed as paragraphs.
"""

import io
import re
from dataclasses import dataclass
from typing import Literal

from reportlab.pdfgen import canvas

from backend.app.pdf.layout import FlowLayout, PageHook, wrap_text
from backend.app.pdf.theme import (
    ACCENT,
    BORDER,
    DARK,
    FONT_BOLD,
    FONT_REGULAR,
    GRAY,
    HEADING_SIZE,
    LIGHT,
    MARGIN,
    PAGE_SIZE,
    PRIMARY,
    SMALL_GAP,
    SMALL_SIZE,
    SUBHEADING_SIZE,
    TITLE_SIZE,
    WHITE,
    DocumentOptions,
)
from backend.app.text.sanitizer import strip_markdown, to_pdf_safe

LAYOUT_VERSION = "guide-layout-1"

HEADER_BAR_HEIGHT = 28

BlockKind = Literal["chapter", "section", "label", "bullet", "paragraph"]

_CHAPTER_RE = re.compile(r"^#\s+(.+)$")
_SECTION_RE = re.compile(r"^#{2,6}\s+(.+)$")
_BULLET_RE = re.compile(r"^\s*(?:[-•]|\d{1,2}[.)])\s+(.+)$")
_LABEL_RE = re.compile(r"^([A-Z][A-Za-z0-9 &/'()-]{1,40}):\s*(.*)$")


@dataclass(frozen=True)
class GuideBlock:
    """One renderable unit of guide text."""

    kind: BlockKind
    text: str
    value: str = ""


def _is_caps_heading(line: str) -> bool:
    letters = [c for c in line if c.isalpha()]
    return len(line) <= 60 and len(letters) >= 3 and all(c.isupper() for c in letters)


def parse_guide(text: str) -> list[GuideBlock]:
    """Split cleaned guide text into blocks.

    Consecutive plain lines are joined into one paragraph; blank lines end it.
    """
    blocks: list[GuideBlock] = []
    paragraph: list[str] = []

    def flush() -> None:
        if paragraph:
            blocks.append(GuideBlock(kind="paragraph", text=" ".join(paragraph)))
            paragraph.clear()

    for raw in text.split("\n"):
        line = raw.strip()
        if not line:
            flush()
            continue
        if match := _CHAPTER_RE.match(line):
            flush()
            blocks.append(GuideBlock(kind="chapter", text=match.group(1).strip()))
        elif match := _SECTION_RE.match(line):
            flush()
            blocks.append(GuideBlock(kind="section", text=match.group(1).strip()))
        elif match := _BULLET_RE.match(line):
            flush()
            blocks.append(GuideBlock(kind="bullet", text=match.group(1).strip()))
        elif match := _LABEL_RE.match(line):
            flush()
            blocks.append(
                GuideBlock(kind="label", text=match.group(1).strip(), value=match.group(2).strip())
            )
        elif _is_caps_heading(line):
            flush()
            blocks.append(GuideBlock(kind="section", text=line))
        else:
            paragraph.append(line)
    flush()
    return blocks


def render_guide(
    title: str,
    text: str,
    options: DocumentOptions,
    *,
    subtitle: str = "PREMIUM TRAVEL GUIDE",
    tagline: str | None = None,
) -> bytes:
    """Render a free-text guide to PDF.

    The document is drawn twice: the first pass only counts pages so every
    footer can say "Page i of N".

    Args:
        title: Document title, usually the destination name
        text: Drafted guide text (markdown artifacts are stripped here)
        options: Branding and reproducibility switches
        subtitle: Cover subtitle
        tagline: Optional cover line under the subtitle

    Returns:
        Complete PDF document bytes
    """
    blocks = parse_guide(to_pdf_safe(strip_markdown(text)))
    safe_title = to_pdf_safe(title)
    total_pages = _draw(io.BytesIO(), safe_title, blocks, options, subtitle, tagline, None)
    buffer = io.BytesIO()
    _draw(buffer, safe_title, blocks, options, subtitle, tagline, total_pages)
    return buffer.getvalue()


def _draw(
    buffer: io.BytesIO,
    title: str,
    blocks: list[GuideBlock],
    options: DocumentOptions,
    subtitle: str,
    tagline: str | None,
    total_pages: int | None,
) -> int:
    pdf = canvas.Canvas(buffer, pagesize=PAGE_SIZE, invariant=int(options.invariant))
    pdf.setTitle(f"{title} {subtitle.title()}")
    pdf.setAuthor(options.company_name)
    layout = FlowLayout(
        pdf,
        top_margin=MARGIN + HEADER_BAR_HEIGHT,
        decorate_page=_decorations(title, options, total_pages),
    )

    _draw_cover(layout, title, subtitle, tagline, options)
    layout.new_page(continued=False)
    _draw_overview(layout, title, blocks)

    for block in blocks:
        if block.kind == "chapter":
            if not layout.at_page_top:
                layout.new_page(continued=False)
            layout.pdf.setFillColor(PRIMARY)
            bar_bottom = layout.y - HEADING_SIZE - 6
            layout.pdf.rect(MARGIN, bar_bottom, 4, HEADING_SIZE + 8, fill=1, stroke=0)
            layout.paragraph(block.text.upper(), font=FONT_BOLD, size=HEADING_SIZE, indent=12)
            layout.spacer(4)
        elif block.kind == "section":
            layout.heading(block.text, size=SUBHEADING_SIZE, color=PRIMARY, rule=BORDER)
        elif block.kind == "label":
            layout.heading(block.text, size=SUBHEADING_SIZE - 2, color=ACCENT, keep_with_next=20)
            if block.value:
                layout.paragraph(block.value)
        elif block.kind == "bullet":
            layout.bullet(block.text, marker_color=ACCENT, indent=8)
        else:
            layout.paragraph(block.text)

    layout.finish()
    pdf.save()
    return layout.page_number


def _decorations(title: str, options: DocumentOptions, total_pages: int | None) -> PageHook:
    def draw(layout: FlowLayout) -> None:
        pdf = layout.pdf
        pdf.setFillColor(PRIMARY)
        bar_bottom = layout.height - HEADER_BAR_HEIGHT
        pdf.rect(0, bar_bottom, layout.width, HEADER_BAR_HEIGHT, fill=1, stroke=0)
        pdf.setFillColor(WHITE)
        pdf.setFont(FONT_BOLD, SMALL_SIZE + 1)
        pdf.drawString(MARGIN, layout.height - HEADER_BAR_HEIGHT + 10, title.upper())
        if options.show_branding:
            pdf.setFont(FONT_REGULAR, SMALL_SIZE)
            pdf.drawRightString(
                layout.width - MARGIN,
                layout.height - HEADER_BAR_HEIGHT + 10,
                to_pdf_safe(options.company_name),
            )

        page = f"Page {layout.page_number}"
        if total_pages is not None:
            page += f" of {total_pages}"
        pdf.setStrokeColor(BORDER)
        pdf.setLineWidth(0.5)
        pdf.line(MARGIN, MARGIN - 10, layout.width - MARGIN, MARGIN - 10)
        pdf.setFillColor(GRAY)
        pdf.setFont(FONT_REGULAR, SMALL_SIZE)
        pdf.drawCentredString(layout.width / 2, MARGIN - 22, f"{title} - {page}")

    return draw


def _draw_cover(
    layout: FlowLayout,
    title: str,
    subtitle: str,
    tagline: str | None,
    options: DocumentOptions,
) -> None:
    pdf = layout.pdf
    width, height = layout.width, layout.height
    layout.plain = True

    pdf.setFillColor(PRIMARY)
    pdf.rect(0, height * 0.45, width, height * 0.55, fill=1, stroke=0)
    pdf.setFillColor(LIGHT)
    pdf.rect(0, 0, width, height * 0.45, fill=1, stroke=0)

    pdf.setFillColor(WHITE)
    pdf.setFont(FONT_BOLD, TITLE_SIZE + 8)
    y = height * 0.72
    for line in wrap_text(title.upper(), FONT_BOLD, TITLE_SIZE + 8, width - 2 * MARGIN):
        pdf.drawCentredString(width / 2, y, line)
        y -= TITLE_SIZE + 12
    pdf.setFont(FONT_BOLD, SUBHEADING_SIZE)
    pdf.drawCentredString(width / 2, y - 6, subtitle)

    pdf.setFillColor(DARK)
    pdf.setFont(FONT_REGULAR, SUBHEADING_SIZE - 2)
    if tagline:
        pdf.drawCentredString(width / 2, height * 0.36, to_pdf_safe(tagline))
    pdf.setFillColor(GRAY)
    pdf.setFont(FONT_REGULAR, SMALL_SIZE + 2)
    pdf.drawCentredString(
        width / 2, height * 0.3, f"Created: {options.created_on.strftime('%B %d, %Y')}"
    )
    if options.show_branding:
        pdf.drawCentredString(width / 2, MARGIN + 10, to_pdf_safe(options.contact_info))


def _draw_overview(layout: FlowLayout, title: str, blocks: list[GuideBlock]) -> None:
    layout.heading("YOUR JOURNEY OVERVIEW", size=HEADING_SIZE, color=PRIMARY, rule=BORDER)
    layout.paragraph(
        f"This guide gathers everything you need for {title}: where to go, what it costs "
        "and how to make the most of every day."
    )
    chapters = [b.text for b in blocks if b.kind == "chapter"] or [
        b.text for b in blocks if b.kind == "section"
    ]
    if chapters:
        layout.heading("INSIDE THIS GUIDE", size=SUBHEADING_SIZE, color=DARK)
        for chapter in chapters:
            layout.bullet(chapter, marker_color=ACCENT)
    layout.spacer(SMALL_GAP)
