"""Flow layout helper - wrapped text blocks with automatic page breaks.

Renderers push content top to bottom; the layout tracks the vertical cursor,
wraps text to the available width and starts a new page whenever the next line
would cross the bottom margin. Page decorations (footers, header bars) are
drawn by a callback just before each page is finished, and a second callback
can draw a continuation header at the top of every page opened by overflow.
"""

from collections.abc import Callable
from typing import Literal

from reportlab.lib.colors import Color
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

from backend.app.pdf.theme import (
    BODY_SIZE,
    DARK,
    FONT_BOLD,
    FONT_REGULAR,
    MARGIN,
    PAGE_SIZE,
    SMALL_GAP,
)

Align = Literal["left", "center", "right"]
PageHook = Callable[["FlowLayout"], None]


def wrap_text(text: str, font: str, size: float, max_width: float) -> list[str]:
    """Greedy word wrap measured with the font's metrics.

    Words wider than ``max_width`` are split by character.
    """
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = word if not current else f"{current} {word}"
        if stringWidth(candidate, font, size) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
        current = ""
        # Hard-break words that cannot fit on a line of their own
        while stringWidth(word, font, size) > max_width and len(word) > 1:
            cut = len(word) - 1
            while cut > 1 and stringWidth(word[:cut], font, size) > max_width:
                cut -= 1
            lines.append(word[:cut])
            word = word[cut:]
        current = word
    if current:
        lines.append(current)
    return lines


class FlowLayout:
    """Vertical cursor over a reportlab canvas."""

    def __init__(
        self,
        pdf: Canvas,
        *,
        page_size: tuple[float, float] = PAGE_SIZE,
        margin: float = MARGIN,
        top_margin: float | None = None,
        bottom_margin: float | None = None,
        decorate_page: PageHook | None = None,
    ) -> None:
        self.pdf = pdf
        self.width, self.height = page_size
        self.margin = margin
        self.top = self.height - (top_margin if top_margin is not None else margin)
        self.bottom = bottom_margin if bottom_margin is not None else margin
        self.y = self.top
        self.page_number = 1
        self.decorate_page = decorate_page
        # Drawn at the top of pages opened by overflow
        self.on_continue: PageHook | None = None
        # Suppresses decorate_page for the current page (covers)
        self.plain = False

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def at_page_top(self) -> bool:
        return self.y >= self.top

    def new_page(self, *, continued: bool = True) -> None:
        """Finish the current page and move the cursor to the top of the next.

        Args:
            continued: Whether the new page continues overflowing content
        """
        self._decorate()
        self.pdf.showPage()
        self.page_number += 1
        self.y = self.top
        self.plain = False
        if continued and self.on_continue is not None:
            self.on_continue(self)

    def finish(self) -> None:
        """Decorate the last page; the caller saves the canvas."""
        self._decorate()

    def _decorate(self) -> None:
        if self.decorate_page is not None and not self.plain:
            self.decorate_page(self)

    def ensure_space(self, height: float) -> None:
        """Break the page unless ``height`` points fit above the bottom margin."""
        if self.y - height < self.bottom and not self.at_page_top:
            self.new_page()

    def reserve(self, height: float) -> float:
        """Claim a block of ``height`` points and return its top y."""
        self.ensure_space(height)
        top = self.y
        self.y -= height
        return top

    def spacer(self, height: float) -> None:
        self.y -= height
        if self.y < self.bottom:
            self.new_page()

    def measure(
        self,
        text: str,
        *,
        font: str = FONT_REGULAR,
        size: float = BODY_SIZE,
        width: float | None = None,
        leading: float | None = None,
    ) -> float:
        """Height a paragraph would take, excluding the space after it."""
        leading = leading or size * 1.4
        width = width or self.content_width
        count = sum(max(1, len(wrap_text(block, font, size, width))) for block in text.split("\n"))
        return count * leading

    def paragraph(
        self,
        text: str,
        *,
        font: str = FONT_REGULAR,
        size: float = BODY_SIZE,
        color: Color = DARK,
        indent: float = 0.0,
        width: float | None = None,
        leading: float | None = None,
        align: Align = "left",
        space_after: float = SMALL_GAP,
    ) -> None:
        """Draw wrapped text; each newline starts a new line."""
        leading = leading or size * 1.4
        width = width or (self.content_width - indent)
        x = self.margin + indent
        for block in text.split("\n"):
            for line in wrap_text(block, font, size, width) or [""]:
                self.ensure_space(leading)
                self.pdf.setFillColor(color)
                self.pdf.setFont(font, size)
                baseline = self.y - size
                if align == "center":
                    self.pdf.drawCentredString(x + width / 2, baseline, line)
                elif align == "right":
                    self.pdf.drawRightString(x + width, baseline, line)
                else:
                    self.pdf.drawString(x, baseline, line)
                self.y -= leading
        self.y -= space_after

    def bullet(
        self,
        text: str,
        *,
        size: float = BODY_SIZE,
        color: Color = DARK,
        marker_color: Color | None = None,
        indent: float = 0.0,
    ) -> None:
        """Draw a bulleted paragraph with a hanging indent."""
        leading = size * 1.4
        self.ensure_space(leading)
        self.pdf.setFillColor(marker_color or color)
        self.pdf.setFont(FONT_BOLD, size)
        self.pdf.drawString(self.margin + indent, self.y - size, "•")
        self.paragraph(text, size=size, color=color, indent=indent + 12, space_after=2)

    def heading(
        self,
        text: str,
        *,
        size: float,
        color: Color = DARK,
        font: str = FONT_BOLD,
        rule: Color | None = None,
        keep_with_next: float = 60,
    ) -> None:
        """Draw a heading, moving it to the next page if it would end up orphaned."""
        self.ensure_space(size * 1.4 + keep_with_next)
        self.paragraph(text, font=font, size=size, color=color, space_after=4)
        if rule is not None:
            self.pdf.setStrokeColor(rule)
            self.pdf.setLineWidth(1)
            self.pdf.line(self.margin, self.y, self.margin + self.content_width, self.y)
            self.y -= SMALL_GAP

    def panel(
        self,
        text: str,
        *,
        fill: Color,
        stroke: Color | None = None,
        padding: float = 12,
        font: str = FONT_REGULAR,
        size: float = BODY_SIZE,
        color: Color = DARK,
        title: str | None = None,
        title_color: Color | None = None,
        radius: float = 6,
    ) -> None:
        """Draw text inside a filled rounded box that never splits across pages.

        Oversized text is drawn without the box.
        """
        inner = self.content_width - 2 * padding
        height = self.measure(text, font=font, size=size, width=inner) + 2 * padding
        if title:
            height += self.measure(title, font=FONT_BOLD, size=size + 2, width=inner) + 4
        if height > self.top - self.bottom:
            if title:
                self.paragraph(title, font=FONT_BOLD, size=size + 2, color=title_color or color)
            self.paragraph(text, font=font, size=size, color=color)
            return

        top = self.reserve(height)
        self.pdf.setFillColor(fill)
        if stroke is not None:
            self.pdf.setStrokeColor(stroke)
        self.pdf.roundRect(
            self.margin,
            top - height,
            self.content_width,
            height,
            radius,
            fill=1,
            stroke=1 if stroke is not None else 0,
        )
        self.y = top - padding
        if title:
            self.paragraph(
                title,
                font=FONT_BOLD,
                size=size + 2,
                color=title_color or color,
                indent=padding,
                width=inner,
                space_after=4,
            )
        self.paragraph(
            text, font=font, size=size, color=color, indent=padding, width=inner, space_after=0
        )
        self.y = top - height - SMALL_GAP
