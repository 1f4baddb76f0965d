"""Brand palette, fonts and sizes shared by the PDF renderers."""

from dataclasses import dataclass, field
from datetime import date

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4

from backend.app.config import Settings

PAGE_SIZE = A4

# Palette
PRIMARY = colors.HexColor("#2563eb")
SECONDARY = colors.HexColor("#0ea5e9")
ACCENT = colors.HexColor("#f97316")
DARK = colors.HexColor("#1e293b")
LIGHT = colors.HexColor("#f8fafc")
GRAY = colors.HexColor("#64748b")
BORDER = colors.HexColor("#e2e8f0")
WHITE = colors.white
DANGER = colors.HexColor("#dc2626")
DANGER_LIGHT = colors.HexColor("#fef2f2")

PERIOD_COLORS = {
    "morning": colors.HexColor("#fbbf24"),
    "afternoon": colors.HexColor("#60a5fa"),
    "evening": colors.HexColor("#8b5cf6"),
}

# Fonts (standard Type 1 families, no embedding needed)
FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"

# Sizes (points)
TITLE_SIZE = 24
HEADING_SIZE = 18
SUBHEADING_SIZE = 14
BODY_SIZE = 10
SMALL_SIZE = 8
MARGIN = 50
GUTTER = 15
SMALL_GAP = 8


@dataclass(frozen=True)
class DocumentOptions:
    """Branding and reproducibility switches for one rendered document."""

    company_name: str = "Deep Travel Collections"
    contact_info: str = "www.deeptravelcollections.com | info@deeptravelcollections.com"
    show_branding: bool = True
    invariant: bool = False
    created_on: date = field(default_factory=date.today)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentOptions":
        return cls(
            company_name=settings.company_name,
            contact_info=settings.contact_info,
            invariant=settings.pdf_invariant,
        )
