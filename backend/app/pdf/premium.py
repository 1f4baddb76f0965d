"""Premium itinerary PDF assembler.

Builds the fixed page sequence for one destination: cover, destination
overview, one page per day (morning/afternoon/evening blocks plus an
experience spotlight), the experiences showcase, practical information and a
back cover. A failure anywhere aborts the whole document.
"""

import io

from reportlab.lib.colors import Color
from reportlab.pdfgen import canvas

from backend.app.models.catalog import Day, Destination, Experience, ItineraryBundle
from backend.app.pdf.layout import FlowLayout, PageHook, wrap_text
from backend.app.pdf.theme import (
    ACCENT,
    BODY_SIZE,
    BORDER,
    DANGER,
    DANGER_LIGHT,
    DARK,
    FONT_BOLD,
    FONT_ITALIC,
    FONT_REGULAR,
    GRAY,
    GUTTER,
    HEADING_SIZE,
    LIGHT,
    MARGIN,
    PAGE_SIZE,
    PERIOD_COLORS,
    PRIMARY,
    SECONDARY,
    SMALL_GAP,
    SMALL_SIZE,
    SUBHEADING_SIZE,
    TITLE_SIZE,
    WHITE,
    DocumentOptions,
)
from backend.app.text.sanitizer import (
    clean_activity_text,
    extract_details,
    sanitize_llm_text,
    strip_markdown,
    to_pdf_safe,
)
from backend.app.text.sections import PERIODS, Period, time_of_day_section

# Bumped whenever page output changes so cached documents are rebuilt
LAYOUT_VERSION = "premium-layout-1"

DAY_BANNER_HEIGHT = 120

EMERGENCY_CONTACTS = (
    "Dial 112 (or the local emergency number) for police, fire and ambulance.\n"
    "Keep your embassy or consulate's phone number and your travel insurance "
    "hotline with your passport copy.\n"
    "Your hotel reception can direct you to the nearest hospital or pharmacy."
)


def _safe(text: str | None) -> str:
    return to_pdf_safe(strip_markdown(text or "")).strip()


def render_premium_itinerary(bundle: ItineraryBundle, options: DocumentOptions) -> bytes:
    """Render the premium itinerary for a destination.

    Args:
        bundle: Destination, itinerary, days and experiences
        options: Branding and reproducibility switches

    Returns:
        Complete PDF document bytes
    """
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=PAGE_SIZE, invariant=int(options.invariant))
    destination = bundle.destination
    pdf.setTitle(f"{destination.name} Premium Travel Itinerary")
    pdf.setAuthor(options.company_name)
    pdf.setSubject(f"{bundle.itinerary.duration_days}-day itinerary for {destination.name}")

    layout = FlowLayout(pdf, decorate_page=_footer(destination.name, options))

    _draw_cover(layout, bundle, options)
    layout.new_page(continued=False)
    _draw_overview(layout, bundle)

    days = sorted(bundle.days, key=lambda day: day.day_number)
    for day in days:
        layout.new_page(continued=False)
        spotlight = _spotlight_for(day, bundle.experiences)
        _draw_day(layout, day, spotlight)

    if bundle.experiences:
        layout.new_page(continued=False)
        _draw_experiences(layout, bundle.experiences)

    layout.new_page(continued=False)
    _draw_practical_info(layout, destination)

    layout.new_page(continued=False)
    _draw_back_cover(layout, destination, options)

    layout.finish()
    pdf.save()
    return buffer.getvalue()


def _footer(name: str, options: DocumentOptions) -> PageHook:
    def draw(layout: FlowLayout) -> None:
        pdf = layout.pdf
        y = MARGIN - 20
        pdf.setStrokeColor(BORDER)
        pdf.setLineWidth(0.5)
        pdf.line(MARGIN, y + 10, layout.width - MARGIN, y + 10)
        pdf.setFillColor(GRAY)
        pdf.setFont(FONT_REGULAR, SMALL_SIZE)
        pdf.drawString(MARGIN, y, to_pdf_safe(f"{name} Itinerary | Page {layout.page_number}"))
        if options.show_branding:
            pdf.drawRightString(layout.width - MARGIN, y, to_pdf_safe(options.company_name))

    return draw


def _spotlight_for(day: Day, experiences: list[Experience]) -> Experience | None:
    index = day.day_number - 1
    if 0 <= index < len(experiences):
        return experiences[index]
    return None


def _draw_centered_lines(
    layout: FlowLayout,
    text: str,
    *,
    y: float,
    font: str,
    size: float,
    color: Color,
    max_width: float,
) -> float:
    """Draw wrapped, centred lines downward from ``y``; returns the next free y."""
    pdf = layout.pdf
    pdf.setFillColor(color)
    pdf.setFont(font, size)
    for line in wrap_text(text, font, size, max_width):
        pdf.drawCentredString(layout.width / 2, y, line)
        y -= size * 1.3
    return y


def _draw_cover(layout: FlowLayout, bundle: ItineraryBundle, options: DocumentOptions) -> None:
    pdf = layout.pdf
    width, height = layout.width, layout.height
    destination = bundle.destination
    layout.plain = True

    pdf.setFillColor(PRIMARY)
    pdf.rect(0, 0, width, height, fill=1, stroke=0)

    panel_bottom = height * 0.3
    panel_height = height * 0.45
    pdf.setFillColor(LIGHT)
    pdf.roundRect(MARGIN, panel_bottom, width - 2 * MARGIN, panel_height, 12, fill=1, stroke=0)

    inner_width = width - 4 * MARGIN
    y = panel_bottom + panel_height - 70
    y = _draw_centered_lines(
        layout,
        _safe(destination.name).upper(),
        y=y,
        font=FONT_BOLD,
        size=TITLE_SIZE + 8,
        color=DARK,
        max_width=inner_width,
    )
    y = _draw_centered_lines(
        layout,
        _safe(destination.country),
        y=y - 6,
        font=FONT_REGULAR,
        size=SUBHEADING_SIZE,
        color=GRAY,
        max_width=inner_width,
    )
    y = _draw_centered_lines(
        layout,
        "PREMIUM TRAVEL ITINERARY",
        y=y - 24,
        font=FONT_BOLD,
        size=HEADING_SIZE,
        color=ACCENT,
        max_width=inner_width,
    )

    badge_text = f"{bundle.itinerary.duration_days} DAYS"
    badge_width = 110
    pdf.setFillColor(ACCENT)
    pdf.roundRect((width - badge_width) / 2, y - 40, badge_width, 32, 16, fill=1, stroke=0)
    pdf.setFillColor(WHITE)
    pdf.setFont(FONT_BOLD, SUBHEADING_SIZE)
    pdf.drawCentredString(width / 2, y - 29, badge_text)

    pdf.setFillColor(GRAY)
    pdf.setFont(FONT_REGULAR, BODY_SIZE)
    created = options.created_on.strftime("%B %d, %Y")
    pdf.drawCentredString(width / 2, panel_bottom + 24, f"Created: {created}")

    pdf.setFillColor(WHITE)
    pdf.setFont(FONT_REGULAR, SMALL_SIZE)
    pdf.drawCentredString(
        width / 2,
        MARGIN + 20,
        "This itinerary is for personal use. Prices and opening times change; "
        "confirm details before you travel.",
    )
    if options.show_branding:
        pdf.drawCentredString(
            width / 2,
            MARGIN + 6,
            to_pdf_safe(f"© {options.created_on.year} {options.company_name}. All rights reserved"),
        )


def _draw_overview(layout: FlowLayout, bundle: ItineraryBundle) -> None:
    destination = bundle.destination
    layout.heading("DESTINATION OVERVIEW", size=HEADING_SIZE, color=PRIMARY, rule=BORDER)

    facts = [
        ("LOCATION / REGION", destination.region or destination.country),
        ("BEST TIME TO VISIT", destination.best_time_to_visit or "Year-round"),
        ("LANGUAGE", destination.language or "Local language; English widely understood"),
    ]
    _draw_fact_boxes(layout, facts)

    about = _safe(destination.immersive_description or destination.description) or (
        f"{destination.name} rewards travellers with a rich mix of culture, food and scenery."
    )
    layout.heading("ABOUT THIS DESTINATION", size=SUBHEADING_SIZE, color=DARK)
    layout.paragraph(sanitize_llm_text(about))

    highlights = _safe(bundle.itinerary.description) or (
        f"A {bundle.itinerary.duration_days}-day journey through the best of {destination.name}."
    )
    layout.heading("ITINERARY HIGHLIGHTS", size=SUBHEADING_SIZE, color=DARK)
    layout.paragraph(highlights)

    if bundle.days:
        layout.heading(
            f"YOUR {bundle.itinerary.duration_days}-DAY JOURNEY AT A GLANCE",
            size=SUBHEADING_SIZE,
            color=DARK,
        )
        for day in sorted(bundle.days, key=lambda d: d.day_number):
            layout.bullet(f"Day {day.day_number}: {_safe(day.title)}", marker_color=ACCENT)


def _draw_fact_boxes(layout: FlowLayout, facts: list[tuple[str, str]]) -> None:
    pdf = layout.pdf
    column_width = (layout.content_width - GUTTER * (len(facts) - 1)) / len(facts)
    inner = column_width - 16
    values = [_safe(value) for _, value in facts]
    tallest = max(
        layout.measure(value, size=BODY_SIZE, width=inner) for value in values
    )
    box_height = tallest + SMALL_SIZE * 1.4 + 24

    top = layout.reserve(box_height)
    for index, ((label, _), value) in enumerate(zip(facts, values, strict=True)):
        x = MARGIN + index * (column_width + GUTTER)
        pdf.setFillColor(LIGHT)
        pdf.setStrokeColor(BORDER)
        pdf.roundRect(x, top - box_height, column_width, box_height, 6, fill=1, stroke=1)
        pdf.setFillColor(GRAY)
        pdf.setFont(FONT_BOLD, SMALL_SIZE)
        pdf.drawString(x + 8, top - 8 - SMALL_SIZE, label)
        pdf.setFillColor(DARK)
        pdf.setFont(FONT_REGULAR, BODY_SIZE)
        y = top - 16 - SMALL_SIZE * 1.4 - BODY_SIZE
        for line in wrap_text(value, FONT_REGULAR, BODY_SIZE, inner):
            pdf.drawString(x + 8, y, line)
            y -= BODY_SIZE * 1.4
    layout.y = top - box_height - 2 * SMALL_GAP


def _draw_day(layout: FlowLayout, day: Day, spotlight: Experience | None) -> None:
    pdf = layout.pdf
    banner_bottom = layout.height - DAY_BANNER_HEIGHT
    pdf.setFillColor(PRIMARY)
    pdf.rect(0, banner_bottom, layout.width, DAY_BANNER_HEIGHT, fill=1, stroke=0)
    pdf.setFillColor(WHITE)
    pdf.setFont(FONT_BOLD, SUBHEADING_SIZE)
    pdf.drawString(MARGIN, layout.height - 45, f"DAY {day.day_number}")
    title_lines = wrap_text(_safe(day.title), FONT_BOLD, HEADING_SIZE + 2, layout.content_width)
    pdf.setFont(FONT_BOLD, HEADING_SIZE + 2)
    y = layout.height - 72
    for line in title_lines[:2]:
        pdf.drawString(MARGIN, y, line)
        y -= HEADING_SIZE + 4
    layout.y = banner_bottom - 25

    content = sanitize_llm_text(strip_markdown(day.content))
    for period in PERIODS:
        _draw_period(layout, period, time_of_day_section(content, period))

    if spotlight is not None:
        _draw_spotlight(layout, spotlight)


def _draw_period(layout: FlowLayout, period: Period, section: str) -> None:
    color = PERIOD_COLORS[period]
    narrative = clean_activity_text(section) or section
    details = [d for d in extract_details(section) if d.label != "Description"]

    layout.ensure_space(SUBHEADING_SIZE * 1.4 + 50)
    pdf = layout.pdf
    pdf.setFillColor(color)
    pdf.rect(MARGIN, layout.y - SUBHEADING_SIZE - 2, 4, SUBHEADING_SIZE + 4, fill=1, stroke=0)
    layout.paragraph(
        period.upper(), font=FONT_BOLD, size=SUBHEADING_SIZE, color=DARK, indent=12, space_after=4
    )
    layout.paragraph(to_pdf_safe(narrative), indent=12)
    for detail in details:
        layout.paragraph(
            to_pdf_safe(f"{detail.label}: {detail.value}"),
            size=SMALL_SIZE + 1,
            color=GRAY,
            indent=12,
            space_after=2,
        )
    layout.spacer(SMALL_GAP)


def _draw_spotlight(layout: FlowLayout, experience: Experience) -> None:
    lines = [_safe(experience.title)]
    if experience.location:
        lines.append(f"Location: {_safe(experience.location)}")
    description = clean_activity_text(_safe(experience.description))
    if description:
        lines.append(description)
    if experience.seasonal_tip:
        lines.append(f"Local tip: {_safe(experience.seasonal_tip)}")
    layout.panel(
        "\n".join(lines),
        fill=LIGHT,
        stroke=ACCENT,
        title="LOCAL EXPERIENCE SPOTLIGHT",
        title_color=ACCENT,
    )


def _draw_experiences(layout: FlowLayout, experiences: list[Experience]) -> None:
    title = "AUTHENTIC LOCAL EXPERIENCES"
    layout.heading(title, size=HEADING_SIZE, color=PRIMARY, rule=BORDER)

    def continued(flow: FlowLayout) -> None:
        flow.heading(f"{title} (CONTINUED)", size=SUBHEADING_SIZE, color=PRIMARY, rule=BORDER)

    layout.on_continue = continued
    try:
        for experience in experiences:
            layout.heading(_safe(experience.title), size=SUBHEADING_SIZE, color=DARK)
            meta = " | ".join(
                _safe(part) for part in (experience.kind, experience.location) if part
            )
            if meta:
                layout.paragraph(meta, size=SMALL_SIZE + 1, color=SECONDARY, space_after=4)
            description = clean_activity_text(_safe(experience.description))
            if description:
                layout.paragraph(description)
            if experience.seasonal_tip:
                layout.paragraph(
                    f"Seasonal tip: {_safe(experience.seasonal_tip)}",
                    font=FONT_ITALIC,
                    color=GRAY,
                )
            layout.spacer(SMALL_GAP)
    finally:
        layout.on_continue = None


def _draw_practical_info(layout: FlowLayout, destination: Destination) -> None:
    layout.heading("PRACTICAL INFORMATION", size=HEADING_SIZE, color=PRIMARY, rule=BORDER)
    sections = [
        (
            "CURRENCY & MONEY",
            f"Local currency: {destination.currency}. Cards are widely accepted; "
            "carry some cash for markets and small vendors."
            if destination.currency
            else "Check the local currency before you travel and carry some cash for "
            "markets and small vendors.",
        ),
        (
            "LANGUAGE",
            destination.language
            or "Learning a few greetings in the local language is always appreciated.",
        ),
        (
            "GETTING AROUND",
            "Use licensed taxis or ride-hailing apps, and public transport where available. "
            "Walking is often the best way to explore central districts.",
        ),
        (
            "WEATHER & CLIMATE",
            " ".join(
                part
                for part in (
                    destination.climate,
                    f"Best time to visit: {destination.best_time_to_visit}."
                    if destination.best_time_to_visit
                    else None,
                )
                if part
            )
            or "Check the forecast before each day out and pack layers.",
        ),
        (
            "SAFETY & HEALTH",
            "Keep valuables out of sight, drink bottled water where advised and carry "
            "travel insurance details with you.",
        ),
        (
            "LOCAL ETIQUETTE",
            destination.culture
            or "Dress modestly at religious sites and ask before photographing people.",
        ),
    ]
    if destination.local_tips:
        sections.append(("LOCAL TIPS", destination.local_tips))
    if destination.cuisine:
        sections.append(("WHAT TO EAT", destination.cuisine))

    for title, body in sections:
        layout.heading(title, size=SUBHEADING_SIZE - 2, color=ACCENT, keep_with_next=30)
        layout.paragraph(sanitize_llm_text(_safe(body)))

    layout.spacer(SMALL_GAP)
    layout.panel(
        EMERGENCY_CONTACTS,
        fill=DANGER_LIGHT,
        stroke=DANGER,
        title="EMERGENCY CONTACTS",
        title_color=DANGER,
    )


def _draw_back_cover(
    layout: FlowLayout, destination: Destination, options: DocumentOptions
) -> None:
    pdf = layout.pdf
    width, height = layout.width, layout.height
    layout.plain = True

    pdf.setFillColor(PRIMARY)
    pdf.rect(0, 0, width, height, fill=1, stroke=0)
    y = _draw_centered_lines(
        layout,
        "THANK YOU",
        y=height * 0.6,
        font=FONT_BOLD,
        size=TITLE_SIZE + 12,
        color=WHITE,
        max_width=width - 2 * MARGIN,
    )
    y = _draw_centered_lines(
        layout,
        to_pdf_safe(f"for exploring {destination.name} with {options.company_name}"),
        y=y - 10,
        font=FONT_REGULAR,
        size=SUBHEADING_SIZE,
        color=WHITE,
        max_width=width - 2 * MARGIN,
    )
    if options.show_branding:
        _draw_centered_lines(
            layout,
            to_pdf_safe(options.contact_info),
            y=y - 30,
            font=FONT_REGULAR,
            size=BODY_SIZE,
            color=LIGHT,
            max_width=width - 2 * MARGIN,
        )
