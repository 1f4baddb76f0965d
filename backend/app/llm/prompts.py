"""Prompt templates for itinerary and guide drafting."""

from backend.app.models.catalog import Destination, ItineraryBundle
from backend.app.models.drafting import GuideKind, GuideRequest

# Folded into cache keys so prompt changes rebuild drafted documents
PROMPT_VERSION = "3"

ITINERARY_SYSTEM_PROMPT = """You are an expert travel writer for a premium travel guide company.
You write vivid, practical day plans grounded in the destination facts you are given.

Respond with a single JSON object and nothing else, shaped exactly like:
{"days": [{"day_number": 1, "title": "...", "morning": "...", "afternoon": "...",
"evening": "...", "tip": "..."}]}

Rules:
- One entry per requested day, numbered from 1 with no gaps.
- Each of morning/afternoon/evening is 2-4 sentences naming real places, with
  practical details (location, approximate cost, opening hours) written as
  "Location: ...", "Cost: ...", "Hours: ..." on their own lines after the prose.
- Plain text only inside the strings: no markdown, asterisks or emoji.
"""

GUIDE_SYSTEM_PROMPT = """You are an expert travel writer creating premium, print-ready guides.
Write in plain text with '#' for chapter headings and '##' for sections.
Never use asterisks, bold markers, emoji or tables. Use '-' for bullet points and
'Label: value' lines for practical details."""


def _destination_facts(destination: Destination) -> list[str]:
    facts = [f"- Name: {destination.name}", f"- Country: {destination.country}"]
    optional = [
        ("Region", destination.region),
        ("Overview", destination.immersive_description or destination.description),
        ("Best time to visit", destination.best_time_to_visit),
        ("Language", destination.language),
        ("Currency", destination.currency),
        ("Climate", destination.climate),
        ("Culture", destination.culture),
        ("Cuisine", destination.cuisine),
        ("Local tips", destination.local_tips),
    ]
    facts.extend(f"- {label}: {value}" for label, value in optional if value)
    return facts


def build_itinerary_prompt(bundle: ItineraryBundle, day_numbers: list[int]) -> str:
    """User prompt asking for structured day plans.

    Args:
        bundle: Catalog data for the destination
        day_numbers: Days that still need content

    Returns:
        Prompt text
    """
    lines = ["## Destination", *_destination_facts(bundle.destination), ""]
    lines.append("## Itinerary")
    lines.append(f"- Title: {bundle.itinerary.title}")
    lines.append(f"- Duration: {bundle.itinerary.duration_days} days")
    if bundle.itinerary.description:
        lines.append(f"- Summary: {bundle.itinerary.description}")
    lines.append("")

    existing = [day for day in bundle.days if day.content.strip()]
    if existing:
        lines.append("## Days already written (keep the plan consistent with these)")
        for day in existing:
            lines.append(f"- Day {day.day_number}: {day.title}")
        lines.append("")

    if bundle.experiences:
        lines.append("## Local experiences to weave in (one per day where it fits)")
        for experience in bundle.experiences[:10]:
            where = f" ({experience.location})" if experience.location else ""
            lines.append(f"- {experience.title}{where}")
        lines.append("")

    count = len(day_numbers)
    lines.append(
        f"Write {count} day plan(s), numbered 1 to {count}; they will be used for "
        f"itinerary days {', '.join(str(n) for n in day_numbers)}."
    )
    return "\n".join(lines)


def build_guide_prompt(request: GuideRequest) -> str:
    """User prompt for a free-text guide with its required-section checklist."""
    destination = request.destination
    facts = "\n".join(_destination_facts(destination))

    if request.kind == GuideKind.snowbird:
        profile = destination.snowbird
        snowbird_facts = []
        if profile is not None:
            snowbird_facts = [
                f"- {label}: {value}"
                for label, value in (
                    ("Average winter temperature", profile.avg_winter_temp),
                    ("Cost compared with Florida", profile.cost_comparison),
                    ("Healthcare access", profile.healthcare_access),
                    ("Visa requirements", profile.visa_requirements),
                    ("Canadian expat community", profile.canadian_expats),
                    ("Cost of living", profile.cost_of_living),
                )
                if value
            ]
        return "\n".join(
            [
                f"Create a comprehensive 3-month winter escape guide to {destination.name}, "
                f"{destination.country} for Canadian snowbirds.",
                "",
                "## Destination facts",
                facts,
                *snowbird_facts,
                "",
                "Required chapters (use '#' headings, in this order):",
                f"# Why {destination.name} Over Florida",
                "# Practical Information (visas, length of stay, currency, banking, phones)",
                "# Healthcare for Canadians (provincial coverage, travel insurance, clinics, "
                "pharmacies)",
                "# Cost of Living and Monthly Budget (rent, groceries, dining, transport, "
                "with CAD figures)",
                "# Month-by-Month Breakdown (weeks 1-4 of each of the three months)",
                "# Getting Around",
                "# Community and Social Life (Canadian expat groups, clubs, activities)",
                "# Where to Eat",
                "# Where to Stay (neighbourhoods and long-stay rentals)",
                "# Weather and Comfort Compared with Home",
                "",
                "Every chapter must contain concrete names, prices and practical tips.",
            ]
        )

    return "\n".join(
        [
            f"Create a premium {request.duration_days}-day travel guide to "
            f"{destination.name}, {destination.country}.",
            "",
            "## Destination facts",
            facts,
            "",
            "Required chapters (use '#' headings, in this order):",
            "# Introduction",
            f"# Day 1 through # Day {request.duration_days}, each with '## MORNING', "
            "'## AFTERNOON' and '## EVENING' sections naming specific places, with "
            "Location:, Cost: and Hours: lines",
            "# Practical Information (currency, language, getting around, safety, "
            "etiquette, emergency numbers)",
            "# Local Food and Drink",
            "",
            "Keep the tone warm and expert. Plain text only.",
        ]
    )
