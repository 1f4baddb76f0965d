"""Time-of-day extraction from free-text day content."""

import re
from typing import Literal

Period = Literal["morning", "afternoon", "evening"]

PERIODS: tuple[Period, ...] = ("morning", "afternoon", "evening")

_NEXT_PERIOD = r"(?=\b(?:morning|afternoon|evening)(?:\s+(?:activities|itinerary))?\s*:|\Z)"


def _labelled_pattern(period: Period) -> re.Pattern[str]:
    # "Morning activities:" / "Morning itinerary:" / "Morning:"
    return re.compile(
        rf"\b{period}(?:\s+(?:activities|itinerary))?\s*:\s*(.*?){_NEXT_PERIOD}",
        re.IGNORECASE | re.DOTALL,
    )


def _prose_pattern(period: Period) -> re.Pattern[str]:
    # "In the morning ..." style prose without a label
    return re.compile(rf"\b{period}\s+(.*?){_NEXT_PERIOD}", re.IGNORECASE | re.DOTALL)


def extract_time_of_day(content: str, period: Period) -> str | None:
    """Find the part of a day's content describing one period.

    A labelled section wins, even when it is empty. Otherwise tries prose
    following the keyword, then the first paragraph mentioning the keyword.
    This is a text search, not a parser: the span found may not be what the
    author intended.

    Args:
        content: Free-text day content
        period: "morning", "afternoon" or "evening"

    Returns:
        The matched text, or None when nothing mentions the period or its
        label has no text after it
    """
    if not content or not content.strip():
        return None

    labelled = _labelled_pattern(period).search(content)
    if labelled:
        # A label with nothing after it means the period was left blank
        return labelled.group(1).strip() or None

    prose = _prose_pattern(period).search(content)
    if prose and prose.group(1).strip():
        return prose.group(1).strip()

    for paragraph in re.split(r"\n\s*\n", content):
        if period in paragraph.lower() and paragraph.strip():
            return paragraph.strip()

    return None


def placeholder_for(period: Period) -> str:
    """Generic sentence used when a day says nothing about a period."""
    return f"Explore {period} attractions and enjoy local experiences."


def time_of_day_section(content: str, period: Period) -> str:
    """Text for one period of a day, falling back to the placeholder sentence."""
    return extract_time_of_day(content, period) or placeholder_for(period)
