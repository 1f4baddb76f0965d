"""Structured drafting contract between the LLM and the document assembler."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from backend.app.models.catalog import Destination


class DraftedDay(BaseModel):
    """One drafted day, split into tagged time-of-day fields."""

    day_number: int = Field(..., ge=1)
    title: str = Field(..., min_length=1)
    morning: str = Field(..., min_length=1)
    afternoon: str = Field(..., min_length=1)
    evening: str = Field(..., min_length=1)
    tip: str | None = None

    def as_content(self) -> str:
        """Render as labelled day content understood by the time-of-day extraction."""
        parts = [
            f"Morning: {self.morning.strip()}",
            f"Afternoon: {self.afternoon.strip()}",
            f"Evening: {self.evening.strip()}",
        ]
        if self.tip:
            parts.append(f"Tip: {self.tip.strip()}")
        return "\n\n".join(parts)


class DraftedItinerary(BaseModel):
    """Validated JSON output of the itinerary drafting call."""

    days: list[DraftedDay] = Field(..., min_length=1)

    @field_validator("days")
    @classmethod
    def days_are_consecutive(cls, days: list[DraftedDay]) -> list[DraftedDay]:
        """Day numbers must run 1..N without gaps or repeats."""
        numbers = sorted(day.day_number for day in days)
        if numbers != list(range(1, len(days) + 1)):
            raise ValueError(f"day numbers must run 1..{len(days)}, got {numbers}")
        return sorted(days, key=lambda day: day.day_number)


class GuideKind(str, Enum):
    """Free-text guide flavours."""

    standalone = "standalone"
    snowbird = "snowbird"


class GuideRequest(BaseModel):
    """Input for drafting a free-text guide."""

    kind: GuideKind
    destination: Destination
    duration_days: int = 7
