"""Destination catalog models - read-only reference data for document generation."""

from pydantic import BaseModel, ConfigDict

from backend.app.models.common import payload_digest


class SnowbirdProfile(BaseModel):
    """Winter-stay facts for destinations marketed to Canadian snowbirds."""

    model_config = ConfigDict(from_attributes=True)

    avg_winter_temp: str | None = None
    cost_comparison: str | None = None
    healthcare_access: str | None = None
    visa_requirements: str | None = None
    canadian_expats: str | None = None
    cost_of_living: str | None = None


class Destination(BaseModel):
    """Travel destination."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    country: str
    region: str | None = None
    description: str = ""
    immersive_description: str | None = None
    best_time_to_visit: str | None = None
    language: str | None = None
    currency: str | None = None
    climate: str | None = None
    local_tips: str | None = None
    culture: str | None = None
    cuisine: str | None = None
    download_count: int = 0
    snowbird: SnowbirdProfile | None = None

    def content_digest(self, *salt: str) -> str:
        """Digest of the destination fields that feed a generated document."""
        payload = self.model_dump(mode="json", exclude={"download_count"})
        return payload_digest({"destination": payload, "salt": list(salt)})


class Itinerary(BaseModel):
    """Multi-day itinerary overview (one per destination)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    destination_id: int
    title: str
    duration_days: int = 7
    description: str = ""


class Day(BaseModel):
    """Single itinerary day with free-text morning/afternoon/evening content."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    itinerary_id: int
    day_number: int
    title: str
    content: str = ""


class Experience(BaseModel):
    """Local activity highlighted alongside a destination's itinerary."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    destination_id: int
    title: str
    location: str | None = None
    kind: str | None = None
    description: str = ""
    seasonal_tip: str | None = None


class ItineraryBundle(BaseModel):
    """Everything the premium itinerary document is assembled from."""

    destination: Destination
    itinerary: Itinerary
    days: list[Day]
    experiences: list[Experience] = []

    def content_digest(self, *salt: str) -> str:
        """Cache key over destination, itinerary, days and experiences.

        Download counters are excluded so serving a document does not invalidate it.

        Args:
            salt: Extra strings folded into the key (document kind, layout version)

        Returns:
            SHA-256 hex digest
        """
        payload = self.model_dump(mode="json", exclude={"destination": {"download_count"}})
        return payload_digest({"bundle": payload, "salt": list(salt)})

    def days_needing_draft(self) -> list[int]:
        """Day numbers whose stored content is blank."""
        expected = range(1, self.itinerary.duration_days + 1)
        by_number = {day.day_number: day for day in self.days}
        return [
            number
            for number in expected
            if number not in by_number or not by_number[number].content.strip()
        ]
