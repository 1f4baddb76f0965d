"""In-memory implementations of repository interfaces."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from backend.app.db.repositories import Repositories
from backend.app.models.catalog import Day, Destination, Experience, Itinerary
from backend.app.models.purchase import NewPurchase, Purchase, PurchaseStatus


class InMemoryCatalogRepository:
    """In-memory implementation of CatalogRepository."""

    def __init__(self) -> None:
        self._destinations: dict[int, Destination] = {}
        self._itineraries: dict[int, Itinerary] = {}
        self._days: dict[int, list[Day]] = {}
        self._experiences: dict[int, list[Experience]] = {}

    def add_destination(self, destination: Destination) -> None:
        self._destinations[destination.id] = destination

    def add_itinerary(self, itinerary: Itinerary, days: list[Day] | None = None) -> None:
        self._itineraries[itinerary.destination_id] = itinerary
        self._days[itinerary.id] = list(days or [])

    def add_experience(self, experience: Experience) -> None:
        self._experiences.setdefault(experience.destination_id, []).append(experience)

    def replace_day(self, day: Day) -> None:
        """Swap a stored day for an edited copy."""
        days = self._days.setdefault(day.itinerary_id, [])
        self._days[day.itinerary_id] = [d for d in days if d.id != day.id] + [day]

    async def list_destinations(self) -> list[Destination]:
        """List all destinations ordered by name."""
        return sorted(self._destinations.values(), key=lambda d: d.name)

    async def get_destination(self, destination_id: int) -> Destination | None:
        """Get a destination by ID."""
        return self._destinations.get(destination_id)

    async def get_itinerary(self, destination_id: int) -> Itinerary | None:
        """Get the itinerary belonging to a destination."""
        return self._itineraries.get(destination_id)

    async def list_days(self, itinerary_id: int) -> list[Day]:
        """List itinerary days ordered by day number."""
        return sorted(self._days.get(itinerary_id, []), key=lambda d: d.day_number)

    async def list_experiences(self, destination_id: int) -> list[Experience]:
        """List a destination's experiences in insertion order."""
        return list(self._experiences.get(destination_id, []))

    async def increment_download_count(self, destination_id: int) -> None:
        """Record one more served document for a destination."""
        destination = self._destinations.get(destination_id)
        if destination is None:
            return
        self._destinations[destination_id] = destination.model_copy(
            update={"download_count": destination.download_count + 1}
        )


class InMemoryPurchaseRepository:
    """In-memory implementation of PurchaseRepository."""

    def __init__(self) -> None:
        self._purchases: dict[str, Purchase] = {}
        self._next_id = 1

    async def create(self, purchase: NewPurchase) -> Purchase:
        """Insert a purchase."""
        now = datetime.now(timezone.utc)
        record = Purchase(
            id=self._next_id,
            created_at=now,
            updated_at=now,
            **purchase.model_dump(),
        )
        self._next_id += 1
        self._purchases[record.payment_intent_id] = record
        return record

    async def get_by_payment_intent(self, payment_intent_id: str) -> Purchase | None:
        """Get a purchase by its payment intent ID."""
        return self._purchases.get(payment_intent_id)

    async def update(
        self,
        payment_intent_id: str,
        *,
        status: PurchaseStatus | None = None,
        progress: int | None = None,
        pdf_url: str | None = None,
        job_id: str | None = None,
        email_sent: bool | None = None,
        error_message: str | None = None,
    ) -> Purchase | None:
        """Update fields of an existing purchase."""
        record = self._purchases.get(payment_intent_id)
        if record is None:
            return None

        changes = {
            "status": status,
            "progress": progress,
            "pdf_url": pdf_url,
            "job_id": job_id,
            "email_sent": email_sent,
            "error_message": error_message,
        }
        update = {key: value for key, value in changes.items() if value is not None}
        now = datetime.now(timezone.utc)
        update["updated_at"] = now
        if status == PurchaseStatus.completed:
            update["completed_at"] = now

        record = record.model_copy(update=update)
        self._purchases[payment_intent_id] = record
        return record


class InMemoryRepositoryProvider:
    """Hands out the same in-memory repositories for every unit of work."""

    def __init__(
        self,
        catalog: InMemoryCatalogRepository | None = None,
        purchases: InMemoryPurchaseRepository | None = None,
    ) -> None:
        self.catalog = catalog or InMemoryCatalogRepository()
        self.purchases = purchases or InMemoryPurchaseRepository()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Repositories]:
        yield Repositories(catalog=self.catalog, purchases=self.purchases)
