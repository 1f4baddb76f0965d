"""Repository protocol interfaces for data access."""

from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Protocol

from backend.app.models.catalog import Day, Destination, Experience, Itinerary
from backend.app.models.purchase import NewPurchase, Purchase, PurchaseStatus


class CatalogRepository(Protocol):
    """Read access to destination reference data."""

    async def list_destinations(self) -> list[Destination]:
        """List all destinations ordered by name."""
        ...

    async def get_destination(self, destination_id: int) -> Destination | None:
        """Get a destination by ID."""
        ...

    async def get_itinerary(self, destination_id: int) -> Itinerary | None:
        """Get the itinerary belonging to a destination."""
        ...

    async def list_days(self, itinerary_id: int) -> list[Day]:
        """List itinerary days ordered by day number."""
        ...

    async def list_experiences(self, destination_id: int) -> list[Experience]:
        """List a destination's experiences in insertion order."""
        ...

    async def increment_download_count(self, destination_id: int) -> None:
        """Record one more served document for a destination."""
        ...


class PurchaseRepository(Protocol):
    """Purchase records keyed by payment intent ID."""

    async def create(self, purchase: NewPurchase) -> Purchase:
        """Insert a purchase.

        Args:
            purchase: Fields for the new record

        Returns:
            Stored purchase with ID and timestamps
        """
        ...

    async def get_by_payment_intent(self, payment_intent_id: str) -> Purchase | None:
        """Get a purchase by its payment intent ID."""
        ...

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
        """Update fields of an existing purchase.

        Moving to completed also stamps completed_at.

        Returns:
            Updated purchase, or None if no purchase has that ID
        """
        ...


@dataclass
class Repositories:
    """Repositories sharing one unit of work."""

    catalog: CatalogRepository
    purchases: PurchaseRepository


class RepositoryProvider(Protocol):
    """Opens repository units of work (per request or per background task)."""

    def session(self) -> AbstractAsyncContextManager[Repositories]:
        """Open a unit of work."""
        ...
