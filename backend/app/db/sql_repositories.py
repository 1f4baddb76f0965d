"""SQL implementations of repository interfaces."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from backend.app.db import models as orm
from backend.app.db.repositories import Repositories
from backend.app.models.catalog import Day, Destination, Experience, Itinerary
from backend.app.models.purchase import NewPurchase, Purchase, PurchaseStatus


class SqlCatalogRepository:
    """SQL implementation of CatalogRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_destinations(self) -> list[Destination]:
        """List all destinations ordered by name."""
        result = await self._session.execute(
            select(orm.Destination).order_by(orm.Destination.name)
        )
        return [Destination.model_validate(row) for row in result.scalars()]

    async def get_destination(self, destination_id: int) -> Destination | None:
        """Get a destination by ID."""
        row = await self._session.get(orm.Destination, destination_id)
        return Destination.model_validate(row) if row is not None else None

    async def get_itinerary(self, destination_id: int) -> Itinerary | None:
        """Get the itinerary belonging to a destination."""
        result = await self._session.execute(
            select(orm.Itinerary).where(orm.Itinerary.destination_id == destination_id)
        )
        row = result.scalar_one_or_none()
        return Itinerary.model_validate(row) if row is not None else None

    async def list_days(self, itinerary_id: int) -> list[Day]:
        """List itinerary days ordered by day number."""
        result = await self._session.execute(
            select(orm.Day)
            .where(orm.Day.itinerary_id == itinerary_id)
            .order_by(orm.Day.day_number)
        )
        return [Day.model_validate(row) for row in result.scalars()]

    async def list_experiences(self, destination_id: int) -> list[Experience]:
        """List a destination's experiences in insertion order."""
        result = await self._session.execute(
            select(orm.Experience)
            .where(orm.Experience.destination_id == destination_id)
            .order_by(orm.Experience.id)
        )
        return [Experience.model_validate(row) for row in result.scalars()]

    async def increment_download_count(self, destination_id: int) -> None:
        """Record one more served document for a destination."""
        # Single UPDATE so concurrent downloads never lose an increment
        await self._session.execute(
            update(orm.Destination)
            .where(orm.Destination.id == destination_id)
            .values(download_count=orm.Destination.download_count + 1)
        )
        await self._session.commit()


class SqlPurchaseRepository:
    """SQL implementation of PurchaseRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, purchase: NewPurchase) -> Purchase:
        """Insert a purchase."""
        data = purchase.model_dump()
        data["status"] = purchase.status.value
        row = orm.Purchase(**data)
        self._session.add(row)
        await self._session.commit()
        return Purchase.model_validate(row)

    async def get_by_payment_intent(self, payment_intent_id: str) -> Purchase | None:
        """Get a purchase by its payment intent ID."""
        row = await self._get_row(payment_intent_id)
        return Purchase.model_validate(row) if row is not None else None

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
        row = await self._get_row(payment_intent_id)
        if row is None:
            return None

        if status is not None:
            row.status = status.value
            if status == PurchaseStatus.completed:
                row.completed_at = datetime.now(timezone.utc)
        if progress is not None:
            row.progress = progress
        if pdf_url is not None:
            row.pdf_url = pdf_url
        if job_id is not None:
            row.job_id = job_id
        if email_sent is not None:
            row.email_sent = email_sent
        if error_message is not None:
            row.error_message = error_message
        row.updated_at = datetime.now(timezone.utc)

        await self._session.commit()
        return Purchase.model_validate(row)

    async def _get_row(self, payment_intent_id: str) -> orm.Purchase | None:
        result = await self._session.execute(
            select(orm.Purchase).where(orm.Purchase.payment_intent_id == payment_intent_id)
        )
        return result.scalar_one_or_none()


class SqlRepositoryProvider:
    """Opens one AsyncSession per unit of work."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Repositories]:
        async with AsyncSession(self._engine, expire_on_commit=False) as session:
            yield Repositories(
                catalog=SqlCatalogRepository(session),
                purchases=SqlPurchaseRepository(session),
            )
