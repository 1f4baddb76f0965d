"""Dev seeding helper for the destination catalog."""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from backend.app.db.engine import create_schema, get_async_engine
from backend.app.db.models import Day, Destination, Experience, Itinerary

LISBON_DAYS = [
    (
        "Arrival and Alfama",
        "Morning: Check in and wander the lanes of Alfama.\n\n"
        "Afternoon: Location: Castelo de S. Jorge. Cost: EUR 15. Walk the castle walls.\n\n"
        "Evening: Dinner with live fado in a family-run tasca.",
    ),
    ("Belem", ""),
    ("Sintra day trip", ""),
]

LISBON_EXPERIENCES = [
    (
        "Fado night in Mouraria",
        "Mouraria",
        "music",
        "Intimate fado houses where the genre was born.",
        "Book ahead on weekends in summer.",
    ),
    (
        "Pasteis de Belem tasting",
        "Belem",
        "food",
        "The original custard tart bakery, open since 1837.",
        None,
    ),
]


async def seed_catalog(engine: AsyncEngine | None = None) -> bool:
    """Seed a sample destination with an itinerary and experiences.

    This function is idempotent - safe to run multiple times.

    Args:
        engine: Target engine (default: the configured database)

    Returns:
        True if rows were inserted, False if the catalog was already seeded
    """
    engine = engine or get_async_engine()
    await create_schema(engine)

    async with AsyncSession(engine) as session:
        result = await session.execute(select(Destination).where(Destination.name == "Lisbon"))
        if result.scalar_one_or_none():
            print("Catalog already seeded")
            return False

        lisbon = Destination(
            name="Lisbon",
            country="Portugal",
            region="Europe",
            description="Hilly coastal capital of tiled facades, trams and custard tarts.",
            best_time_to_visit="March to May, September to October",
            language="Portuguese",
            currency="Euro (EUR)",
            climate="Mediterranean with mild, wet winters",
            local_tips="Buy a Viva Viagem card for trams and the metro.",
            culture="Fado music, azulejo tiles and neighborhood festas.",
            cuisine="Bacalhau, grilled sardines and pasteis de nata.",
            snowbird={
                "avg_winter_temp": "15C / 59F",
                "cost_comparison": "Roughly 30% cheaper than coastal Florida",
                "healthcare_access": "Private clinics with English-speaking doctors",
                "visa_requirements": "Up to 90 days in the Schengen area",
                "canadian_expats": "Established community in Cascais and the Algarve",
                "cost_of_living": "A one-bedroom rental runs EUR 1,100-1,500 per month",
            },
        )
        session.add(lisbon)
        await session.flush()

        itinerary = Itinerary(
            destination_id=lisbon.id,
            title="Lisbon in Seven Days",
            duration_days=7,
            description="Neighborhoods, viewpoints and day trips along the Tagus.",
        )
        session.add(itinerary)
        await session.flush()

        for number, (title, content) in enumerate(LISBON_DAYS, start=1):
            session.add(
                Day(itinerary_id=itinerary.id, day_number=number, title=title, content=content)
            )
        for title, location, kind, description, tip in LISBON_EXPERIENCES:
            session.add(
                Experience(
                    destination_id=lisbon.id,
                    title=title,
                    location=location,
                    kind=kind,
                    description=description,
                    seasonal_tip=tip,
                )
            )

        await session.commit()
        print("✅ Catalog seeding complete")
        return True


if __name__ == "__main__":
    asyncio.run(seed_catalog())
