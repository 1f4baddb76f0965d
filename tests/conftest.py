"""Shared pytest fixtures for all test suites."""

import os
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from backend.app.api.deps import get_repository_provider
from backend.app.config import Settings, get_settings
from backend.app.db.inmemory import InMemoryCatalogRepository, InMemoryRepositoryProvider
from backend.app.db.models import Base
from backend.app.main import app
from backend.app.models.catalog import (
    Day,
    Destination,
    Experience,
    Itinerary,
    ItineraryBundle,
    SnowbirdProfile,
)


@pytest_asyncio.fixture
async def postgres_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for PostgreSQL integration tests.

    Requires DATABASE_URL to be set to a real PostgreSQL connection string.
    Tests using this fixture should be marked with @pytest.mark.postgres.

    Usage:
        @pytest.mark.postgres
        async def test_something(postgres_engine):
            async with AsyncSession(postgres_engine) as session:
                # ... test code
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set - skipping postgres test")

    # Ensure it's a postgres URL
    if not database_url.startswith(("postgresql://", "postgresql+asyncpg://")):
        pytest.skip(f"DATABASE_URL is not PostgreSQL: {database_url}")

    # Convert to async driver if needed
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    engine = create_async_engine(
        database_url,
        poolclass=NullPool,
        echo=False,
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup: drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def postgres_session(postgres_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for PostgreSQL integration tests.

    Usage:
        @pytest.mark.postgres
        async def test_something(postgres_session):
            result = await postgres_session.execute(...)
    """
    async with AsyncSession(postgres_engine) as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the schema created.

    StaticPool keeps one connection so every session sees the same database.
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def lisbon() -> Destination:
    """Destination with a snowbird profile."""
    return Destination(
        id=1,
        name="Lisbon",
        country="Portugal",
        region="Europe",
        description="Hilly coastal capital with tiled facades and fado bars.",
        best_time_to_visit="March to May",
        language="Portuguese",
        currency="EUR",
        climate="Mediterranean",
        local_tips="Wear shoes with grip on the polished cobblestones.",
        culture="Fado music and azulejo tiles.",
        cuisine="Pastéis de nata and grilled sardines.",
        snowbird=SnowbirdProfile(
            avg_winter_temp="15°C",
            cost_comparison="About 30% cheaper than Florida",
            healthcare_access="Private clinics with English-speaking staff",
            visa_requirements="90 days visa-free for Canadians",
        ),
    )


@pytest.fixture
def lisbon_bundle(lisbon: Destination) -> ItineraryBundle:
    """Three-day itinerary where only day 1 has written content."""
    itinerary = Itinerary(
        id=10, destination_id=lisbon.id, title="Lisbon in Three Days", duration_days=3
    )
    return ItineraryBundle(
        destination=lisbon,
        itinerary=itinerary,
        days=[
            Day(
                id=100,
                itinerary_id=10,
                day_number=1,
                title="Alfama and the Castle",
                content=(
                    "Morning: Climb to São Jorge Castle.\n\n"
                    "Afternoon: Lunch in Alfama.\nCost: $25\n\n"
                    "Evening: Fado dinner."
                ),
            ),
            Day(id=101, itinerary_id=10, day_number=2, title="Belém", content="  "),
        ],
        experiences=[
            Experience(
                id=1000,
                destination_id=lisbon.id,
                title="Tram 28 Ride",
                location="Martim Moniz",
                description="Rattle through the old town on a vintage tram.",
            ),
            Experience(
                id=1001,
                destination_id=lisbon.id,
                title="Sintra Day Trip",
                kind="excursion",
                description="Palaces in the hills.",
                seasonal_tip="Go on a weekday in winter.",
            ),
        ],
    )


@pytest.fixture
def catalog_provider(lisbon_bundle: ItineraryBundle) -> InMemoryRepositoryProvider:
    """In-memory repositories seeded with the Lisbon bundle."""
    catalog = InMemoryCatalogRepository()
    catalog.add_destination(lisbon_bundle.destination)
    catalog.add_itinerary(lisbon_bundle.itinerary, lisbon_bundle.days)
    for experience in lisbon_bundle.experiences:
        catalog.add_experience(experience)
    return InMemoryRepositoryProvider(catalog=catalog)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with stub drafting, temp storage and test payment keys."""
    return Settings(
        environment="development",
        database_url=None,
        openai_api_key=None,
        llm_stub_mode=True,
        stripe_secret_key=SecretStr("sk_test_123"),
        stripe_webhook_secret=SecretStr("whsec_test"),
        sendgrid_api_key=None,
        downloads_dir=tmp_path / "downloads",
        metrics_dir=tmp_path / "web-vitals",
        pdf_invariant=True,
    )


@pytest.fixture
def api_client(
    catalog_provider: InMemoryRepositoryProvider, test_settings: Settings
) -> Generator[TestClient, None, None]:
    """Test client wired to in-memory repositories and test settings."""
    app.dependency_overrides[get_repository_provider] = lambda: catalog_provider
    app.dependency_overrides[get_settings] = lambda: test_settings

    yield TestClient(app)

    app.dependency_overrides.clear()
