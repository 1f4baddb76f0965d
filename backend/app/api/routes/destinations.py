"""Destination catalog endpoints - GET /destinations, GET /destinations/{id}."""

from typing import Annotated

from fastapi import APIRouter, Depends

from backend.app.api.deps import get_repositories
from backend.app.db.repositories import Repositories
from backend.app.errors import NotFoundError
from backend.app.models.catalog import Day, Destination, Experience, Itinerary

router = APIRouter(prefix="/destinations", tags=["destinations"])


class DestinationDetail(Destination):
    """Response for GET /destinations/{id}."""

    itinerary: Itinerary | None = None
    days: list[Day] = []
    experiences: list[Experience] = []


@router.get("", response_model=list[Destination])
async def list_destinations(
    repos: Annotated[Repositories, Depends(get_repositories)],
) -> list[Destination]:
    """List all destinations ordered by name."""
    return await repos.catalog.list_destinations()


@router.get("/{destination_id}", response_model=DestinationDetail)
async def get_destination(
    destination_id: int,
    repos: Annotated[Repositories, Depends(get_repositories)],
) -> DestinationDetail:
    """Get a destination with its itinerary, days and experiences.

    Raises:
        NotFoundError: If the destination does not exist
    """
    destination = await repos.catalog.get_destination(destination_id)
    if destination is None:
        raise NotFoundError(f"Destination {destination_id} not found")

    itinerary = await repos.catalog.get_itinerary(destination_id)
    days = await repos.catalog.list_days(itinerary.id) if itinerary else []
    experiences = await repos.catalog.list_experiences(destination_id)
    return DestinationDetail(
        **destination.model_dump(),
        itinerary=itinerary,
        days=days,
        experiences=experiences,
    )
