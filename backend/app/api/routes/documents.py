"""PDF document endpoints - premium itineraries, travel guides and snowbird guides."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from backend.app.api.deps import get_document_generator
from backend.app.services.generation import DocumentGenerator, GeneratedDocument

router = APIRouter(tags=["documents"])


def pdf_response(document: GeneratedDocument) -> Response:
    """Serve a generated document as a PDF attachment."""
    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{document.filename}"',
            "X-Cache": "HIT" if document.cache_hit else "MISS",
        },
    )


@router.get("/itineraries/{destination_id}/pdf")
async def premium_itinerary_pdf(
    destination_id: int,
    generator: Annotated[DocumentGenerator, Depends(get_document_generator)],
    force_refresh: Annotated[bool, Query()] = False,
) -> Response:
    """Download the premium itinerary for a destination.

    Args:
        destination_id: Destination ID
        generator: Document generator
        force_refresh: Regenerate even if a cached copy is current

    Returns:
        application/pdf attachment named <Name>_Premium_Itinerary.pdf
    """
    document = await generator.premium_itinerary(destination_id, force_refresh=force_refresh)
    return pdf_response(document)


@router.get("/itineraries/{destination_id}/guide.pdf")
async def travel_guide_pdf(
    destination_id: int,
    generator: Annotated[DocumentGenerator, Depends(get_document_generator)],
    force_refresh: Annotated[bool, Query()] = False,
) -> Response:
    """Download the standalone premium travel guide for a destination."""
    document = await generator.travel_guide(destination_id, force_refresh=force_refresh)
    return pdf_response(document)


@router.get("/snowbird/{destination_id}/pdf")
async def snowbird_guide_pdf(
    destination_id: int,
    generator: Annotated[DocumentGenerator, Depends(get_document_generator)],
    force_refresh: Annotated[bool, Query()] = False,
) -> Response:
    """Download the snowbird guide for a destination."""
    document = await generator.snowbird_guide(destination_id, force_refresh=force_refresh)
    return pdf_response(document)
