"""Document generation: fetch data, draft missing text, assemble and cache PDFs."""

import asyncio
import logging
import re
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from backend.app.config import Settings
from backend.app.db.repositories import CatalogRepository
from backend.app.errors import NotFoundError
from backend.app.llm.client import ContentDrafter, get_content_drafter
from backend.app.llm.prompts import PROMPT_VERSION
from backend.app.models.catalog import Day, Destination, Itinerary, ItineraryBundle
from backend.app.models.drafting import DraftedItinerary, GuideKind, GuideRequest
from backend.app.pdf import guide, premium
from backend.app.pdf.cache import (
    GUIDE_CATEGORY,
    PREMIUM_CATEGORY,
    SNOWBIRD_CATEGORY,
    DocumentCache,
)
from backend.app.pdf.theme import DocumentOptions
from backend.app.utils.logging import StructuredDocumentLogger
from backend.app.utils.metrics import PrometheusDocumentMetrics

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], Awaitable[None]]

# Progress checkpoints reported while a purchase is fulfilled
PROGRESS_DATA_LOADED = 50
PROGRESS_DRAFTED = 70
PROGRESS_ASSEMBLED = 90


@dataclass
class GeneratedDocument:
    """A served PDF and where it is cached."""

    filename: str
    content: bytes
    cache_hit: bool
    path: Path
    public_url: str


def download_filename(name: str, suffix: str) -> str:
    """Attachment name such as ``Costa_Rica_Premium_Itinerary.pdf``."""
    base = re.sub(r"[^A-Za-z0-9]+", "_", name).strip("_") or "Destination"
    return f"{base}_{suffix}.pdf"


async def load_bundle(catalog: CatalogRepository, destination_id: int) -> ItineraryBundle:
    """Collect everything the premium itinerary is built from.

    A destination without an itinerary gets a default 7-day one with no
    stored days, so every day is drafted.

    Raises:
        NotFoundError: If the destination does not exist
    """
    destination = await _require_destination(catalog, destination_id)
    itinerary = await catalog.get_itinerary(destination_id)
    days: list[Day] = []
    if itinerary is None:
        itinerary = Itinerary(
            id=0,
            destination_id=destination_id,
            title=f"{destination.name} Premium Itinerary",
            description=destination.description,
        )
    else:
        days = await catalog.list_days(itinerary.id)
    experiences = await catalog.list_experiences(destination_id)
    return ItineraryBundle(
        destination=destination, itinerary=itinerary, days=days, experiences=experiences
    )


def merge_drafted_days(
    bundle: ItineraryBundle, day_numbers: list[int], drafted: DraftedItinerary
) -> ItineraryBundle:
    """Fill the given day numbers with drafted content.

    Drafted days are numbered 1..N in request order; stored titles are kept.
    """
    by_number = {day.day_number: day for day in bundle.days}
    for number, drafted_day in zip(day_numbers, drafted.days):
        existing = by_number.get(number)
        content = drafted_day.as_content()
        if existing is not None:
            by_number[number] = existing.model_copy(
                update={"content": content, "title": existing.title or drafted_day.title}
            )
        else:
            by_number[number] = Day(
                id=0,
                itinerary_id=bundle.itinerary.id,
                day_number=number,
                title=drafted_day.title,
                content=content,
            )
    days = sorted(by_number.values(), key=lambda day: day.day_number)
    return bundle.model_copy(update={"days": days})


async def _require_destination(catalog: CatalogRepository, destination_id: int) -> Destination:
    destination = await catalog.get_destination(destination_id)
    if destination is None:
        raise NotFoundError(f"Destination {destination_id} not found")
    return destination


async def _report(progress: ProgressCallback | None, value: int) -> None:
    if progress is not None:
        await progress(value)


class DocumentGenerator:
    """Serves premium itineraries and guides, drafting and rendering on cache miss."""

    def __init__(
        self,
        catalog: CatalogRepository,
        cache: DocumentCache,
        options: DocumentOptions,
        drafter_factory: Callable[[], ContentDrafter] = get_content_drafter,
        metrics: PrometheusDocumentMetrics | None = None,
        doc_logger: StructuredDocumentLogger | None = None,
    ):
        """Initialize generator.

        Args:
            catalog: Catalog repository for destination data
            cache: PDF disk cache
            options: Branding and reproducibility switches
            drafter_factory: Builds the drafter; only called on a cache miss
            metrics: Optional metrics sink
            doc_logger: Optional structured logger
        """
        self.catalog = catalog
        self.cache = cache
        self.options = options
        self.drafter_factory = drafter_factory
        self.metrics = metrics or PrometheusDocumentMetrics()
        self.doc_logger = doc_logger or StructuredDocumentLogger()

    async def premium_itinerary(
        self,
        destination_id: int,
        *,
        force_refresh: bool = False,
        progress: ProgressCallback | None = None,
    ) -> GeneratedDocument:
        """Get the premium itinerary PDF for a destination.

        Args:
            destination_id: Destination to render
            force_refresh: Skip the cache lookup and regenerate
            progress: Awaited with 50/70/90 as generation advances

        Returns:
            GeneratedDocument with the PDF bytes

        Raises:
            NotFoundError: If the destination does not exist
            DraftingError: If blank days could not be drafted
        """
        kind = "premium"
        started = time.perf_counter()
        digest: str | None = None
        try:
            bundle = await load_bundle(self.catalog, destination_id)
            name = bundle.destination.name
            digest = bundle.content_digest(kind, premium.LAYOUT_VERSION, PROMPT_VERSION)
            await _report(progress, PROGRESS_DATA_LOADED)

            cached = None if force_refresh else self.cache.load(PREMIUM_CATEGORY, name, digest)
            if cached is not None:
                document = self._hit(PREMIUM_CATEGORY, name, "Premium_Itinerary", cached)
            else:
                missing = bundle.days_needing_draft()
                if missing:
                    logger.info(f"Drafting {len(missing)} day(s) for {name}")
                    drafted = await self.drafter_factory().draft_itinerary(bundle, missing)
                    bundle = merge_drafted_days(bundle, missing, drafted)
                await _report(progress, PROGRESS_DRAFTED)

                content = await asyncio.to_thread(
                    premium.render_premium_itinerary, bundle, self.options
                )
                document = self._store(PREMIUM_CATEGORY, name, "Premium_Itinerary", digest, content)
            await _report(progress, PROGRESS_ASSEMBLED)
        except Exception as e:
            self._record(kind, destination_id, started, "error", digest=digest, error=e)
            raise

        await self.catalog.increment_download_count(destination_id)
        self._record(kind, destination_id, started, "success", document.cache_hit, digest)
        return document

    async def travel_guide(
        self, destination_id: int, *, force_refresh: bool = False
    ) -> GeneratedDocument:
        """Get the standalone premium travel guide for a destination."""
        return await self._guide(GuideKind.standalone, destination_id, force_refresh)

    async def snowbird_guide(
        self, destination_id: int, *, force_refresh: bool = False
    ) -> GeneratedDocument:
        """Get the snowbird guide for a destination.

        Raises:
            NotFoundError: If the destination is unknown or has no snowbird profile
        """
        return await self._guide(GuideKind.snowbird, destination_id, force_refresh)

    async def _guide(
        self, guide_kind: GuideKind, destination_id: int, force_refresh: bool
    ) -> GeneratedDocument:
        kind = guide_kind.value
        if guide_kind == GuideKind.snowbird:
            category, suffix = SNOWBIRD_CATEGORY, "Snowbird_Guide"
            subtitle, tagline = "SNOWBIRD ESCAPE GUIDE", "Your winter away from the Canadian cold"
        else:
            category, suffix = GUIDE_CATEGORY, "Travel_Guide"
            subtitle, tagline = "PREMIUM TRAVEL GUIDE", None

        started = time.perf_counter()
        digest: str | None = None
        try:
            destination = await _require_destination(self.catalog, destination_id)
            if guide_kind == GuideKind.snowbird and destination.snowbird is None:
                raise NotFoundError(f"No snowbird guide available for {destination.name}")

            itinerary = await self.catalog.get_itinerary(destination_id)
            duration = itinerary.duration_days if itinerary else 7
            digest = destination.content_digest(
                kind, str(duration), guide.LAYOUT_VERSION, PROMPT_VERSION
            )
            name = destination.name

            cached = None if force_refresh else self.cache.load(category, name, digest)
            if cached is not None:
                document = self._hit(category, name, suffix, cached)
            else:
                request = GuideRequest(
                    kind=guide_kind, destination=destination, duration_days=duration
                )
                text = await self.drafter_factory().draft_guide(request)
                content = await asyncio.to_thread(
                    guide.render_guide,
                    name,
                    text,
                    self.options,
                    subtitle=subtitle,
                    tagline=tagline,
                )
                document = self._store(category, name, suffix, digest, content)
        except Exception as e:
            self._record(kind, destination_id, started, "error", digest=digest, error=e)
            raise

        await self.catalog.increment_download_count(destination_id)
        self._record(kind, destination_id, started, "success", document.cache_hit, digest)
        return document

    def _hit(self, category: str, name: str, suffix: str, content: bytes) -> GeneratedDocument:
        self.metrics.inc_cache_hit(category)
        return GeneratedDocument(
            filename=download_filename(name, suffix),
            content=content,
            cache_hit=True,
            path=self.cache.path_for(category, name),
            public_url=self.cache.public_url(category, name),
        )

    def _store(
        self, category: str, name: str, suffix: str, digest: str, content: bytes
    ) -> GeneratedDocument:
        path = self.cache.store(category, name, digest, content)
        return GeneratedDocument(
            filename=download_filename(name, suffix),
            content=content,
            cache_hit=False,
            path=path,
            public_url=self.cache.public_url(category, name),
        )

    def _record(
        self,
        kind: str,
        destination_id: int,
        started: float,
        outcome: str,
        cache_hit: bool = False,
        digest: str | None = None,
        error: Exception | None = None,
    ) -> None:
        latency_ms = (time.perf_counter() - started) * 1000
        self.metrics.record_latency(kind, outcome, latency_ms)
        self.doc_logger.log_generation(
            kind=kind,
            destination_id=destination_id,
            outcome=outcome,
            latency_ms=latency_ms,
            cache_hit=cache_hit,
            digest=digest,
            error_reason=type(error).__name__ if error else None,
        )


def build_document_generator(catalog: CatalogRepository, settings: Settings) -> DocumentGenerator:
    """Wire a generator to the configured cache directory, branding and drafter."""
    return DocumentGenerator(
        catalog=catalog,
        cache=DocumentCache(settings.downloads_dir),
        options=DocumentOptions.from_settings(settings),
        drafter_factory=lambda: get_content_drafter(settings),
    )
