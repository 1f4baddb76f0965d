"""LLM drafting client with OpenAI integration.

Security: Reads API key from settings (environment) only, never hardcoded.

Drafting is never retried: any failure (missing credential, network error,
rate limit, empty or invalid output) raises DraftingError for the HTTP layer
to turn into a 500. A deterministic stub is available for tests and local
development via LLM_STUB_MODE.
"""

import logging
from typing import Any, Protocol

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from backend.app.config import Settings, get_settings
from backend.app.errors import DraftingError
from backend.app.llm.prompts import (
    GUIDE_SYSTEM_PROMPT,
    ITINERARY_SYSTEM_PROMPT,
    build_guide_prompt,
    build_itinerary_prompt,
)
from backend.app.models.catalog import ItineraryBundle
from backend.app.models.drafting import DraftedDay, DraftedItinerary, GuideKind, GuideRequest
from backend.app.utils.metrics import drafting_failures_total

logger = logging.getLogger(__name__)

# Drafted guides longer than this are cut before layout
MAX_GUIDE_CHARS = 40000


class ContentDrafter(Protocol):
    """Protocol for drafting implementations."""

    async def draft_itinerary(
        self, bundle: ItineraryBundle, day_numbers: list[int]
    ) -> DraftedItinerary:
        """Draft structured day plans.

        Args:
            bundle: Catalog data for the destination
            day_numbers: Itinerary days that need content

        Returns:
            Validated plans, numbered 1..len(day_numbers)

        Raises:
            DraftingError: On any upstream or validation failure
        """
        ...

    async def draft_guide(self, request: GuideRequest) -> str:
        """Draft a free-text guide.

        Raises:
            DraftingError: On any upstream failure or empty output
        """
        ...


class DeterministicStubDrafter:
    """Deterministic stub drafter for testing (no API key required)."""

    async def draft_itinerary(
        self, bundle: ItineraryBundle, day_numbers: list[int]
    ) -> DraftedItinerary:
        """Generate deterministic day plans from catalog fields."""
        name = bundle.destination.name
        experiences = bundle.experiences
        days = []
        for index, number in enumerate(day_numbers):
            experience = experiences[(number - 1) % len(experiences)] if experiences else None
            highlight = experience.title if experience else f"the historic centre of {name}"
            days.append(
                DraftedDay(
                    day_number=index + 1,
                    title=f"Discovering {name}: Day {number}",
                    morning=f"Start early with a guided walk through {highlight}.",
                    afternoon=f"Enjoy a long lunch of local specialities, then explore {name}'s "
                    "markets and neighbourhoods at your own pace.",
                    evening="Watch the sunset from a viewpoint and dine at a family-run "
                    "restaurant.",
                    tip="Book popular sights a day ahead to skip the queues.",
                )
            )
        return DraftedItinerary(days=days)

    async def draft_guide(self, request: GuideRequest) -> str:
        """Generate a deterministic guide with the expected chapter layout."""
        name = request.destination.name
        if request.kind == GuideKind.snowbird:
            return (
                f"# Why {name} Over Florida\n"
                f"{name} offers mild winters and a lower cost of living.\n\n"
                "# Healthcare for Canadians\n"
                "Coverage: Buy travel medical insurance before leaving your province.\n\n"
                "# Month-by-Month Breakdown\n"
                "## Month 1\n- Settle in and join a local community group.\n"
            )
        return (
            f"# Introduction\nWelcome to {name}.\n\n"
            "# Day 1\n## MORNING\nVisit the old town.\nLocation: City centre\n"
            "## AFTERNOON\nTake a food tour.\nCost: $40\n"
            "## EVENING\nDinner by the water.\n\n"
            "# Practical Information\n- Carry some cash.\n"
        )


class OpenAIDrafter:
    """OpenAI-backed drafter."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        temperature: float = 0.7,
        max_tokens: int = 4000,
        client: AsyncOpenAI | None = None,
    ):
        """Initialize OpenAI drafter.

        Args:
            api_key: OpenAI API key (read from environment)
            model: Model name to use
            temperature: Sampling temperature
            max_tokens: Completion token cap
            client: Optional preconfigured client (for testing)
        """
        # SDK retries are disabled: failures surface immediately
        self.client = client or AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def _complete(self, system_prompt: str, user_prompt: str, *, json_mode: bool) -> str:
        kwargs: dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                **kwargs,
            )
        except OpenAIError as e:
            drafting_failures_total.labels(reason="upstream").inc()
            logger.error(f"OpenAI API call failed: {e}")
            raise DraftingError(f"Content drafting failed: {type(e).__name__}") from e

        content = response.choices[0].message.content or ""
        if not content.strip():
            drafting_failures_total.labels(reason="empty").inc()
            raise DraftingError("Content drafting returned an empty response")
        return content

    async def draft_itinerary(
        self, bundle: ItineraryBundle, day_numbers: list[int]
    ) -> DraftedItinerary:
        """Draft day plans as JSON and validate them."""
        raw = await self._complete(
            ITINERARY_SYSTEM_PROMPT,
            build_itinerary_prompt(bundle, day_numbers),
            json_mode=True,
        )
        try:
            drafted = DraftedItinerary.model_validate_json(raw)
        except ValidationError as e:
            drafting_failures_total.labels(reason="invalid").inc()
            logger.warning(f"Drafted itinerary failed validation: {e.error_count()} error(s)")
            raise DraftingError("Drafted itinerary did not match the expected structure") from e

        if len(drafted.days) != len(day_numbers):
            drafting_failures_total.labels(reason="invalid").inc()
            raise DraftingError(
                f"Drafted itinerary has {len(drafted.days)} day(s), expected {len(day_numbers)}"
            )
        return drafted

    async def draft_guide(self, request: GuideRequest) -> str:
        """Draft a free-text guide."""
        text = await self._complete(
            GUIDE_SYSTEM_PROMPT, build_guide_prompt(request), json_mode=False
        )
        if len(text) > MAX_GUIDE_CHARS:
            logger.warning(
                f"Drafted guide unexpectedly large ({len(text)} chars), "
                f"truncating to {MAX_GUIDE_CHARS}"
            )
            text = text[:MAX_GUIDE_CHARS]
        return text


def get_content_drafter(settings: Settings | None = None) -> ContentDrafter:
    """Factory function to get the drafter for the current configuration.

    Returns:
        OpenAIDrafter if an API key is configured, DeterministicStubDrafter in stub mode

    Raises:
        DraftingError: If no API key is configured and stub mode is off
    """
    settings = settings or get_settings()
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI drafter")
        return OpenAIDrafter(
            api_key=api_key.get_secret_value(),
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        )
    if settings.llm_stub_mode:
        logger.warning("No OpenAI API key configured, using deterministic stub drafter")
        return DeterministicStubDrafter()

    drafting_failures_total.labels(reason="not_configured").inc()
    raise DraftingError("OpenAI API key is not configured")
