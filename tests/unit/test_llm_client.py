"""Tests for the LLM drafting client.

All tests are deterministic and do not make real network calls.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import OpenAIError
from pydantic import SecretStr

from backend.app.config import Settings
from backend.app.errors import DraftingError
from backend.app.llm.client import (
    MAX_GUIDE_CHARS,
    DeterministicStubDrafter,
    OpenAIDrafter,
    get_content_drafter,
)
from backend.app.llm.prompts import build_itinerary_prompt
from backend.app.models.catalog import ItineraryBundle
from backend.app.models.drafting import GuideKind, GuideRequest


def mock_openai(content: str | None = None, error: Exception | None = None) -> AsyncMock:
    """Create a mocked AsyncOpenAI client returning ``content`` or raising ``error``."""
    mock_response = MagicMock()
    mock_response.choices = [MagicMock()]
    mock_response.choices[0].message.content = content

    mock_client = AsyncMock()
    if error is not None:
        mock_client.chat.completions.create = AsyncMock(side_effect=error)
    else:
        mock_client.chat.completions.create = AsyncMock(return_value=mock_response)
    return mock_client


def drafted_days_json(count: int) -> str:
    return json.dumps(
        {
            "days": [
                {
                    "day_number": n,
                    "title": f"Day {n}",
                    "morning": "Walk the old town.",
                    "afternoon": "Visit a museum.",
                    "evening": "Dinner by the river.",
                }
                for n in range(1, count + 1)
            ]
        }
    )


@pytest.mark.asyncio
async def test_stub_drafts_requested_days(lisbon_bundle: ItineraryBundle) -> None:
    """Test that the stub numbers drafted days 1..N and mentions the destination."""
    drafted = await DeterministicStubDrafter().draft_itinerary(lisbon_bundle, [2, 3])

    assert [day.day_number for day in drafted.days] == [1, 2]
    assert drafted.days[0].title == "Discovering Lisbon: Day 2"
    assert "Sintra Day Trip" in drafted.days[0].morning


@pytest.mark.asyncio
async def test_stub_is_deterministic(lisbon_bundle: ItineraryBundle) -> None:
    """Test that the stub produces the same output every time."""
    drafter = DeterministicStubDrafter()

    first = await drafter.draft_itinerary(lisbon_bundle, [1, 2, 3])
    second = await drafter.draft_itinerary(lisbon_bundle, [1, 2, 3])

    assert first == second


@pytest.mark.asyncio
async def test_stub_guides(lisbon_bundle: ItineraryBundle) -> None:
    """Test both guide flavours from the stub."""
    drafter = DeterministicStubDrafter()
    destination = lisbon_bundle.destination

    snowbird = await drafter.draft_guide(
        GuideRequest(kind=GuideKind.snowbird, destination=destination)
    )
    standalone = await drafter.draft_guide(
        GuideRequest(kind=GuideKind.standalone, destination=destination)
    )

    assert snowbird.startswith("# Why Lisbon Over Florida")
    assert "# Practical Information" in standalone


@pytest.mark.asyncio
async def test_openai_drafter_validates_itinerary(lisbon_bundle: ItineraryBundle) -> None:
    """Test that JSON output is parsed into drafted days."""
    client = mock_openai(drafted_days_json(2))
    drafter = OpenAIDrafter(api_key="sk-test", client=client)

    drafted = await drafter.draft_itinerary(lisbon_bundle, [2, 3])

    assert len(drafted.days) == 2
    assert drafted.days[1].as_content().startswith("Morning: Walk the old town.")
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["model"] == "gpt-4o"
    assert kwargs["messages"][1]["content"] == build_itinerary_prompt(lisbon_bundle, [2, 3])


@pytest.mark.asyncio
async def test_openai_drafter_rejects_wrong_day_count(lisbon_bundle: ItineraryBundle) -> None:
    """Test that a response with too few days fails."""
    drafter = OpenAIDrafter(api_key="sk-test", client=mock_openai(drafted_days_json(1)))

    with pytest.raises(DraftingError, match="expected 2"):
        await drafter.draft_itinerary(lisbon_bundle, [2, 3])


@pytest.mark.asyncio
async def test_openai_drafter_rejects_invalid_json(lisbon_bundle: ItineraryBundle) -> None:
    """Test that output not matching the structure fails."""
    drafter = OpenAIDrafter(api_key="sk-test", client=mock_openai('{"days": [{"title": "x"}]}'))

    with pytest.raises(DraftingError, match="expected structure"):
        await drafter.draft_itinerary(lisbon_bundle, [1])


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, "", "   \n"])
async def test_openai_drafter_rejects_empty_response(
    lisbon_bundle: ItineraryBundle, content: str | None
) -> None:
    """Test that an empty completion fails instead of rendering a blank guide."""
    drafter = OpenAIDrafter(api_key="sk-test", client=mock_openai(content))

    with pytest.raises(DraftingError, match="empty"):
        await drafter.draft_guide(
            GuideRequest(kind=GuideKind.standalone, destination=lisbon_bundle.destination)
        )


@pytest.mark.asyncio
async def test_openai_drafter_does_not_retry_upstream_errors(
    lisbon_bundle: ItineraryBundle,
) -> None:
    """Test that an SDK error surfaces as DraftingError after a single call."""
    client = mock_openai(error=OpenAIError("rate limited"))
    drafter = OpenAIDrafter(api_key="sk-test", client=client)

    with pytest.raises(DraftingError, match="OpenAIError"):
        await drafter.draft_itinerary(lisbon_bundle, [1])

    assert client.chat.completions.create.await_count == 1


@pytest.mark.asyncio
async def test_openai_drafter_truncates_oversized_guides(lisbon_bundle: ItineraryBundle) -> None:
    """Test the guide length cap."""
    drafter = OpenAIDrafter(api_key="sk-test", client=mock_openai("x" * (MAX_GUIDE_CHARS + 10)))

    text = await drafter.draft_guide(
        GuideRequest(kind=GuideKind.snowbird, destination=lisbon_bundle.destination)
    )

    assert len(text) == MAX_GUIDE_CHARS


def test_factory_returns_openai_with_key() -> None:
    """Test that a configured key selects the OpenAI drafter."""
    settings = Settings(openai_api_key=SecretStr("sk-test"), openai_model="gpt-4o-mini")

    drafter = get_content_drafter(settings)

    assert isinstance(drafter, OpenAIDrafter)
    assert drafter.model == "gpt-4o-mini"


def test_factory_returns_stub_in_stub_mode() -> None:
    """Test the stub fallback when no key is configured."""
    settings = Settings(openai_api_key=None, llm_stub_mode=True)

    assert isinstance(get_content_drafter(settings), DeterministicStubDrafter)


def test_factory_raises_without_key() -> None:
    """Test that a missing key without stub mode is an error."""
    settings = Settings(openai_api_key=SecretStr(""), llm_stub_mode=False)

    with pytest.raises(DraftingError, match="not configured"):
        get_content_drafter(settings)
