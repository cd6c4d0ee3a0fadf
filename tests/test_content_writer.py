"""Tests for the AI content writer."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from alwrity.exceptions import GenerationError
from alwrity.models.outline import GlobalContext, SectionRequest, SectionType
from alwrity.services.content_writer import (
    CONTEXT_CHARS,
    ContentPersonalizationPreferences,
    ContentWriter,
    build_section_prompt,
)
from alwrity.utils.usage import get_usage_tracker


def openai_client(content="OpenAI text", error=None):
    client = MagicMock()
    if error is not None:
        client.chat.completions.create = AsyncMock(side_effect=error)
    else:
        response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
        )
        client.chat.completions.create = AsyncMock(return_value=response)
    return client


def gemini_client(text="Gemini text"):
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=SimpleNamespace(text=text))
    return client


@pytest.fixture
def request_():
    return SectionRequest(
        section_id="body1",
        title="Apostille Fees",
        keywords=["apostille fees", "state fees"],
        section_type=SectionType.BODY,
        previous_content="Intro text.",
        global_context=GlobalContext(
            title="Apostille Guide",
            outline=[{"title": "Intro"}, {"title": "Apostille Fees"}],
        ),
        estimated_word_count=450,
    )


class TestPersonalization:
    """Test suite for ContentPersonalizationPreferences."""

    @pytest.mark.parametrize("complexity,label", [
        (None, "Balanced"),
        (10, "Simple"),
        (50, "Balanced"),
        (71, "Complex"),
    ])
    def test_complexity_label(self, complexity, label):
        assert ContentPersonalizationPreferences(content_complexity=complexity).complexity_label == label

    def test_prompt_defaults(self):
        prompt = ContentPersonalizationPreferences(key_terms=["notary"]).to_prompt()
        assert "- Tone: professional" in prompt
        assert "- Key Terms to Include: notary" in prompt


class TestBuildSectionPrompt:
    """Test suite for build_section_prompt."""

    def test_contains_section_details(self, request_):
        prompt = build_section_prompt(request_, estimated_word_count=450)

        assert "Title: Apostille Fees" in prompt
        assert "Keywords: apostille fees, state fees" in prompt
        assert "Type: body" in prompt
        assert "about 450 words" in prompt
        assert "Article outline: Intro | Apostille Fees" in prompt
        assert "The previous section ends with:\nIntro text." in prompt
        assert "The next section" not in prompt

    def test_long_neighbours_are_trimmed(self, request_):
        request_.previous_content = "a" * (CONTEXT_CHARS + 500) + "END"
        prompt = build_section_prompt(request_)
        assert "a" * (CONTEXT_CHARS - 3) + "END" in prompt
        assert "a" * (CONTEXT_CHARS + 1) not in prompt

    def test_personalization(self, request_):
        preferences = ContentPersonalizationPreferences(content_tone="casual")
        assert "- Tone: casual" in build_section_prompt(request_, preferences)


class TestContentWriter:
    """Test suite for ContentWriter."""

    @pytest.mark.asyncio
    async def test_openai_first(self, settings, request_):
        primary = openai_client()
        fallback = gemini_client()
        writer = ContentWriter(settings=settings, openai_client=primary, gemini_client=fallback)

        content = await writer.generate_section(request_)

        assert content == "OpenAI text"
        fallback.aio.models.generate_content.assert_not_called()
        kwargs = primary.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == settings.openai_model
        assert "about 450 words" in kwargs["messages"][1]["content"]
        assert get_usage_tracker().get_metrics()["openai"] == 1

    @pytest.mark.asyncio
    async def test_falls_back_to_gemini(self, settings):
        error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1"))
        writer = ContentWriter(
            settings=settings,
            openai_client=openai_client(error=error),
            gemini_client=gemini_client(),
        )

        assert await writer.complete("system", "prompt") == "Gemini text"
        assert get_usage_tracker().get_metrics()["gemini"] == 1

    @pytest.mark.asyncio
    async def test_gemini_as_default_provider(self, settings):
        primary = openai_client()
        writer = ContentWriter(provider="gemini", settings=settings,
                               openai_client=primary, gemini_client=gemini_client())

        assert await writer.complete("system", "prompt") == "Gemini text"
        primary.chat.completions.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_json_mode(self, settings):
        primary = openai_client(content='{"outline": []}')
        writer = ContentWriter(settings=settings, openai_client=primary)

        await writer.complete("system", "prompt", json_mode=True)

        kwargs = primary.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_no_providers_configured(self, settings):
        writer = ContentWriter(settings=settings)
        with pytest.raises(GenerationError) as exc_info:
            await writer.complete("system", "prompt")
        assert "OPENAI_API_KEY" in str(exc_info.value)
        assert "GEMINI_API_KEY" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_content_is_an_error(self, settings, request_):
        writer = ContentWriter(settings=settings, openai_client=openai_client(content="  "))
        with pytest.raises(GenerationError):
            await writer.generate_section(request_)

    def test_unknown_provider(self, settings):
        with pytest.raises(ValueError):
            ContentWriter(provider="claude", settings=settings)
