"""AI content writer with OpenAI primary and Gemini fallback providers."""

from dataclasses import dataclass, field
from typing import List, Optional
import logging

import openai
from openai import AsyncOpenAI
from google import genai
from google.genai import types as genai_types
from google.genai import errors as genai_errors
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..config import get_settings, Settings
from ..exceptions import GenerationError
from ..models.outline import SectionRequest
from ..utils.usage import get_usage_tracker, UsageMetric

logger = logging.getLogger(__name__)

SECTION_SYSTEM_PROMPT = (
    "You are a professional content writer skilled in creating engaging, "
    "SEO-optimized content."
)

# Neighbour text beyond this many characters is trimmed from the prompt
CONTEXT_CHARS = 2000

PROVIDERS = ("openai", "gemini")


@dataclass
class ContentPersonalizationPreferences:
    """How the user wants generated content to read."""
    content_tone: Optional[str] = None
    writing_style: Optional[str] = None
    target_audience: Optional[str] = None
    industry_terminology: Optional[str] = None
    content_complexity: Optional[int] = None  # 0-100
    key_terms: List[str] = field(default_factory=list)
    content_length: Optional[str] = None  # concise | balanced | comprehensive

    @property
    def complexity_label(self) -> str:
        if not self.content_complexity:
            return "Balanced"
        if self.content_complexity > 70:
            return "Complex"
        if self.content_complexity > 30:
            return "Balanced"
        return "Simple"

    def to_prompt(self) -> str:
        return (
            "Content Personalization:\n"
            f"- Tone: {self.content_tone or 'professional'}\n"
            f"- Writing Style: {self.writing_style or 'informative'}\n"
            f"- Target Audience: {self.target_audience or 'general'}\n"
            f"- Industry Terminology: {self.industry_terminology or 'general'}\n"
            f"- Content Complexity: {self.complexity_label}\n"
            f"- Content Length: {self.content_length or 'balanced'}\n"
            f"- Key Terms to Include: {', '.join(self.key_terms)}"
        )


def build_section_prompt(
    request: SectionRequest,
    preferences: Optional[ContentPersonalizationPreferences] = None,
    estimated_word_count: Optional[int] = None
) -> str:
    """Assemble the user prompt for one section."""
    lines = [
        "Generate engaging, informative content for a blog section with the following details:",
        f"Title: {request.title}",
        f"Keywords: {', '.join(request.keywords)}",
        f"Type: {request.section_type.value}",
    ]
    if estimated_word_count:
        lines.append(f"Target length: about {estimated_word_count} words")

    if request.global_context:
        lines.append(f"Article title: {request.global_context.title}")
        outline_titles = [item.get("title", "") for item in request.global_context.outline]
        if outline_titles:
            lines.append("Article outline: " + " | ".join(outline_titles))

    if request.previous_content:
        lines.append(
            "The previous section ends with:\n" + request.previous_content[-CONTEXT_CHARS:]
        )
        lines.append("Continue naturally from it without repeating it.")
    if request.next_content:
        lines.append(
            "The next section begins with:\n" + request.next_content[:CONTEXT_CHARS]
        )
        lines.append("Lead into it without covering the same ground.")

    if preferences:
        lines.append(preferences.to_prompt())

    lines.append("Generate the content now:")
    return "\n".join(lines)


class ContentWriter:
    """
    Service for calling the AI providers.

    OpenAI is tried first (unless Gemini is the configured default) and
    Gemini is used when it fails. Rate-limit errors from OpenAI are retried
    with exponential backoff before falling back.
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        settings: Optional[Settings] = None,
        openai_client: Optional[AsyncOpenAI] = None,
        gemini_client: Optional[genai.Client] = None
    ):
        self.settings = settings or get_settings()
        self.provider = provider or self.settings.default_ai_provider
        if self.provider not in PROVIDERS:
            raise ValueError(f"Unknown AI provider: {self.provider}")
        self._openai_client = openai_client
        self._gemini_client = gemini_client
        self.usage = get_usage_tracker()

    def _get_openai(self) -> Optional[AsyncOpenAI]:
        if self._openai_client is None and self.settings.openai_api_key:
            self._openai_client = AsyncOpenAI(api_key=self.settings.openai_api_key)
        return self._openai_client

    def _get_gemini(self) -> Optional[genai.Client]:
        if self._gemini_client is None and self.settings.gemini_api_key:
            self._gemini_client = genai.Client(api_key=self.settings.gemini_api_key)
        return self._gemini_client

    @retry(
        stop=stop_after_attempt(4),
        wait=wait_exponential(multiplier=2, min=2, max=8),
        retry=retry_if_exception_type(openai.RateLimitError),
        reraise=True,
    )
    async def _call_openai(
        self,
        client: AsyncOpenAI,
        system: str,
        prompt: str,
        model: str,
        json_mode: bool,
        temperature: float,
        max_tokens: int
    ) -> str:
        self.usage.increment(UsageMetric.OPENAI)
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = await client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
        content = response.choices[0].message.content if response.choices else ""
        return (content or "").strip()

    async def _call_gemini(
        self,
        client: genai.Client,
        system: str,
        prompt: str,
        json_mode: bool,
        temperature: float
    ) -> str:
        self.usage.increment(UsageMetric.GEMINI)
        config = genai_types.GenerateContentConfig(
            system_instruction=system,
            temperature=temperature,
            response_mime_type="application/json" if json_mode else None,
        )
        response = await client.aio.models.generate_content(
            model=self.settings.gemini_model,
            contents=prompt,
            config=config,
        )
        return (response.text or "").strip()

    async def complete(
        self,
        system: str,
        prompt: str,
        model: Optional[str] = None,
        json_mode: bool = False,
        temperature: float = 0.7,
        max_tokens: int = 1000
    ) -> str:
        """
        Run one prompt through the provider chain and return the text.

        Raises GenerationError when every available provider fails.
        """
        errors = []

        if self.provider == "openai":
            client = self._get_openai()
            if client is not None:
                try:
                    return await self._call_openai(
                        client, system, prompt, model or self.settings.openai_model,
                        json_mode, temperature, max_tokens,
                    )
                except openai.OpenAIError as e:
                    logger.warning(f"OpenAI generation failed, falling back to Gemini: {e}")
                    errors.append(f"openai: {e}")
            else:
                errors.append("openai: OPENAI_API_KEY is not set")

        gemini_client = self._get_gemini()
        if gemini_client is not None:
            try:
                return await self._call_gemini(gemini_client, system, prompt, json_mode, temperature)
            except genai_errors.APIError as e:
                logger.error(f"Gemini generation failed: {e}")
                errors.append(f"gemini: {e}")
        else:
            errors.append("gemini: GEMINI_API_KEY is not set")

        raise GenerationError("Content generation failed (" + "; ".join(errors) + ")")

    async def generate_section(
        self,
        request: SectionRequest,
        preferences: Optional[ContentPersonalizationPreferences] = None,
        estimated_word_count: Optional[int] = None
    ) -> str:
        """Write the prose for one outline section."""
        prompt = build_section_prompt(
            request, preferences, estimated_word_count or request.estimated_word_count
        )
        content = await self.complete(SECTION_SYSTEM_PROMPT, prompt)
        if not content:
            raise GenerationError(f"Empty content returned for section {request.title!r}")
        logger.info(f"Generated {len(content.split())} words for section {request.title!r}")
        return content
