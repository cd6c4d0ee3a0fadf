"""Outline generation from titles, Search Console insights and SERP data."""

import copy
import json
from typing import Any, Dict, List, Optional, Sequence
import logging

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, ValidationError

from ..config import get_settings, Settings, DEFAULT_OUTLINE_STRUCTURE
from ..exceptions import (
    AlwrityError,
    GenerationError,
    OutlineGenerationError,
    RateLimitExceeded,
)
from ..models.outline import OutlineSection, SectionType
from ..utils.cache import TTLCache
from ..utils.rate_limiter import RateLimiter, get_rate_limiter
from ..utils.usage import get_usage_tracker, UsageMetric
from .content_writer import ContentWriter
from .outline_store import calculate_section_score, default_outline
from .search_console import SearchConsoleClient

logger = logging.getLogger(__name__)

OUTLINE_SYSTEM_PROMPT = (
    "You are an expert content strategist and SEO specialist. Create detailed blog "
    "outlines that are data-driven, comprehensive, and optimized for both search "
    "engines and user intent. Respond with a JSON object of the form "
    '{"outline": [{"title", "keywords", "wordCount", "keyPoints", "sectionType", '
    '"optimizationScore"}]}.'
)

RATE_LIMIT_TOKEN = "OUTLINE_GENERATOR_TOKEN"


class OutlineSectionSchema(BaseModel):
    """One section as returned by the AI provider (camelCase or snake_case)."""
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    keywords: List[str] = Field(default_factory=list)
    word_count: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("wordCount", "word_count")
    )
    key_points: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("keyPoints", "key_points")
    )
    section_type: Optional[SectionType] = Field(
        default=None, validation_alias=AliasChoices("sectionType", "section_type")
    )
    optimization_score: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("optimizationScore", "optimization_score")
    )


def outline_cache_key(title: str, query: Optional[str], gsc_insights: Sequence[Dict[str, Any]]) -> str:
    """Cache key for an outline request: title, query and serialized insights."""
    insights = json.dumps(list(gsc_insights), sort_keys=True, separators=(",", ":"))
    return f"{title}_{query or ''}_{insights}"


def build_outline_prompt(
    title: str,
    query: Optional[str] = None,
    gsc_insights: Sequence[Dict[str, Any]] = (),
    serp_data: Optional[Dict[str, Any]] = None,
    structure: Optional[Dict[str, Any]] = None
) -> str:
    """Build the data-driven outline prompt."""
    search_term = query or title
    prompt = (
        f'Create a comprehensive blog outline for: "{search_term}"\n\n'
        "Consider the following data-driven insights to structure the content:"
    )

    if gsc_insights:
        prompt += "\n\nContent Opportunities and Gaps:"
        for insight in gsc_insights:
            prompt += f"\n- {insight.get('title', '')} for keyword \"{insight.get('keyword', '')}\""
            metrics = insight.get("metrics")
            if metrics:
                prompt += (
                    f" ({metrics.get('impressions', 0)} impressions, "
                    f"position {metrics.get('position', 0)})"
                )

    if serp_data:
        questions = serp_data.get("related_questions") or []
        if questions:
            prompt += "\n\nCommon User Questions to Address:"
            for item in questions[:5]:
                prompt += f"\n- {item.get('question', '')}"

        searches = serp_data.get("related_searches") or []
        if searches:
            prompt += "\n\nRelated Topics to Consider:"
            for item in searches[:5]:
                prompt += f"\n- {item.get('query', '')}"

        organic = serp_data.get("organic_results") or []
        if organic:
            prompt += "\n\nCompetitor Content Patterns:"
            for item in organic[:3]:
                prompt += f"\n- {item.get('title', '')} (Position {item.get('position', '')})"

    structure = structure or DEFAULT_OUTLINE_STRUCTURE
    prompt += (
        "\n\nProvide a structured blog outline with sections:\n"
        "- Title: Clear and engaging section heading\n"
        "- Keywords: List of target keywords to include\n"
        "- Word Count: Estimated length based on topic depth\n"
        "- Key Points: Main points to cover in bullet form\n"
        f"- Section Type: One of [{', '.join(structure.get('sectionTypes', []))}]\n"
        "- Optimization Score: 0-100 based on search intent match\n\n"
        f"Use between {structure.get('minBodySections')} and "
        f"{structure.get('maxBodySections')} body sections"
    )
    if structure.get("requireIntroduction"):
        prompt += ", start with an introduction"
    if structure.get("requireConclusion"):
        prompt += ", end with a conclusion"
    prompt += (
        ".\n\nEnsure the outline:\n"
        "1. Addresses identified content gaps\n"
        "2. Incorporates high-performing keywords\n"
        "3. Answers common user questions\n"
        "4. Follows a logical content hierarchy\n"
        "5. Maintains proper keyword distribution\n"
        "6. Includes data-backed recommendations for section depth"
    )
    return prompt


def parse_outline_response(raw: str) -> List[OutlineSection]:
    """Validate the provider's JSON and fill in section defaults."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise OutlineGenerationError(f"Invalid outline JSON: {e}") from e

    items = data.get("outline") if isinstance(data, dict) else data
    if not isinstance(items, list) or not items:
        raise OutlineGenerationError("Invalid outline format received")

    sections = []
    for index, item in enumerate(items):
        try:
            parsed = OutlineSectionSchema.model_validate(item)
        except ValidationError as e:
            raise OutlineGenerationError(f"Invalid outline section {index + 1}: {e}") from e

        sections.append(OutlineSection(
            id=f"section-{index + 1}",
            title=parsed.title or "Untitled Section",
            keywords=parsed.keywords,
            estimated_word_count=parsed.word_count or 300,
            section_type=parsed.section_type or SectionType.BODY,
            key_points=parsed.key_points or [
                f"Detailed information about {parsed.title}",
                "Best practices and examples",
                "Actionable insights and tips",
            ],
            optimization_score=parsed.optimization_score or 70,
        ))
    return sections


class OutlineBuilder:
    """
    Service for generating content outlines.

    Handles:
    - Prompt assembly from Search Console gaps and SERP data
    - Optional enrichment with matching Search Console queries
    - Rate limiting and a 15 minute result cache
    - A default outline when the provider fails
    """

    def __init__(
        self,
        writer: Optional[ContentWriter] = None,
        search_console: Optional[SearchConsoleClient] = None,
        cache: Optional[TTLCache] = None,
        rate_limiter: Optional[RateLimiter] = None,
        settings: Optional[Settings] = None
    ):
        self.settings = settings or get_settings()
        self.writer = writer or ContentWriter(settings=self.settings)
        self.search_console = search_console
        usage = get_usage_tracker()
        self.cache = cache or TTLCache(
            self.settings.outline_cache_seconds,
            on_hit=lambda: usage.increment(UsageMetric.CACHE_HIT),
            on_miss=lambda: usage.increment(UsageMetric.CACHE_MISS),
        )
        self.rate_limiter = rate_limiter or get_rate_limiter()
        self.last_error: Optional[str] = None

    async def _enrich_insights(self, search_term: str, gsc_insights: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if not self.search_console or not self.search_console.is_authenticated:
            return gsc_insights
        try:
            extra = await self.search_console.fetch_query_insights(search_term)
        except AlwrityError as e:
            logger.warning(f"Skipping Search Console enrichment: {e}")
            return gsc_insights

        known = {insight.get("keyword") for insight in gsc_insights}
        enriched = list(gsc_insights)
        for insight in extra:
            if insight["keyword"] not in known:
                enriched.append(insight)
                known.add(insight["keyword"])
        return enriched

    async def generate_outline(
        self,
        title: str,
        query: Optional[str] = None,
        gsc_insights: Optional[Sequence[Dict[str, Any]]] = None,
        serp_data: Optional[Dict[str, Any]] = None,
        structure: Optional[Dict[str, Any]] = None
    ) -> List[OutlineSection]:
        """
        Ask the AI provider for an outline.

        Raises RateLimitExceeded or OutlineGenerationError on failure.
        """
        try:
            self.rate_limiter.check(self.settings.outline_requests_per_minute, RATE_LIMIT_TOKEN)
        except RateLimitExceeded:
            get_usage_tracker().increment(UsageMetric.RATE_LIMIT)
            raise

        insights = await self._enrich_insights(query or title, list(gsc_insights or []))
        key = outline_cache_key(title, query, insights)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Outline cache hit for {title!r}")
            return copy.deepcopy(cached)

        prompt = build_outline_prompt(title, query, insights, serp_data, structure)
        try:
            raw = await self.writer.complete(
                OUTLINE_SYSTEM_PROMPT,
                prompt,
                model=self.settings.openai_outline_model,
                json_mode=True,
                temperature=0.7,
                max_tokens=2000,
            )
        except GenerationError as e:
            raise OutlineGenerationError(f"Failed to generate blog outline: {e}") from e

        sections = parse_outline_response(raw)
        for section in sections:
            section.optimization_score = calculate_section_score(section)

        self.cache.set(key, sections)
        logger.info(f"Generated outline with {len(sections)} sections for {title!r}")
        return copy.deepcopy(sections)

    async def build_outline(self, title: str, **kwargs) -> List[OutlineSection]:
        """Generate an outline, falling back to the default one on failure."""
        self.last_error = None
        try:
            return await self.generate_outline(title, **kwargs)
        except (OutlineGenerationError, RateLimitExceeded) as e:
            logger.error(f"Error generating outline: {e}")
            self.last_error = str(e)
            return default_outline(title)
