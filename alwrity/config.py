"""Configuration management using environment variables."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = Field(
        default="sqlite:///data/alwrity.db",
        alias="DATABASE_URL"
    )

    # AI providers
    openai_api_key: Optional[str] = Field(
        default=None,
        alias="OPENAI_API_KEY"
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        alias="OPENAI_MODEL"
    )
    openai_outline_model: str = Field(
        default="gpt-4o-mini-2024-07-18",
        alias="OPENAI_OUTLINE_MODEL"
    )
    gemini_api_key: Optional[str] = Field(
        default=None,
        alias="GEMINI_API_KEY"
    )
    gemini_model: str = Field(
        default="gemini-1.5-flash",
        alias="GEMINI_MODEL"
    )
    default_ai_provider: str = Field(
        default="openai",
        alias="DEFAULT_AI_PROVIDER"
    )

    # Google Search Console
    gsc_access_token: Optional[str] = Field(
        default=None,
        alias="GSC_ACCESS_TOKEN"
    )
    gsc_site_url: Optional[str] = Field(
        default=None,
        alias="GSC_SITE_URL"
    )

    # Timing
    outline_cache_seconds: float = Field(
        default=15 * 60,
        alias="OUTLINE_CACHE_SECONDS"
    )
    generation_settle_seconds: float = Field(
        default=3.5,
        alias="GENERATION_SETTLE_SECONDS"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        alias="REQUEST_TIMEOUT_SECONDS"
    )
    outline_requests_per_minute: int = Field(
        default=5,
        alias="OUTLINE_REQUESTS_PER_MINUTE"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


@dataclass(frozen=True)
class ScoringConfig:
    """Tunable constants for the section quality heuristics."""

    # Points per transitional phrase found, capped at max_score
    transition_points: int = 20
    # Two themes match when their word-level Jaccard exceeds this
    theme_match_threshold: float = 0.7
    # Number of top n-grams kept per text
    max_themes: int = 10
    # Narrative flow = transition * w + progression * w
    flow_transition_weight: float = 0.6
    flow_progression_weight: float = 0.4
    # Contextual composite weights
    contextual_coherence_weight: float = 0.4
    contextual_thematic_weight: float = 0.4
    contextual_flow_weight: float = 0.2
    # Uniqueness penalty per unit of similarity
    uniqueness_penalty: float = 25.0
    max_score: float = 100.0


DEFAULT_SCORING = ScoringConfig()


# Minimum token length kept by keyword and theme extraction
MIN_KEYWORD_LENGTH = 3

KEYWORD_STOP_WORDS = frozenset([
    "and", "the", "this", "that", "with", "from", "have", "been", "were",
    "they", "their", "what", "when", "where", "which", "would", "could",
    "should", "about",
])

THEME_STOP_WORDS = frozenset([
    "and", "the", "this", "that", "with", "from", "have", "been", "were",
    "they", "their",
])

FORWARD_TRANSITIONS = [
    "therefore", "thus", "consequently", "as a result", "hence", "accordingly",
    "next", "then", "subsequently", "following this", "afterward", "later",
    "furthermore", "moreover", "in addition", "additionally", "also", "besides",
    "similarly", "likewise", "in the same way", "comparatively",
]

BACKWARD_TRANSITIONS = [
    "previously", "as mentioned earlier", "as discussed above", "referring back to",
    "in light of", "given the above", "with this in mind", "considering this",
    "building on this", "expanding on this",
]


# Outline shape requested from the AI provider
DEFAULT_OUTLINE_STRUCTURE = {
    "requireIntroduction": True,
    "requireConclusion": True,
    "minBodySections": 4,
    "maxBodySections": 7,
    "includeKeyPoints": True,
    "includeRelatedQuestions": True,
    "sectionTypes": ["introduction", "body", "case_study", "faq", "conclusion"],
}

# Reading speed used for time estimates
WORDS_PER_MINUTE = 200
