"""Outline, section and generation-progress models."""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Optional, Dict, Any


class SectionType(str, Enum):
    """Role of a section within a piece of content."""
    INTRODUCTION = "introduction"
    BODY = "body"
    CONCLUSION = "conclusion"
    FAQ = "faq"
    CASE_STUDY = "case_study"


class GenerationStatus(str, Enum):
    """State of a section in the generation state machine."""
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class SearchMetrics:
    """Search Console metrics for a keyword, page or day."""
    clicks: float = 0
    impressions: float = 0
    ctr: float = 0.0
    position: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["SearchMetrics"]:
        if not data:
            return None
        return cls(
            clicks=data.get("clicks", 0) or 0,
            impressions=data.get("impressions", 0) or 0,
            ctr=data.get("ctr", 0.0) or 0.0,
            position=data.get("position", 0.0) or 0.0,
        )


@dataclass
class SectionScores:
    """The five quality sub-scores of a generated section (0-100 each)."""
    uniqueness: float
    contextual: float
    coherence: float
    thematic: float
    narrative_flow: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class OutlineSection:
    """One titled unit of an outline, eventually holding generated prose."""
    id: str
    title: str
    keywords: List[str] = field(default_factory=list)
    estimated_word_count: int = 300
    section_type: SectionType = SectionType.BODY
    key_points: List[str] = field(default_factory=list)
    related_questions: List[str] = field(default_factory=list)
    search_metrics: Optional[SearchMetrics] = None
    content: str = ""
    optimization_score: int = 50

    # Quality sub-scores, present only after generation
    uniqueness_score: Optional[float] = None
    contextual_score: Optional[float] = None
    coherence_score: Optional[float] = None
    thematic_score: Optional[float] = None
    narrative_flow_score: Optional[float] = None

    @property
    def has_scores(self) -> bool:
        return self.uniqueness_score is not None

    def apply_scores(self, scores: SectionScores) -> None:
        self.uniqueness_score = scores.uniqueness
        self.contextual_score = scores.contextual
        self.coherence_score = scores.coherence
        self.thematic_score = scores.thematic
        self.narrative_flow_score = scores.narrative_flow

    def clear_scores(self) -> None:
        self.uniqueness_score = None
        self.contextual_score = None
        self.coherence_score = None
        self.thematic_score = None
        self.narrative_flow_score = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "keywords": list(self.keywords),
            "estimatedWordCount": self.estimated_word_count,
            "sectionType": self.section_type.value,
            "keyPoints": list(self.key_points),
            "relatedQuestions": list(self.related_questions),
            "searchMetrics": asdict(self.search_metrics) if self.search_metrics else None,
            "content": self.content,
            "optimizationScore": self.optimization_score,
            "uniquenessScore": self.uniqueness_score,
            "contextualScore": self.contextual_score,
            "coherenceScore": self.coherence_score,
            "thematicScore": self.thematic_score,
            "narrativeFlowScore": self.narrative_flow_score,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutlineSection":
        """Build a section from the JSON shape produced by ``to_dict``."""
        section_type = data.get("sectionType") or data.get("section_type") or "body"
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "Untitled Section",
            keywords=list(data.get("keywords") or []),
            estimated_word_count=int(
                data.get("estimatedWordCount") or data.get("estimated_word_count") or 300
            ),
            section_type=SectionType(section_type),
            key_points=list(data.get("keyPoints") or data.get("key_points") or []),
            related_questions=list(
                data.get("relatedQuestions") or data.get("related_questions") or []
            ),
            search_metrics=SearchMetrics.from_dict(
                data.get("searchMetrics") or data.get("search_metrics")
            ),
            content=data.get("content") or "",
            optimization_score=int(
                data.get("optimizationScore") or data.get("optimization_score") or 50
            ),
            uniqueness_score=data.get("uniquenessScore"),
            contextual_score=data.get("contextualScore"),
            coherence_score=data.get("coherenceScore"),
            thematic_score=data.get("thematicScore"),
            narrative_flow_score=data.get("narrativeFlowScore"),
        )


@dataclass
class GenerationProgress:
    """Transient per-section progress shown while generating."""
    status: GenerationStatus = GenerationStatus.PENDING
    message: str = ""
    scores: Optional[SectionScores] = None


@dataclass
class GlobalContext:
    """Outline-wide context passed along with every section request."""
    title: str
    outline: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class SectionRequest:
    """Everything the AI provider receives to write one section."""
    section_id: str
    title: str
    keywords: List[str]
    section_type: SectionType
    previous_content: Optional[str] = None
    next_content: Optional[str] = None
    global_context: Optional[GlobalContext] = None
    estimated_word_count: Optional[int] = None


@dataclass
class GenerationSummary:
    """Aggregate result of a generate-all run."""
    completed: int
    attempted: int
    cancelled: bool = False

    @property
    def all_succeeded(self) -> bool:
        return self.attempted > 0 and self.completed == self.attempted

    @property
    def message(self) -> str:
        if self.attempted and self.completed == self.attempted:
            return "All sections generated successfully"
        if self.completed > 0:
            return f"Generated {self.completed} out of {self.attempted} sections"
        return "Failed to generate any sections"
