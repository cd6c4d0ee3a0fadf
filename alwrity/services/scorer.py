"""Section quality scoring service."""

from typing import List, Optional, Sequence
import logging

from ..config import DEFAULT_SCORING, ScoringConfig
from ..models.outline import SectionScores
from .similarity import jaccard_similarity
from .themes import calculate_thematic_connection
from .flow import calculate_coherence, calculate_narrative_flow

logger = logging.getLogger(__name__)


def _clamp(value: float, upper: float) -> float:
    return max(0.0, min(upper, value))


class SectionScorer:
    """
    Service for scoring generated section content against its outline.

    Produces five 0-100 sub-scores:
    - Uniqueness (distance-weighted similarity to every other section)
    - Contextual fit (composite against the previous and next sections)
    - Coherence, thematic connection and narrative flow with the neighbours
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or DEFAULT_SCORING

    def uniqueness_score(self, text: str, all_texts: Sequence[str], index: int) -> float:
        """
        Penalize similarity to the other sections, more for closer ones.

        The other non-empty texts are renumbered after skipping ``index``:
        entries at or past ``index`` in that filtered list are shifted
        forward by one before the distance is taken.
        """
        others: List[str] = [
            other for position, other in enumerate(all_texts)
            if position != index
        ]
        others = [other for other in others if other]

        score = self.config.max_score
        penalty = 0.0
        for i, other in enumerate(others):
            similarity = jaccard_similarity(text, other)
            position = i + 1 if i >= index else i
            distance = abs(position - index)
            weight = 1 / (distance + 1)
            penalty += similarity * self.config.uniqueness_penalty * weight

        return _clamp(score - penalty, self.config.max_score)

    def _neighbour_composite(self, text: str, neighbour: str, direction: str) -> float:
        cfg = self.config
        coherence = calculate_coherence(text, neighbour)
        thematic = calculate_thematic_connection(text, neighbour, cfg)
        flow = calculate_narrative_flow(text, neighbour, direction, cfg)
        return (
            coherence * cfg.contextual_coherence_weight
            + thematic * cfg.contextual_thematic_weight
            + flow * cfg.contextual_flow_weight
        )

    def contextual_score(
        self,
        text: str,
        previous_text: Optional[str] = None,
        next_text: Optional[str] = None
    ) -> float:
        """Average a perfect score with the composite fit of each neighbour."""
        score = self.config.max_score
        if previous_text:
            score = (score + self._neighbour_composite(text, previous_text, "previous")) / 2
        if next_text:
            score = (score + self._neighbour_composite(text, next_text, "next")) / 2
        return _clamp(score, self.config.max_score)

    def narrative_flow_score(
        self,
        text: str,
        previous_text: Optional[str] = None,
        next_text: Optional[str] = None
    ) -> float:
        """
        Backward flow (against an empty text for the first section), averaged
        with the forward flow when a next section exists.

        Backward connectives in ``text`` itself count even without a
        previous section.
        """
        score = calculate_narrative_flow(text, previous_text or "", "previous", self.config)
        if next_text:
            score += calculate_narrative_flow(text, next_text, "next", self.config)
            return score / 2
        return score

    def score_section(
        self,
        text: str,
        all_texts: Sequence[str],
        index: int,
        previous_text: Optional[str] = None,
        next_text: Optional[str] = None
    ) -> SectionScores:
        """Compute all five sub-scores for a freshly generated section."""
        # Coherence and thematic compare with the previous section, else the next
        reference = previous_text or next_text or ""

        scores = SectionScores(
            uniqueness=self.uniqueness_score(text, all_texts, index),
            contextual=self.contextual_score(text, previous_text, next_text),
            coherence=calculate_coherence(text, reference),
            thematic=calculate_thematic_connection(text, reference, self.config),
            narrative_flow=self.narrative_flow_score(text, previous_text, next_text),
        )

        logger.debug(
            f"Scored section {index}: uniqueness={scores.uniqueness:.1f}, "
            f"contextual={scores.contextual:.1f}, coherence={scores.coherence:.1f}, "
            f"thematic={scores.thematic:.1f}, flow={scores.narrative_flow:.1f}"
        )
        return scores
