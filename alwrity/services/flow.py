"""Narrative flow and coherence heuristics between adjacent sections."""

from typing import Literal

from ..config import (
    FORWARD_TRANSITIONS,
    BACKWARD_TRANSITIONS,
    DEFAULT_SCORING,
    ScoringConfig,
)
from .similarity import extract_keywords

Direction = Literal["previous", "next"]


def _check_direction(direction: str) -> None:
    if direction not in ("previous", "next"):
        raise ValueError(f"direction must be 'previous' or 'next', got {direction!r}")


def check_transitional_phrases(
    text_a: str,
    text_b: str,
    direction: Direction,
    config: ScoringConfig = DEFAULT_SCORING
) -> float:
    """
    Score connective phrases that link two texts.

    Looking forward, ``text_b`` is scanned for forward connectives; looking
    back, ``text_a`` is scanned for backward references. Each distinct
    phrase present is worth ``transition_points``.
    """
    _check_direction(direction)
    if direction == "next":
        phrases, haystack = FORWARD_TRANSITIONS, text_b
    else:
        phrases, haystack = BACKWARD_TRANSITIONS, text_a

    haystack = (haystack or "").lower()
    count = sum(1 for phrase in phrases if phrase in haystack)
    return min(config.max_score, count * config.transition_points)


def check_logical_progression(
    text_a: str,
    text_b: str,
    direction: Direction,
    config: ScoringConfig = DEFAULT_SCORING
) -> float:
    """Share of source keywords that reappear in the target text (0-100)."""
    _check_direction(direction)
    keywords_a = extract_keywords(text_a)
    keywords_b = extract_keywords(text_b)

    if direction == "next":
        source, target = keywords_a, keywords_b
    else:
        source, target = keywords_b, keywords_a

    if not source:
        return 0.0
    target_set = set(target)
    referenced = [keyword for keyword in source if keyword in target_set]
    return min(config.max_score, len(referenced) / len(source) * 100)


def calculate_narrative_flow(
    text_a: str,
    text_b: str,
    direction: Direction,
    config: ScoringConfig = DEFAULT_SCORING
) -> float:
    """Weighted blend of transitional phrasing and keyword progression."""
    transition = check_transitional_phrases(text_a, text_b, direction, config)
    progression = check_logical_progression(text_a, text_b, direction, config)
    return (
        transition * config.flow_transition_weight
        + progression * config.flow_progression_weight
    )


def calculate_coherence(text_a: str, text_b: str) -> float:
    """
    Keyword overlap between two texts as a 0-100 score.

    Distinct keywords are compared, which keeps the score symmetric.
    """
    keywords_a = set(extract_keywords(text_a))
    keywords_b = set(extract_keywords(text_b))
    denominator = max(len(keywords_a), len(keywords_b))
    if denominator == 0:
        return 0.0
    return len(keywords_a & keywords_b) / denominator * 100
