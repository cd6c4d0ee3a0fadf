"""N-gram theme extraction and thematic overlap between texts."""

from collections import Counter
from typing import List

from ..config import THEME_STOP_WORDS, MIN_KEYWORD_LENGTH, DEFAULT_SCORING, ScoringConfig


def _theme_words(text: str) -> List[str]:
    return [
        word for word in (text or "").lower().split()
        if len(word) > MIN_KEYWORD_LENGTH and word not in THEME_STOP_WORDS
    ]


def extract_themes(text: str, limit: int = DEFAULT_SCORING.max_themes) -> List[str]:
    """
    Return the most frequent bigrams and trigrams of a text.

    N-grams are built in scan order (bigram then trigram at each position),
    so equally frequent themes keep their first-seen order.
    """
    words = _theme_words(text)
    themes = []
    for i in range(len(words) - 1):
        themes.append(f"{words[i]} {words[i + 1]}")
        if i < len(words) - 2:
            themes.append(f"{words[i]} {words[i + 1]} {words[i + 2]}")

    counts = Counter(themes)
    # Counter preserves insertion order and sorted() is stable
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [theme for theme, _ in ranked[:limit]]


def theme_similarity(theme_a: str, theme_b: str) -> float:
    """Jaccard similarity over the words of two n-grams."""
    words_a = set(theme_a.split(" "))
    words_b = set(theme_b.split(" "))
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def calculate_thematic_connection(
    text_a: str,
    text_b: str,
    config: ScoringConfig = DEFAULT_SCORING
) -> float:
    """
    Share of themes in ``text_a`` that closely match a theme of ``text_b``,
    as a 0-100 score.
    """
    themes_a = extract_themes(text_a, config.max_themes)
    themes_b = extract_themes(text_b, config.max_themes)
    if not themes_a or not themes_b:
        return 0.0

    matched = [
        theme for theme in themes_a
        if any(theme_similarity(theme, other) > config.theme_match_threshold for other in themes_b)
    ]
    return len(matched) / max(len(themes_a), len(themes_b)) * 100
