"""Word-level text similarity and keyword extraction."""

from typing import List

from ..config import KEYWORD_STOP_WORDS, MIN_KEYWORD_LENGTH


def _word_set(text: str) -> set:
    return set((text or "").lower().split())


def jaccard_similarity(text_a: str, text_b: str) -> float:
    """
    Jaccard similarity of the lower-cased word sets of two texts.

    Returns 0.0 when both texts are empty.
    """
    words_a = _word_set(text_a)
    words_b = _word_set(text_b)
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def extract_keywords(text: str) -> List[str]:
    """
    Extract keywords: lower-cased tokens longer than three characters
    that are not stop words.

    Order is preserved and duplicates are kept.
    """
    return [
        word for word in (text or "").lower().split()
        if len(word) > MIN_KEYWORD_LENGTH and word not in KEYWORD_STOP_WORDS
    ]
