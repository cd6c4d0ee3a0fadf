"""Tests for word-level similarity and keyword extraction."""

from alwrity.services.similarity import jaccard_similarity, extract_keywords


class TestJaccardSimilarity:
    """Test suite for jaccard_similarity."""

    def test_identical_text_is_one(self):
        """A non-empty text is fully similar to itself."""
        assert jaccard_similarity("apostille services for documents",
                                  "apostille services for documents") == 1.0

    def test_both_empty_is_zero(self):
        """Two empty texts are defined as not similar."""
        assert jaccard_similarity("", "") == 0.0

    def test_case_insensitive(self):
        assert jaccard_similarity("Notary Public", "notary public") == 1.0

    def test_partial_overlap(self):
        # {a, b, c} vs {b, c, d}: 2 shared of 4
        assert jaccard_similarity("a b c", "b c d") == 0.5

    def test_one_empty_is_zero(self):
        assert jaccard_similarity("something here", "") == 0.0


class TestExtractKeywords:
    """Test suite for extract_keywords."""

    def test_drops_short_words_and_stop_words(self):
        """Only words longer than three characters that are not stop words remain."""
        text = "The notary and their clients should review this document"
        assert extract_keywords(text) == ["notary", "clients", "review", "document"]

    def test_keeps_duplicates_in_order(self):
        assert extract_keywords("Travel travel Documents") == ["travel", "travel", "documents"]

    def test_empty_text(self):
        assert extract_keywords("") == []
