"""Tests for fuzzy word matching."""

from __future__ import annotations

import pytest

from reel.index.fuzzy import fuzzy_score, is_length_skewed, levenshtein_distance, word_score


class TestLevenshteinDistance:
    """Test levenshtein_distance."""

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            ("kitten", "sitting", 3),
            ("wigdets", "widgets", 2),
            ("hello", "hallo", 1),
            ("", "abc", 3),
            ("abc", "", 3),
            ("same", "same", 0),
        ],
    )
    def test_distance(self, a: str, b: str, expected: int) -> None:
        """Test known distances."""
        assert levenshtein_distance(a, b) == expected

    def test_symmetric(self) -> None:
        assert levenshtein_distance("flaw", "lawn") == levenshtein_distance("lawn", "flaw") == 2

    def test_max_distance_short_circuits(self) -> None:
        """Test the early exit above max_distance."""
        assert levenshtein_distance("abcdefgh", "zzzzzzzz", max_distance=2) == 3
        assert levenshtein_distance("ab", "abcdef", max_distance=2) == 3

    def test_max_distance_keeps_exact_result_within_bound(self) -> None:
        assert levenshtein_distance("wigdets", "widgets", max_distance=2) == 2


class TestWordScore:
    """Test word_score and is_length_skewed."""

    def test_prefix_match(self) -> None:
        """Test that a prefix scores ten plus its length."""
        assert word_score("wid", "widgets") == 13.0

    def test_exact_word_counts_as_prefix(self) -> None:
        assert word_score("widgets", "widgets") == 17.0

    def test_typo_within_two_edits(self) -> None:
        """Test the edit-distance score."""
        assert word_score("wigdets", "widgets") == pytest.approx(1 / 3)
        assert word_score("widgeds", "widgets") == pytest.approx(1 / 2)

    def test_too_many_edits(self) -> None:
        """Test that three edits score nothing."""
        assert word_score("apple", "orange") == 0.0

    def test_length_skew_skipped(self) -> None:
        """Test that skewed pairs are detected."""
        assert is_length_skewed("documentation", "doc")
        assert word_score("dox", "documentation") == 0.0

    def test_short_words_not_skewed(self) -> None:
        assert not is_length_skewed("abcdefg", "ab")


class TestFuzzyScore:
    """Test fuzzy_score."""

    def test_best_match_per_query_word_summed(self) -> None:
        """Test that the best score per query word is summed."""
        score = fuzzy_score(["wigdets", "gad"], ["widgets", "gadgets", "widget"])
        assert score == pytest.approx(1 / 3 + 13)

    def test_no_candidates(self) -> None:
        assert fuzzy_score(["anything"], []) == 0.0

    def test_prefix_outranks_edit_distance(self) -> None:
        """Test that a prefix hit beats any typo hit."""
        assert fuzzy_score(["wid"], ["widgets"]) > fuzzy_score(["wigdets"], ["widgets"])
