# ABOUTME: Unit tests for the string similarity primitives.
# ABOUTME: Covers Levenshtein distance, normalized similarity, text normalization, and rounding.

import pytest

from bookwish.matching.similarity import (
    levenshtein_distance,
    normalize_text,
    round_half_up,
    similarity,
)


class TestLevenshteinDistance:
    """Tests for levenshtein_distance."""

    def test_identical_strings(self) -> None:
        """Identical strings are zero edits apart."""
        assert levenshtein_distance("dracula", "dracula") == 0

    def test_classic_example(self) -> None:
        """kitten -> sitting takes three edits."""
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_substitution_costs_one(self) -> None:
        """A substitution counts as one edit, not a delete plus an insert."""
        assert levenshtein_distance("carrie", "cassie") == 2
        assert levenshtein_distance("abc", "abd") == 1

    def test_empty_side(self) -> None:
        """Distance to an empty string is the other string's length."""
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abcd", "") == 4

    def test_symmetric(self) -> None:
        """Argument order does not change the distance."""
        assert levenshtein_distance("stephen", "steve") == levenshtein_distance("steve", "stephen")

    def test_long_strings_are_not_truncated(self) -> None:
        """Long inputs are compared in full."""
        assert levenshtein_distance("a" * 300, "b" * 300) == 300


class TestSimilarity:
    """Tests for the normalized similarity score."""

    def test_identical_is_one(self) -> None:
        """A string is fully similar to itself."""
        assert similarity("stephen king", "stephen king") == 1.0

    def test_both_empty_is_one(self) -> None:
        """Two empty strings are treated as identical."""
        assert similarity("", "") == 1.0

    def test_one_empty_is_zero(self) -> None:
        """An empty string has no similarity to a non-empty one."""
        assert similarity("", "dune") == 0.0
        assert similarity("dune", "") == 0.0

    def test_scaled_by_longer_length(self) -> None:
        """Similarity is 1 - distance / max length."""
        assert similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)

    def test_bounded(self) -> None:
        """Completely different strings bottom out at zero, never negative."""
        assert similarity("abc", "xyz") == 0.0

    def test_symmetric(self) -> None:
        """similarity(a, b) == similarity(b, a)."""
        assert similarity("jane doe", "john smith") == similarity("john smith", "jane doe")


class TestNormalizeText:
    """Tests for normalize_text."""

    def test_lowercases_and_drops_periods(self) -> None:
        """Initials with periods compare equal to initials without."""
        assert normalize_text("J.R.R. Tolkien") == "jrr tolkien"

    def test_collapses_whitespace(self) -> None:
        """Runs of whitespace collapse to one space and the ends are trimmed."""
        assert normalize_text("  Ursula   K.  Le Guin ") == "ursula k le guin"

    def test_none_is_empty(self) -> None:
        """None normalizes to an empty string."""
        assert normalize_text(None) == ""


class TestRoundHalfUp:
    """Tests for round_half_up."""

    def test_half_goes_up(self) -> None:
        """x.5 rounds away from zero for positive values."""
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1

    def test_below_half_goes_down(self) -> None:
        """Values under .5 round down."""
        assert round_half_up(37.4) == 37

    def test_returns_int(self) -> None:
        """The result is an int usable as a score delta."""
        assert isinstance(round_half_up(99.9), int)
