# ABOUTME: Unit tests for the book matcher.
# ABOUTME: Covers title, biography, author, year, and series rules plus the title-similarity gate.

from bookwish.matching.books import (
    find_best_book_match,
    rank_books,
    score_book,
    select_book,
)
from bookwish.matching.candidate import MatchCandidate
from bookwish.matching.scoring import BELOW_THRESHOLD


def _book(title: str, **kwargs) -> MatchCandidate:
    return MatchCandidate(name=title, **kwargs)


class TestScoreBook:
    """Tests for per-candidate book scoring."""

    def test_exact_classic(self) -> None:
        """An exact, old, short title by the right author collects every bonus."""
        scored = score_book(
            _book("Dracula", author_name="Bram Stoker", release_date="1897-05-26"),
            "Dracula",
            "Bram Stoker",
        )
        assert scored.score == 710
        assert "+200 exact title match" in scored.reasons
        assert "+150 exact author match" in scored.reasons
        assert "+50 published 1897" in scored.reasons
        assert "+40 short title match" in scored.reasons
        assert scored.metrics["title_similarity"] == 1.0

    def test_core_title_match(self) -> None:
        """A subtitle does not block a core title match."""
        scored = score_book(_book("Dune: Deluxe Edition"), "Dune", "")
        assert "+150 core title match" in scored.reasons

    def test_biography_of_requested_author(self) -> None:
        """Books about the author are penalized several ways."""
        scored = score_book(_book("The Life of Bram Stoker"), "Dracula", "Bram Stoker")
        assert "-300 biography of the requested author" in scored.reasons
        assert "-150 biography phrase in title" in scored.reasons
        assert "-100 author name in title" in scored.reasons
        assert scored.score < 0

    def test_subject_by_biographer(self) -> None:
        """'<Author> by <someone>' titles are treated as biographies."""
        scored = score_book(_book("Bram Stoker by Paul Murray"), "Dracula", "Bram Stoker")
        assert "-200 title reads '<author> by <someone else>'" in scored.reasons

    def test_series_volume_penalty(self) -> None:
        """Series volumes lose points against a short requested title."""
        scored = score_book(_book("Dune", series_title="Dune Chronicles"), "Dune", "")
        assert "-40 series volume (Dune Chronicles)" in scored.reasons

    def test_recent_publication_penalty(self) -> None:
        """Recent editions lose a few points."""
        scored = score_book(_book("Dracula", release_date="2015-01-01"), "Dracula", "")
        assert "-15 published 2015" in scored.reasons

    def test_mid_century_publication_bonus(self) -> None:
        """Pre-1980 publications get a smaller bonus."""
        scored = score_book(_book("Carrie", release_date="1974-04-05"), "Carrie", "")
        assert "+25 published 1974" in scored.reasons

    def test_popularity_bonus(self) -> None:
        """Ratings add up to 20 points."""
        scored = score_book(_book("Carrie", rating=4.5), "Carrie", "")
        assert "+18 rating 4.5" in scored.reasons

    def test_missing_author_skips_author_rules(self) -> None:
        """Without a requested author no author rule fires."""
        scored = score_book(_book("Carrie", author_name="Stephen King"), "Carrie", "")
        assert not any("author" in reason for reason in scored.reasons)

    def test_unrelated_title_penalized(self) -> None:
        """Very different titles take the mismatch penalty."""
        scored = score_book(_book("The Shining"), "Carrie", "Stephen King")
        assert "-350 title similarity below 0.25" in scored.reasons


class TestSelectBook:
    """Tests for selecting the best book record."""

    def test_novel_beats_biography(self) -> None:
        """Dracula is chosen over a biography of its author."""
        candidates = [
            _book("The Life of Bram Stoker", author_name="Paul Murray"),
            _book("Dracula", author_name="Bram Stoker", release_date="1897-05-26"),
        ]
        best = find_best_book_match(candidates, "Dracula", "Bram Stoker")
        assert best is not None
        assert best.title == "Dracula"

    def test_title_gate_rejects_high_score_with_weak_title(self) -> None:
        """A strong author match cannot rescue a weak title match."""
        candidate = _book("Dune Messiah Collected Omnibus", author_name="Frank Herbert")
        selection = select_book([candidate], "Dune", "Frank Herbert")
        assert selection.ranked[0].score >= 70
        assert selection.ranked[0].metrics["title_similarity"] < 0.3
        assert selection.candidate is None
        assert selection.rejection == BELOW_THRESHOLD

    def test_nothing_selected_from_empty(self) -> None:
        """No candidates means no match."""
        assert find_best_book_match([], "Dracula", "Bram Stoker") is None


class TestRankBooks:
    """Tests for rank_books."""

    def test_sorted_best_first(self) -> None:
        """Ranked results are in descending score order."""
        ranked = rank_books(
            [_book("The Shining"), _book("Carrie"), _book("Carrie: A Study")],
            "Carrie",
            "Stephen King",
        )
        scores = [s.score for s in ranked]
        assert scores == sorted(scores, reverse=True)
        assert ranked[0].candidate.title == "Carrie"


class TestBracketedTitles:
    """Titles that open with '(' or ':' have no core title to compare."""

    def test_unrelated_bracketed_titles_not_matched(self) -> None:
        """Two bracketed titles are compared whole, so unrelated ones stay apart."""
        candidate = _book("(Unabridged) Totally Different Book", author_name="Bram Stoker")
        scored = score_book(candidate, "(Dracula)", "Bram Stoker")

        assert scored.metrics["title_similarity"] < 0.25
        assert "-350 title similarity below 0.25" in scored.reasons
        assert "+150 core title match" not in scored.reasons
        assert find_best_book_match([candidate], "(Dracula)", "Bram Stoker") is None

    def test_identical_bracketed_titles_still_match(self) -> None:
        """The same bracketed title is still an exact match."""
        candidate = _book("(Dracula)", author_name="Bram Stoker")
        assert find_best_book_match([candidate], "(Dracula)", "Bram Stoker") == candidate


class TestDeterminism:
    """Book matching is repeatable and independent of candidate order."""

    CANDIDATES = (
        _book("The Life of Bram Stoker", author_name="Paul Murray"),
        _book("Dracula", author_name="Bram Stoker", release_date="1897-05-26"),
        _book("Dracula's Guest", author_name="Bram Stoker", release_date="1914-01-01"),
        _book("The Annotated Dracula", author_name="Leonard Wolf"),
    )

    def test_repeated_calls_agree(self) -> None:
        """The same inputs give the same winner and score every time."""
        first = select_book(self.CANDIDATES, "Dracula", "Bram Stoker")
        second = select_book(self.CANDIDATES, "Dracula", "Bram Stoker")

        assert first.candidate == second.candidate
        assert first.best is not None and second.best is not None
        assert first.best.score == second.best.score
        assert find_best_book_match(self.CANDIDATES, "Dracula", "Bram Stoker") == first.candidate

    def test_reversed_input_same_result(self) -> None:
        """Reversing the candidate list changes neither the winner nor any score."""
        forward = rank_books(self.CANDIDATES, "Dracula", "Bram Stoker")
        backward = rank_books(self.CANDIDATES[::-1], "Dracula", "Bram Stoker")

        assert {s.candidate.title: s.score for s in forward} == {
            s.candidate.title: s.score for s in backward
        }
        assert find_best_book_match(
            self.CANDIDATES, "Dracula", "Bram Stoker"
        ) == find_best_book_match(self.CANDIDATES[::-1], "Dracula", "Bram Stoker")
