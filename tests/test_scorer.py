"""Tests for OCR candidate scoring and selection."""

import pytest

from title_ocr.extraction.fields import ScoredCandidate
from title_ocr.extraction.scorer import (
    count_keywords,
    rank_candidates,
    score_candidate,
    select_best,
)


class TestScoreCandidate:
    """Tests for the additive scoring rule."""

    def test_empty(self) -> None:
        assert score_candidate("") == 0

    def test_length_only(self) -> None:
        assert score_candidate("abc") == 3

    def test_keyword(self) -> None:
        assert score_candidate("MAKE") == 4 + 50

    def test_keyword_case_insensitive(self) -> None:
        assert score_candidate("vin") == 3 + 50

    def test_each_keyword_occurrence_counts(self) -> None:
        assert count_keywords("VIN YEAR MAKE MODEL") == 4
        assert count_keywords("MAKE MAKE") == 2

    def test_keyword_inside_word_ignored(self) -> None:
        assert count_keywords("REMAKES") == 0

    def test_vin_token(self) -> None:
        assert score_candidate("1HGCM82633A004352") == 17 + 100

    def test_year_token(self) -> None:
        assert score_candidate("2019") == 4 + 30

    def test_plate_token(self) -> None:
        assert score_candidate("7ABC123") == 7 + 40

    def test_all_letter_token_is_not_a_plate(self) -> None:
        assert score_candidate("TOYOTA") == 6

    def test_bonuses_are_flat(self) -> None:
        assert score_candidate("2019 2020") == 9 + 30

    @pytest.mark.parametrize(
        "base",
        ["", "noise", "VIN 1HGCM82633A004352", "YEAR 2019 MAKE TOYOTA", "7ABC123"],
    )
    def test_extra_keyword_adds_at_least_fifty(self, base: str) -> None:
        assert score_candidate(base + " MAKE") >= score_candidate(base) + 50


class TestSelection:
    """Tests for ranking and best-candidate selection."""

    def test_empty_list(self) -> None:
        assert select_best([]) is None

    def test_picks_highest_score(self) -> None:
        texts = ["short noise", "VIN 1HGCM82633A004352", "YEAR"]
        assert select_best(texts) == "VIN 1HGCM82633A004352"

    def test_tie_goes_to_first(self) -> None:
        assert select_best(["AAAA", "BBBB"]) == "AAAA"

    def test_rank_preserves_order(self) -> None:
        ranked = rank_candidates(["abc", "MAKE"])
        assert ranked == [ScoredCandidate("abc", 3), ScoredCandidate("MAKE", 54)]
