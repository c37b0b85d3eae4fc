"""Tests for hiragana_match.core.scoring – star rating."""

from __future__ import annotations

import pytest

from hiragana_match.core.scoring import (
    MAX_STARS,
    RoundResult,
    base_stars,
    game_stats,
    stars_for,
    stars_for_result,
)


# ---------------------------------------------------------------------------
# RoundResult
# ---------------------------------------------------------------------------

class TestRoundResult:
    def test_accuracy(self):
        assert RoundResult(3, 4, 10.0).accuracy == pytest.approx(0.75)

    def test_accuracy_zero_total(self):
        assert RoundResult(0, 0, 10.0).accuracy == 0.0

    def test_accuracy_clamped(self):
        assert RoundResult(7, 5, 1.0).accuracy == 1.0
        assert RoundResult(-1, 5, 1.0).accuracy == 0.0

    def test_average_time(self):
        assert RoundResult(5, 5, 20.0).average_time_per_question == pytest.approx(4.0)

    def test_average_time_zero_total(self):
        assert RoundResult(0, 0, 20.0).average_time_per_question == 0.0


# ---------------------------------------------------------------------------
# Accuracy bands
# ---------------------------------------------------------------------------

class TestBaseStars:
    @pytest.mark.parametrize(
        "accuracy, expected",
        [(1.0, 3), (0.99, 2), (0.8, 2), (0.79, 1), (0.6, 1), (0.59, 0), (0.0, 0)],
    )
    def test_bands(self, accuracy: float, expected: int):
        assert base_stars(accuracy) == expected


# ---------------------------------------------------------------------------
# stars_for
# ---------------------------------------------------------------------------

class TestStarsFor:
    @pytest.mark.parametrize("total", [1, 5, 10, 100])
    def test_perfect_and_fast_is_capped(self, total: int):
        assert stars_for(total, total, 0.01 * total) == MAX_STARS

    def test_perfect_and_slow(self):
        assert stars_for(5, 5, 300.0) == 3

    def test_all_wrong_earns_nothing(self):
        assert stars_for(0, 5, 100.0) == 0

    def test_speed_bonus_lifts_two_to_three(self):
        assert stars_for(4, 5, 10.0) == 3

    def test_speed_bonus_at_boundary(self):
        # 30s / 5 questions is exactly the bonus threshold
        assert stars_for(3, 5, 30.0) == 2

    def test_no_bonus_just_over_boundary(self):
        assert stars_for(3, 5, 30.5) == 1

    def test_no_bonus_without_base_star(self):
        assert stars_for(2, 5, 1.0) == 0

    def test_zero_questions(self):
        assert stars_for(0, 0, 0.0) == 0

    def test_never_exceeds_max(self):
        for correct in range(0, 11):
            for elapsed in (0.0, 5.0, 60.0, 600.0):
                assert 0 <= stars_for(correct, 10, elapsed) <= MAX_STARS

    def test_result_wrapper(self):
        assert stars_for_result(RoundResult(4, 5, 10.0)) == stars_for(4, 5, 10.0)


class TestGameStats:
    def test_fields(self):
        stats = game_stats(4, 5, 10.0)
        assert stats.accuracy == pytest.approx(0.8)
        assert stats.stars == 3
        assert stats.time_taken == 10.0
        assert stats.average_time_per_question == pytest.approx(2.0)

    def test_negative_time_clamped(self):
        assert game_stats(1, 1, -3.0).time_taken == 0.0
