"""Star rating for a finished round.

Stars come from accuracy bands, with one bonus star for answering quickly:

  * accuracy 100%        -> 3
  * accuracy 80% .. <100% -> 2
  * accuracy 60% .. <80%  -> 1
  * below 60%            -> 0

A round whose average time per question is at most ``SPEED_BONUS_SECONDS``
earns one extra star, capped at ``MAX_STARS``, but only if it already earned
at least one.
"""

from __future__ import annotations

from dataclasses import dataclass

MAX_STARS = 3
SPEED_BONUS_SECONDS = 6.0


@dataclass(frozen=True)
class RoundResult:
    """Raw outcome of one round."""

    correct: int
    total: int
    elapsed_seconds: float

    @property
    def accuracy(self) -> float:
        if self.total <= 0:
            return 0.0
        return max(0.0, min(1.0, self.correct / self.total))

    @property
    def average_time_per_question(self) -> float:
        if self.total <= 0:
            return 0.0
        return max(0.0, self.elapsed_seconds) / self.total


@dataclass(frozen=True)
class GameStats:
    accuracy: float
    stars: int
    time_taken: float
    average_time_per_question: float


def base_stars(accuracy: float) -> int:
    """Stars earned from accuracy alone."""
    if accuracy >= 1.0:
        return 3
    if accuracy >= 0.8:
        return 2
    if accuracy >= 0.6:
        return 1
    return 0


def stars_for(correct: int, total: int, elapsed_seconds: float) -> int:
    """Stars (0-3) for *correct* answers out of *total* in *elapsed_seconds*."""
    result = RoundResult(correct=correct, total=total, elapsed_seconds=elapsed_seconds)
    if result.total <= 0:
        return 0
    stars = base_stars(result.accuracy)
    if stars > 0 and result.average_time_per_question <= SPEED_BONUS_SECONDS:
        stars = min(MAX_STARS, stars + 1)
    return stars


def stars_for_result(result: RoundResult) -> int:
    return stars_for(result.correct, result.total, result.elapsed_seconds)


def game_stats(correct: int, total: int, elapsed_seconds: float) -> GameStats:
    result = RoundResult(correct=correct, total=total, elapsed_seconds=elapsed_seconds)
    return GameStats(
        accuracy=result.accuracy,
        stars=stars_for_result(result),
        time_taken=max(0.0, float(elapsed_seconds)),
        average_time_per_question=result.average_time_per_question,
    )
