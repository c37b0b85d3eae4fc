from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from hiragana_match.core.questions import Question
from hiragana_match.core.scoring import RoundResult


@dataclass
class AnswerResult:
    """Outcome of a single answer."""

    correct: bool
    chosen_concept: str
    expected_concept: str


class MatchingSession:
    """Tracks one round of picture-matching questions.

    The clock starts when the session is created and stops when the last
    question is answered, so ``result()`` reports the time actually spent.
    """

    def __init__(
        self,
        level: int,
        questions: list[Question],
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        """Start a round for *level* over *questions*; *clock* defaults to ``time.monotonic``."""
        self._level = level
        self._questions = list(questions)
        self._clock = clock or time.monotonic
        self._index = 0
        self._correct = 0
        self._start_time = self._clock()
        self._end_time: Optional[float] = None
        self._answers: list[AnswerResult] = []

    @property
    def level(self) -> int:
        return self._level

    @property
    def index(self) -> int:
        """Index of the current question (0-based)."""
        return self._index

    @property
    def total_questions(self) -> int:
        return len(self._questions)

    @property
    def correct_count(self) -> int:
        return self._correct

    @property
    def answers(self) -> list[AnswerResult]:
        return list(self._answers)

    def current_question(self) -> Question:
        """Return the current question; raises IndexError once the round is over."""
        return self._questions[self._index]

    def is_complete(self) -> bool:
        return self._index >= len(self._questions)

    def is_empty(self) -> bool:
        """True when there was nothing to play (e.g. an undefined level)."""
        return not self._questions

    def submit(self, concept: str) -> AnswerResult:
        """Answer the current question with *concept* and advance."""
        if self.is_complete():
            return AnswerResult(correct=False, chosen_concept=concept, expected_concept="")
        question = self._questions[self._index]
        result = AnswerResult(
            correct=question.is_correct(concept),
            chosen_concept=concept,
            expected_concept=question.correct_answer.concept,
        )
        if result.correct:
            self._correct += 1
        self._answers.append(result)
        self._index += 1
        if self.is_complete():
            self._end_time = self._clock()
        return result

    def elapsed_seconds(self) -> float:
        end = self._end_time if self._end_time is not None else self._clock()
        return max(0.0, end - self._start_time)

    def progress(self) -> float:
        if not self._questions:
            return 0.0
        return self._index / len(self._questions)

    def result(self) -> RoundResult:
        return RoundResult(
            correct=self._correct,
            total=len(self._questions),
            elapsed_seconds=self.elapsed_seconds(),
        )
